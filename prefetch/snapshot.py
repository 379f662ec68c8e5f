from __future__ import annotations

"""
Build offline gallery snapshots from the OpenAerialMap catalog.

Writes, under prefetch.output_dir:
  - one file per configured region (single bbox search, all results kept)
  - a global file: every catalog page, keeping only records >= min_size_bytes

Each record's file_size is refreshed from a HEAD probe of its asset URL and
geometry fields (geojson, bbox, footprint) are dropped to keep files small.

Examples:
  python -m prefetch.snapshot
  python -m prefetch.snapshot --config config/params.yaml --only regions
  python -m prefetch.snapshot --only global --log-level DEBUG
"""

import argparse
import json
import math
import sys
import threading
from functools import partial
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Sequence

import requests

from common.config import DEFAULT_CONFIG_PATH, load_config
from common.logging_setup import get_logger, setup_logging
from common.utils import clamp, iso_now_ms
from catalog.normalize import format_bytes, to_number
from prefetch.catalog_client import DEFAULT_BASE_URL, CatalogClient, CatalogError
from prefetch.enrich import Probe, enrich_sizes, fetch_content_length


log = get_logger("prefetch")

GEOMETRY_KEYS = ("geojson", "bbox", "footprint")
GIB = 1024 ** 3


def remove_geometry(record: Dict[str, Any]) -> Dict[str, Any]:
    for key in GEOMETRY_KEYS:
        record.pop(key, None)
    return record


def write_snapshot(path: Path, payload: Dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


class ProgressIndicator:
    """
    One character per probe on `stream`:
      "."  plain mode
      "o"  size mode, record >= threshold bytes
      "x"  size mode, smaller or unknown
    """

    def __init__(self, stream: Optional[IO[str]] = None, size_mode: bool = False, threshold: int = GIB):
        self.stream = stream if stream is not None else sys.stderr
        self.size_mode = size_mode
        self.threshold = threshold
        self._lock = threading.Lock()

    def __call__(self, record: Dict[str, Any], size: Optional[int]) -> None:
        if self.size_mode:
            actual = size if size is not None else to_number(record.get("file_size"))
            big = math.isfinite(actual) and actual >= self.threshold
            mark = "o" if big else "x"
        else:
            mark = "."
        with self._lock:
            self.stream.write(mark)
            self.stream.flush()

    def finish(self) -> None:
        self.stream.write("\n")
        self.stream.flush()


def build_region_snapshot(
    client: CatalogClient,
    region: Dict[str, Any],
    probe: Probe,
    concurrency: int,
    stream: Optional[IO[str]] = None,
) -> Dict[str, Any]:
    """Single bbox search; every result kept, sizes enriched, geometry dropped."""
    payload = client.search(bbox=region.get("bbox"), limit=region.get("limit"))
    results = CatalogClient.results_of(payload)
    log.info("region %s: %d items, checking sizes...", region.get("name"), len(results))

    progress = ProgressIndicator(stream)
    enrich_sizes(results, probe, concurrency=concurrency, on_probe=progress)
    progress.finish()

    return {**payload, "results": [remove_geometry(r) for r in results if isinstance(r, dict)]}


def build_global_snapshot(
    client: CatalogClient,
    cfg: Dict[str, Any],
    probe: Probe,
    concurrency: int,
    stream: Optional[IO[str]] = None,
) -> Dict[str, Any]:
    """
    Walk every catalog page of `chunk_size` records and keep the large ones.

    The page count comes from meta.found of a limit=1 probe request, or from
    `fallback_total` when the API omits it. Paging stops at the first empty
    page or the first failed page; results gathered so far are kept.
    """
    chunk = clamp(int(cfg.get("chunk_size", 500)), 1, 10_000)
    min_size = int(cfg.get("min_size_bytes", GIB))
    fallback = int(cfg.get("fallback_total", 19962))

    head = client.search(limit=1)
    total = CatalogClient.total_found(head, fallback)
    pages = math.ceil(total / chunk)
    meta = head.get("meta") if isinstance(head.get("meta"), dict) else {}
    log.info("global: %d items, %d pages of %d", total, pages, chunk)

    kept: List[Dict[str, Any]] = []
    for page in range(1, pages + 1):
        try:
            results = CatalogClient.results_of(client.search(limit=chunk, page=page))
            if not results:
                log.info("page %d: no results, stopping", page)
                break
            log.info("page %d/%d: %d items fetched, checking sizes...", page, pages, len(results))

            progress = ProgressIndicator(stream, size_mode=True, threshold=min_size)
            enrich_sizes(results, probe, concurrency=concurrency, on_probe=progress)
            progress.finish()

            large = [r for r in results if isinstance(r, dict) and _size_or_zero(r) >= min_size]
            kept.extend(large)
            log.info(
                "page %d: %d/%d >= %s (total so far: %d)",
                page, len(large), len(results), format_bytes(min_size), len(kept),
            )
        except (CatalogError, requests.RequestException) as e:
            log.error("error fetching page %d: %s", page, e)
            break

    log.info("global data complete: %d items >= %s", len(kept), format_bytes(min_size))
    return {
        "meta": {
            **meta,
            "note": f"Filtered to items with file_size >= {format_bytes(min_size)}, geometry removed",
            "generated_at": iso_now_ms(),
        },
        "results": [remove_geometry(r) for r in kept],
    }


def _size_or_zero(record: Dict[str, Any]) -> float:
    size = to_number(record.get("file_size"))
    return size if math.isfinite(size) else 0.0


def run(P: Dict[str, Any], only: str = "all", stream: Optional[IO[str]] = None) -> List[Path]:
    """Build and write every configured snapshot; returns the written paths."""
    catalog_cfg = P.get("catalog", {})
    pre = P.get("prefetch", {})
    out_dir = Path(pre.get("output_dir", "public"))
    concurrency = clamp(int(pre.get("concurrency", 6)), 1, 64)

    session = requests.Session()
    client = CatalogClient(
        catalog_cfg.get("base_url") or DEFAULT_BASE_URL, session=session, timeout=catalog_cfg.get("timeout_s")
    )
    probe = partial(fetch_content_length, session, timeout=pre.get("probe_timeout_s"))

    written: List[Path] = []
    if only in ("all", "regions"):
        for region in pre.get("regions") or []:
            data = build_region_snapshot(client, region, probe, concurrency, stream)
            path = write_snapshot(out_dir / region.get("output", f"data-{region.get('name', 'region')}.json"), data)
            log.info("snapshot saved", extra={"extra": {"path": str(path), "items": len(data["results"])}})
            written.append(path)

    gcfg = pre.get("global") or {}
    if only in ("all", "global") and gcfg.get("enabled", True):
        data = build_global_snapshot(client, gcfg, probe, concurrency, stream)
        path = write_snapshot(out_dir / gcfg.get("output", "data-global.json"), data)
        log.info("snapshot saved", extra={"extra": {"path": str(path), "items": len(data["results"])}})
        written.append(path)
    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Fetch OpenAerialMap metadata into local snapshot files")
    ap.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="YAML params file")
    ap.add_argument("--only", choices=("all", "regions", "global"), default="all", help="Which snapshots to build")
    ap.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR (overrides LOG_LEVEL)")
    args = ap.parse_args(argv)

    if args.log_level:
        setup_logging(args.log_level, force=True)

    try:
        P = load_config(args.config)
        run(P, only=args.only)
    except Exception as e:
        log.exception("Prefetch failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
