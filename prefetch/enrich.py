from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, MutableMapping, Optional, Sequence, Tuple

import requests

from catalog.mapper import resolve_asset_url


log = logging.getLogger(__name__)

Probe = Callable[[str], Optional[int]]
ProbeCallback = Callable[[MutableMapping[str, Any], Optional[int]], None]

DEFAULT_CONCURRENCY = 6


def fetch_content_length(
    session: requests.Session,
    url: str,
    timeout: Optional[float] = None,
) -> Optional[int]:
    """
    HEAD `url` and return its Content-Length in bytes.
    Any failure (transport error, non-2xx, missing or non-numeric header) -> None.
    """
    try:
        r = session.head(url, allow_redirects=True, timeout=timeout)
    except requests.RequestException as e:
        log.debug("HEAD %s failed: %s", url, e)
        return None
    if not 200 <= r.status_code < 300:
        return None
    length = r.headers.get("content-length")
    if not length:
        return None
    try:
        parsed = float(length)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return int(parsed)


class _Cursor:
    """Shared claim pointer over the target list; each index is handed out once."""

    def __init__(self, size: int):
        self._next = 0
        self._size = size
        self._lock = threading.Lock()

    def claim(self) -> Optional[int]:
        with self._lock:
            if self._next >= self._size:
                return None
            i = self._next
            self._next += 1
            return i


def enrich_sizes(
    records: Sequence[MutableMapping[str, Any]],
    probe: Probe,
    concurrency: int = DEFAULT_CONCURRENCY,
    on_probe: Optional[ProbeCallback] = None,
) -> int:
    """
    Probe every record that resolves to an asset URL and write the discovered
    byte count into record["file_size"] (and record["properties"]["file_size"]
    when properties is a mapping). Failed or non-positive probes leave the
    record as it was.

    Runs `concurrency` workers that pull the next unclaimed target until none
    remain. Each worker only touches the record it claimed.

    Returns the number of records updated.
    """
    targets: List[Tuple[int, str]] = []
    for index, record in enumerate(records):
        url = resolve_asset_url(record)
        if url:
            targets.append((index, url))
    if not targets:
        return 0

    cursor = _Cursor(len(targets))
    updated = [0] * max(1, concurrency)

    def worker(slot: int) -> None:
        while True:
            claimed = cursor.claim()
            if claimed is None:
                return
            index, url = targets[claimed]
            size = probe(url)
            record = records[index]
            if size is not None and size > 0:
                record["file_size"] = size
                props = record.get("properties")
                if isinstance(props, MutableMapping):
                    props["file_size"] = size
                updated[slot] += 1
            if on_probe is not None:
                on_probe(record, size)

    workers = max(1, min(int(concurrency), len(targets)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="size-probe") as pool:
        futures = [pool.submit(worker, slot) for slot in range(workers)]
        for f in futures:
            # surface errors from probe/on_probe callbacks
            f.result()

    total = sum(updated)
    log.debug("enriched %d/%d records", total, len(targets))
    return total
