from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import urlparse

import requests

from common.types import Asset, SortKey
from catalog.mapper import map_asset
from catalog.normalize import format_bytes, format_date
from catalog.sorting import sort_assets


log = logging.getLogger(__name__)

DEFAULT_ERROR = "Failed to load data."
EMPTY_MESSAGE = "No assets found."


class SnapshotError(RuntimeError):
    """Snapshot could not be fetched or decoded."""


@dataclass
class GalleryState:
    """
    Mutable state of one gallery view.

    request_id increases on every load; a finished load is applied only if
    its id is still the latest one (last request wins).
    """
    assets: List[Asset] = field(default_factory=list)
    is_loading: bool = False
    loading_message: str = ""
    error: str = ""
    request_id: int = 0
    sort_key: SortKey = SortKey.DATE_DESC


@dataclass(frozen=True)
class GalleryStats:
    asset_count: str
    total_size: str


@dataclass(frozen=True)
class AssetCard:
    title: str
    badge: str
    date: str
    provider: str
    resolution: str
    file_size: str
    uuid: str
    uuid_href: Optional[str]
    thumbnail: Optional[str]
    asset_url: str
    size_known: bool


@dataclass(frozen=True)
class GalleryView:
    stats: GalleryStats
    cards: List[AssetCard]
    sort_key: SortKey
    is_loading: bool
    loading_message: str
    error: str

    @property
    def empty_message(self) -> Optional[str]:
        return None if self.cards else EMPTY_MESSAGE


# -------------------------
# Fetch
# -------------------------
def is_valid_url(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def fetch_snapshot(source: Union[str, Path], session: Optional[requests.Session] = None) -> Dict[str, Any]:
    """
    Read a snapshot from an http(s) URL or a local path.
    Raises SnapshotError with a human-readable message on any failure.
    """
    src = str(source)
    if src.startswith(("http://", "https://")):
        s = session or requests.Session()
        try:
            r = s.get(src, headers={"Cache-Control": "no-store"})
        except requests.RequestException as e:
            raise SnapshotError(f"Snapshot request failed: {e}") from e
        if not 200 <= r.status_code < 300:
            raise SnapshotError(f"Snapshot not found: {r.status_code}")
        try:
            data = r.json()
        except ValueError as e:
            raise SnapshotError("Snapshot is not valid JSON") from e
    else:
        path = Path(src)
        if not path.is_file():
            raise SnapshotError(f"Snapshot not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotError(f"Snapshot unreadable: {e}") from e
        except ValueError as e:
            raise SnapshotError("Snapshot is not valid JSON") from e
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    return data


# -------------------------
# Load cycle
# -------------------------
def begin_load(state: GalleryState, message: str = "Loading snapshot...") -> int:
    state.request_id += 1
    state.error = ""
    state.is_loading = True
    state.loading_message = message
    return state.request_id


def complete_load(state: GalleryState, request_id: int, payload: Dict[str, Any]) -> bool:
    """Apply a fetched snapshot. Returns False when a newer load superseded this one."""
    if request_id != state.request_id:
        log.debug("dropping stale snapshot result %d (latest %d)", request_id, state.request_id)
        return False
    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list):
        results = []
    state.assets = [map_asset(r) for r in results]
    state.is_loading = False
    state.loading_message = ""
    return True


def fail_load(state: GalleryState, request_id: int, message: str) -> bool:
    if request_id != state.request_id:
        log.debug("dropping stale snapshot failure %d (latest %d)", request_id, state.request_id)
        return False
    state.is_loading = False
    state.loading_message = ""
    state.error = message or DEFAULT_ERROR
    state.assets = []
    return True


def load_assets(
    state: GalleryState,
    source: Union[str, Path],
    fetch: Callable[[Union[str, Path]], Dict[str, Any]] = fetch_snapshot,
) -> bool:
    """Run one full load cycle synchronously. Returns whether the result was applied."""
    rid = begin_load(state)
    try:
        payload = fetch(source)
    except SnapshotError as e:
        log.warning("snapshot load failed: %s", e)
        return fail_load(state, rid, str(e))
    return complete_load(state, rid, payload)


def set_sort(state: GalleryState, key: Union[SortKey, str]) -> SortKey:
    state.sort_key = SortKey.parse(key, default=state.sort_key)
    return state.sort_key


# -------------------------
# View
# -------------------------
def render_stats(assets: List[Asset]) -> GalleryStats:
    if not assets:
        return GalleryStats(asset_count="0", total_size="-")
    known = [a.file_size_bytes for a in assets if math.isfinite(a.file_size_bytes)]
    return GalleryStats(
        asset_count=str(len(assets)),
        total_size=f"{format_bytes(sum(known))} (known {len(known)}/{len(assets)})",
    )


def build_card(asset: Asset) -> AssetCard:
    uuid_is_link = asset.uuid != "Unknown" and is_valid_url(asset.uuid)
    return AssetCard(
        title=asset.title,
        badge=asset.platform,
        date=format_date(asset.acquisition_start),
        provider=asset.provider,
        resolution=asset.resolution,
        file_size=format_bytes(asset.file_size_bytes),
        uuid=asset.uuid,
        uuid_href=asset.uuid if uuid_is_link else None,
        thumbnail=asset.thumbnail if is_valid_url(asset.thumbnail) else None,
        asset_url=asset.asset_url,
        size_known=asset.has_known_size,
    )


def build_cards(assets: List[Asset]) -> List[AssetCard]:
    return [build_card(a) for a in assets]


def render(state: GalleryState) -> GalleryView:
    ordered = sort_assets(state.assets, state.sort_key)
    return GalleryView(
        stats=render_stats(ordered),
        cards=build_cards(ordered),
        sort_key=state.sort_key,
        is_loading=state.is_loading,
        loading_message=state.loading_message,
        error=state.error,
    )
