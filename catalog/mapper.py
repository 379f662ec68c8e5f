from __future__ import annotations

import math
from typing import Any, Optional, Union

from common.types import Asset, RawRecord
from catalog.fields import resolve_nested
from catalog.normalize import normalize_asset_url, normalize_resolution, to_number


# (top-level candidates, nested "properties" candidates)
TITLE_KEYS = (("title", "name"), ("title", "name"))
ACQUISITION_KEYS = (("acquisition_start",), ("acquisition_start", "datetime"))
PLATFORM_KEYS = (("platform",), ("platform", "platform_name"))
PROVIDER_KEYS = (("provider",), ("provider",))
RESOLUTION_KEYS = (("resolution",), ("gsd", "resolution"))
FILE_SIZE_KEYS = (("file_size",), ("file_size",))
UUID_KEYS = (("uuid",), ("uuid",))
STORAGE_URL_KEYS = (("s3_path", "url", "download_url"), ("s3_path", "url", "download_url"))
THUMBNAIL_KEYS = (("thumbnail", "thumbnail_url"), ("thumbnail", "thumbnail_url"))

UNTITLED = "Untitled asset"
UNKNOWN = "Unknown"


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else default


def _timestamp(value: Any) -> Optional[Union[str, float]]:
    """Strings as found; numbers (epoch milliseconds) kept numeric so they still parse."""
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return value if isinstance(value, str) else str(value)


def resolve_asset_url(raw: RawRecord) -> str:
    """Storage path, generic URL or download URL, else the UUID; s3:// rewritten to HTTPS."""
    url = resolve_nested(raw, *STORAGE_URL_KEYS)
    if url is None:
        url = resolve_nested(raw, *UUID_KEYS)
    return normalize_asset_url(url)


def map_asset(raw: RawRecord) -> Asset:
    """
    Build an Asset from one catalog record. Never raises: missing or malformed
    fields fall back to defaults ("Untitled asset", "Unknown", "N/A", NaN, "").
    """
    size = to_number(resolve_nested(raw, *FILE_SIZE_KEYS))
    thumbnail = resolve_nested(raw, *THUMBNAIL_KEYS)

    return Asset(
        title=_text(resolve_nested(raw, *TITLE_KEYS), UNTITLED),
        acquisition_start=_timestamp(resolve_nested(raw, *ACQUISITION_KEYS)),
        platform=_text(resolve_nested(raw, *PLATFORM_KEYS), UNKNOWN),
        provider=_text(resolve_nested(raw, *PROVIDER_KEYS), UNKNOWN),
        resolution=normalize_resolution(resolve_nested(raw, *RESOLUTION_KEYS)),
        file_size_bytes=size,
        uuid=_text(resolve_nested(raw, *UUID_KEYS), UNKNOWN),
        asset_url=resolve_asset_url(raw),
        thumbnail=thumbnail if isinstance(thumbnail, str) else "",
        has_known_size=math.isfinite(size) and size > 0,
    )
