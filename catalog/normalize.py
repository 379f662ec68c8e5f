from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional

from common.utils import parse_iso8601


STORAGE_SCHEME = "s3://"
STORAGE_DOMAIN = "s3.amazonaws.com"

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")

# Fixed English abbreviations; strftime("%b") follows the process locale.
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def normalize_asset_url(value: Any) -> str:
    """
    s3://bucket/path/to/key.tif -> https://bucket.s3.amazonaws.com/path/to/key.tif

    Anything else (HTTPS URLs, bare identifiers) passes through unchanged;
    non-strings and "" become "".
    """
    if not value or not isinstance(value, str):
        return ""
    if value.startswith(STORAGE_SCHEME):
        bucket, _, key = value[len(STORAGE_SCHEME):].partition("/")
        if bucket and key:
            return f"https://{bucket}.{STORAGE_DOMAIN}/{key}"
    return value


def to_number(value: Any) -> float:
    """Numeric coercion for JSON scalars; NaN for anything that is not a number."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if not isinstance(value, (int, float, str)):
        return math.nan
    try:
        return float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return math.nan


def format_bytes(num_bytes: Any) -> str:
    if isinstance(num_bytes, bool) or not isinstance(num_bytes, (int, float)):
        return "N/A"
    try:
        n = float(num_bytes)
    except OverflowError:
        return "N/A"
    if not math.isfinite(n) or n <= 0:
        return "N/A"
    idx = 0
    while n >= 1024 and idx < len(BYTE_UNITS) - 1:
        n /= 1024
        idx += 1
    return f"{n:.2f} {BYTE_UNITS[idx]}"


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a record timestamp into an aware UTC datetime.

    Accepts datetime objects, epoch milliseconds and ISO-8601 strings
    ("2024-01-05", "2024-01-05T10:00:00Z", "2024-01-05 10:00:00+02:00").
    Returns None when the value cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return parse_iso8601(value)
        except ValueError:
            return None
    return None


def format_date(value: Any) -> str:
    parsed = parse_date(value)
    if parsed is None:
        return "Unknown"
    try:
        parsed = parsed.astimezone(timezone.utc)
    except OverflowError:
        # offset pushes the UTC value outside years 1..9999
        return "Unknown"
    return f"{MONTHS[parsed.month - 1]} {parsed.day:02d}, {parsed.year:04d}"


def normalize_resolution(value: Any) -> str:
    """
    Ground sample distance in meters -> "<n> cm".
    Lists contribute their first element ("gsd": [0.3, 0.9] -> "30 cm").
    """
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    meters = to_number(value)
    if not math.isfinite(meters) or meters <= 0:
        return "N/A"
    # round half up
    cm = math.floor(meters * 100 + 0.5)
    return f"{cm} cm"
