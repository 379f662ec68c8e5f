from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def iso_now_ms() -> str:
    """UTC ISO-8601 timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso8601(ts: str) -> datetime:
    """
    Parse an ISO-8601 timestamp with optional 'Z'. Naive results are pinned to UTC
    so that timestamps from different records compare consistently.
    """
    ts = ts.strip()
    if ts.endswith("Z") or ts.endswith("z"):
        ts = ts[:-1] + "+00:00"
    dt = datetime.fromisoformat(ts)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def clamp(v: int, lo: int, hi: int) -> int:
    return int(min(hi, max(lo, v)))


def deep_merge(base: Mapping[str, Any], override: Optional[Mapping[str, Any]]) -> dict:
    """Recursively merge `override` onto a copy of `base` (mappings merge, everything else replaces)."""
    out = copy.deepcopy(dict(base))
    for k, v in (override or {}).items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out
