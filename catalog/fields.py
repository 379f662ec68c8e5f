from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Optional


def resolve_field(record: Any, keys: Iterable[str]) -> Optional[Any]:
    """
    Return the value of the first key in `keys` that is present in `record`
    and is neither None nor "". 0 and False count as present.
    Non-mapping records resolve to None.
    """
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        if key in record:
            value = record[key]
            if value is not None and value != "":
                return value
    return None


def resolve_nested(record: Any, top_keys: Iterable[str], nested_keys: Iterable[str]) -> Optional[Any]:
    """Top-level lookup first, then the record's "properties" sub-mapping."""
    value = resolve_field(record, top_keys)
    if value is not None:
        return value
    props = record.get("properties") if isinstance(record, Mapping) else None
    return resolve_field(props, nested_keys)
