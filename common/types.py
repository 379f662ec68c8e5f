from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


# Untyped catalog record as decoded from JSON. May hold a nested "properties" mapping.
RawRecord = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Asset:
    """
    Display-ready view of one catalog record.

    Attributes:
        title: never empty; "Untitled asset" when the record has none.
        acquisition_start: timestamp string (or epoch milliseconds) as found in the record, or None.
        platform, provider, uuid: never empty; "Unknown" by default.
        resolution: formatted ground sample distance ("30 cm") or "N/A".
        file_size_bytes: byte count, NaN when absent or non-numeric.
        asset_url: HTTPS URL of the imagery file (may be empty).
        thumbnail: thumbnail URL (may be empty).
        has_known_size: file_size_bytes is finite and > 0.
    """
    title: str
    acquisition_start: Optional[Union[str, float]]
    platform: str
    provider: str
    resolution: str
    file_size_bytes: float
    uuid: str
    asset_url: str
    thumbnail: str
    has_known_size: bool

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        # NaN is not valid JSON
        if not math.isfinite(self.file_size_bytes):
            d["file_size_bytes"] = None
        return d


class SortKey(str, Enum):
    DATE_ASC = "date-asc"
    DATE_DESC = "date-desc"
    SIZE_ASC = "size-asc"
    SIZE_DESC = "size-desc"

    @property
    def axis(self) -> str:
        return self.value.split("-", 1)[0]

    @property
    def descending(self) -> bool:
        return self.value.endswith("-desc")

    @classmethod
    def parse(cls, value: Any, default: Optional["SortKey"] = None) -> "SortKey":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default or cls.DATE_DESC

    @property
    def label(self) -> str:
        return {
            SortKey.DATE_ASC: "Date (oldest first)",
            SortKey.DATE_DESC: "Date (newest first)",
            SortKey.SIZE_ASC: "File size (smallest first)",
            SortKey.SIZE_DESC: "File size (largest first)",
        }[self]
