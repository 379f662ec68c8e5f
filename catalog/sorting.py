from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple, Union

from common.types import Asset, SortKey
from catalog.normalize import parse_date


def _date_value(asset: Asset) -> Optional[float]:
    parsed = parse_date(asset.acquisition_start)
    return parsed.timestamp() if parsed is not None else None


def _size_value(asset: Asset) -> Optional[float]:
    return asset.file_size_bytes if math.isfinite(asset.file_size_bytes) else None


def sort_assets(assets: Iterable[Asset], sort_key: Union[SortKey, str]) -> List[Asset]:
    """
    Return a new list ordered by `sort_key` ("date-asc", "date-desc", "size-asc", "size-desc").

    Assets with a known value on the active axis always come before assets
    without one, whatever the direction. Ties keep their input order.
    """
    key = SortKey.parse(sort_key)
    value_of = _date_value if key.axis == "date" else _size_value
    sign = -1.0 if key.descending else 1.0

    def rank(asset: Asset) -> Tuple[int, float]:
        v = value_of(asset)
        if v is None:
            return (1, 0.0)
        return (0, sign * v)

    # sorted() is stable, so equal ranks keep input order in both directions
    return sorted(assets, key=rank)
