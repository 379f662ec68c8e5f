"""
Catalog — record normalization core

Turns loosely structured OpenAerialMap metadata records into uniform Asset values:
- fields.resolve_field: first-match lookup over candidate key names
- normalize: asset URL rewriting, byte/date/resolution formatting
- mapper.map_asset: raw record -> Asset (total, never raises)
- sorting.sort_assets: known-first two-tier ordering by date or size

Usage:
    from catalog import map_asset, sort_assets
    assets = sort_assets([map_asset(r) for r in payload["results"]], "size-desc")
"""
from .fields import resolve_field
from .mapper import map_asset, resolve_asset_url
from .normalize import format_bytes, format_date, normalize_asset_url, normalize_resolution, parse_date
from .sorting import sort_assets

__all__ = [
    "resolve_field",
    "map_asset",
    "resolve_asset_url",
    "format_bytes",
    "format_date",
    "normalize_asset_url",
    "normalize_resolution",
    "parse_date",
    "sort_assets",
]
