"""
Prefetch — offline snapshot builder

- catalog_client.CatalogClient: read-only client for the OpenAerialMap /meta API
- enrich.enrich_sizes: HEAD-probe asset URLs through a bounded worker pool to fill file_size
- snapshot: fetch regional and paginated global results, strip geometry, write JSON

Entry point:
    python -m prefetch.snapshot --config config/params.yaml
"""
from .catalog_client import CatalogClient, CatalogError
from .enrich import enrich_sizes, fetch_content_length

__all__ = ["CatalogClient", "CatalogError", "enrich_sizes", "fetch_content_length"]
