from __future__ import annotations

"""
OpenAerialMap catalog adapter.

The /meta endpoint is a paginated search:
    GET https://api.openaerialmap.org/meta?bbox=<w,s,e,n>&limit=<n>&page=<p>
    -> { "meta": { "found": <int>, "limit": <int>, "page": <int>, ... }, "results": [ ... ] }

Usage:
    client = CatalogClient()
    payload = client.search(bbox="-13.45,8.25,-13.05,8.65", limit=100)
    total = CatalogClient.total_found(payload, fallback=19962)
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests


log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openaerialmap.org/meta"


class CatalogError(RuntimeError):
    """Catalog request failed (transport error, non-2xx status or undecodable body)."""


class CatalogClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Params:
            base_url: search endpoint (no query string)
            session: optional requests.Session for connection reuse
            timeout: seconds per request; None waits indefinitely
        """
        self.base_url = base_url.rstrip("?")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ----------------------------
    # Public API
    # ----------------------------
    def build_url(self, **params: Any) -> str:
        """Fully-qualified search URL; None-valued params are omitted."""
        query = {k: v for k, v in params.items() if v is not None}
        if not query:
            return self.base_url
        return f"{self.base_url}?{urlencode(query)}"

    def search(
        self,
        bbox: Optional[str] = None,
        limit: Optional[int] = None,
        page: Optional[int] = None,
    ) -> Dict[str, Any]:
        url = self.build_url(bbox=bbox, limit=limit, page=page)
        return self.fetch_json(url)

    def fetch_json(self, url: str) -> Dict[str, Any]:
        log.debug("GET %s", url)
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise CatalogError(f"Request failed: {e}") from e
        if not 200 <= r.status_code < 300:
            raise CatalogError(f"Request failed: {r.status_code}")
        try:
            data = r.json()
        except ValueError as e:
            raise CatalogError(f"Invalid JSON from {url}") from e
        if not isinstance(data, dict):
            raise CatalogError(f"Unexpected payload type from {url}: {type(data).__name__}")
        return data

    # ----------------------------
    # Payload helpers
    # ----------------------------
    @staticmethod
    def results_of(payload: Dict[str, Any]) -> list:
        results = payload.get("results")
        return results if isinstance(results, list) else []

    @staticmethod
    def total_found(payload: Dict[str, Any], fallback: int) -> int:
        """meta.found when it is a positive integer, else the configured fallback."""
        meta = payload.get("meta")
        found = meta.get("found") if isinstance(meta, dict) else None
        if isinstance(found, int) and not isinstance(found, bool) and found > 0:
            return found
        return int(fallback)
