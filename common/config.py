from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from common.utils import deep_merge


DEFAULT_CONFIG_PATH = "config/params.yaml"

DEFAULTS: Dict[str, Any] = {
    "catalog": {
        "base_url": "https://api.openaerialmap.org/meta",
        "timeout_s": None,  # offline batch job: no timeout unless configured
    },
    "prefetch": {
        "output_dir": "public",
        "concurrency": 6,
        "probe_timeout_s": None,
        "regions": [
            {
                "name": "sierra-leone",
                # Western Area (Freetown, Waterloo)
                "bbox": "-13.45,8.25,-13.05,8.65",
                "limit": 100,
                "output": "data-sierra-leone.json",
            },
        ],
        "global": {
            "enabled": True,
            "chunk_size": 500,
            "min_size_bytes": 1024 ** 3,
            "fallback_total": 19962,
            "output": "data-global-1gb.json",
        },
    },
    "gallery": {
        "snapshot": "public/data.json",
        "default_sort": "date-desc",
        "title": "OpenAerialMap Gallery",
    },
}


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load YAML params and merge them over DEFAULTS.
    A missing file yields the defaults unchanged.
    """
    p = Path(path or DEFAULT_CONFIG_PATH)
    if not p.exists():
        return deep_merge(DEFAULTS, {})
    with p.open("r") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{p}: expected a mapping at top level")
    return deep_merge(DEFAULTS, loaded)
