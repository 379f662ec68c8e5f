import os
import sys

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)


def oam_record(**overrides):
    """A record shaped like an OpenAerialMap /meta result."""
    rec = {
        "_id": "59e62b8a3d6412ef7220a0e1",
        "uuid": "https://oin-hotosm.s3.amazonaws.com/59e62b8a/0/59e62b8a.tif",
        "title": "Freetown mudslide area",
        "acquisition_start": "2017-08-15T00:00:00.000Z",
        "acquisition_end": "2017-08-15T23:59:59.000Z",
        "platform": "uav",
        "provider": "Humanitarian OpenStreetMap Team",
        "gsd": 0.05,
        "file_size": 1536000000,
        "bbox": [-13.25, 8.45, -13.2, 8.5],
        "footprint": "POLYGON((...))",
        "geojson": {"type": "Polygon", "coordinates": []},
        "properties": {
            "thumbnail": "https://oin-hotosm.s3.amazonaws.com/59e62b8a/0/59e62b8a_thumb.png",
            "tms": "https://tiles.openaerialmap.org/59e62b8a/0/{z}/{x}/{y}.png",
        },
    }
    rec.update(overrides)
    return rec


@pytest.fixture
def make_record():
    return oam_record
