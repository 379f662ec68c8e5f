"""
Integration tests for the gallery FastAPI app (TestClient, local snapshot files)
"""

import asyncio
import json
import threading

import pytest
from fastapi.testclient import TestClient

from common.config import load_config
from common.utils import deep_merge
from gallery.controller import SnapshotError
from gallery.server import create_app


def make_client(tmp_path, payload=None):
    snap = tmp_path / "data.json"
    if payload is not None:
        snap.write_text(json.dumps(payload))
    P = deep_merge(load_config(str(tmp_path / "absent.yaml")), {"gallery": {"snapshot": str(snap)}})
    return TestClient(create_app(P))


RECORDS = [
    {"title": "Small", "file_size": 100, "acquisition_start": "2019-05-01T00:00:00Z", "uuid": "https://h/small.tif"},
    {"title": "No size", "acquisition_start": "2021-01-01T00:00:00Z"},
    {"title": "Large", "file_size": 5 * 1024 ** 3, "acquisition_start": "2015-03-02", "geojson": {"type": "Point"}},
]


class TestGalleryPage:
    """Test cases for GET /"""

    def test_empty_snapshot(self, tmp_path):
        client = make_client(tmp_path, {"results": []})
        r = client.get("/")
        assert r.status_code == 200
        assert '<span id="assetCount">0</span>' in r.text
        assert '<span id="totalSize">-</span>' in r.text
        assert "No assets found." in r.text

    def test_missing_snapshot_shows_error(self, tmp_path):
        client = make_client(tmp_path)
        r = client.get("/")
        assert r.status_code == 200
        assert 'id="error"' in r.text
        assert "Snapshot not found" in r.text
        assert '<span id="assetCount">0</span>' in r.text

    def test_sorted_cards(self, tmp_path):
        client = make_client(tmp_path, {"results": RECORDS})
        text = client.get("/", params={"sort": "size-desc"}).text
        assert text.index("Large") < text.index("Small") < text.index("No size")
        assert '<option value="size-desc" selected>' in text
        assert "known 2/3" in text

        text = client.get("/", params={"sort": "date-asc"}).text
        assert text.index("Large") < text.index("Small") < text.index("No size")

    def test_titles_are_escaped(self, tmp_path):
        client = make_client(tmp_path, {"results": [{"title": "<script>x</script>"}]})
        text = client.get("/").text
        assert "<script>x</script>" not in text
        assert "&lt;script&gt;" in text

    def test_uuid_link(self, tmp_path):
        client = make_client(tmp_path, {"results": RECORDS})
        assert 'href="https://h/small.tif"' in client.get("/").text


class TestGalleryApi:
    """Test cases for JSON endpoints"""

    def test_assets_endpoint(self, tmp_path):
        client = make_client(tmp_path, {"results": RECORDS})
        body = client.get("/assets", params={"sort": "size-asc"}).json()
        assert body["sort"] == "size-asc"
        assert [a["title"] for a in body["assets"]] == ["Small", "Large", "No size"]
        assert body["assets"][2]["file_size_bytes"] is None
        assert body["stats"]["asset_count"] == "3"

    def test_assets_endpoint_missing_snapshot(self, tmp_path):
        client = make_client(tmp_path)
        r = client.get("/assets")
        assert r.status_code == 502
        assert r.json()["error"] == "snapshot_unavailable"

    def test_data_json(self, tmp_path):
        client = make_client(tmp_path, {"results": RECORDS})
        r = client.get("/data.json")
        assert r.status_code == 200
        assert r.headers["cache-control"] == "no-store"
        assert len(r.json()["results"]) == 3

    def test_data_json_missing(self, tmp_path):
        r = make_client(tmp_path).get("/data.json")
        assert r.status_code == 404

    @pytest.mark.parametrize("payload,exists", [({"results": []}, True), (None, False)])
    def test_health(self, tmp_path, payload, exists):
        body = make_client(tmp_path, payload).get("/health").json()
        assert body["status"] == "ok"
        assert body["snapshot"]["exists"] is exists


class TestOverlappingReloads:
    """An older in-flight load must not overwrite a newer one"""

    def test_stale_reload_discarded(self, tmp_path):
        started = threading.Event()
        gate = threading.Event()

        def fetch(source):
            if not started.is_set():
                started.set()
                gate.wait(5)
                return {"results": [{"title": "stale"}]}
            return {"results": [{"title": "fresh"}]}

        P = deep_merge(load_config(str(tmp_path / "absent.yaml")), {"gallery": {"snapshot": str(tmp_path / "x.json")}})
        app = create_app(P, fetch=fetch)

        async def scenario():
            first = asyncio.create_task(app.state.reload())
            await asyncio.to_thread(started.wait, 5)
            second = await app.state.reload()
            gate.set()
            return await first, second

        first_applied, second_applied = asyncio.run(scenario())

        assert second_applied is True
        assert first_applied is False
        state = app.state.gallery
        assert [a.title for a in state.assets] == ["fresh"]
        assert state.is_loading is False
        assert state.error is None

    def test_stale_failure_does_not_mask_newer_success(self, tmp_path):
        started = threading.Event()
        gate = threading.Event()

        def fetch(source):
            if not started.is_set():
                started.set()
                gate.wait(5)
                raise SnapshotError("Failed to load data")
            return {"results": [{"title": "fresh"}]}

        P = deep_merge(load_config(str(tmp_path / "absent.yaml")), {"gallery": {"snapshot": str(tmp_path / "x.json")}})
        app = create_app(P, fetch=fetch)

        async def scenario():
            first = asyncio.create_task(app.state.reload())
            await asyncio.to_thread(started.wait, 5)
            await app.state.reload()
            gate.set()
            await first

        asyncio.run(scenario())

        state = app.state.gallery
        assert [a.title for a in state.assets] == ["fresh"]
        assert state.error is None
