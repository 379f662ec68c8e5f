"""
Unit tests for the gallery controller
"""

import json
from unittest.mock import Mock

import pytest

from common.types import SortKey
from gallery.controller import (
    GalleryState,
    SnapshotError,
    begin_load,
    build_card,
    complete_load,
    fail_load,
    fetch_snapshot,
    load_assets,
    render,
    render_stats,
    set_sort,
)
from catalog.mapper import map_asset


def write_snapshot(tmp_path, payload, name="data.json"):
    p = tmp_path / name
    p.write_text(json.dumps(payload))
    return p


class TestFetchSnapshot:
    """Test cases for fetch_snapshot"""

    def test_local_file(self, tmp_path):
        p = write_snapshot(tmp_path, {"results": [{"title": "x"}]})
        assert fetch_snapshot(p) == {"results": [{"title": "x"}]}

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError, match="Snapshot not found"):
            fetch_snapshot(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        p = tmp_path / "data.json"
        p.write_text("{not json")
        with pytest.raises(SnapshotError, match="not valid JSON"):
            fetch_snapshot(p)

    def test_non_object(self, tmp_path):
        p = write_snapshot(tmp_path, [1, 2, 3])
        with pytest.raises(SnapshotError, match="JSON object"):
            fetch_snapshot(p)

    def test_http_not_found(self):
        session = Mock()
        session.get.return_value = Mock(status_code=404)
        with pytest.raises(SnapshotError, match="Snapshot not found: 404"):
            fetch_snapshot("https://example.test/data.json", session=session)

    def test_http_no_store(self):
        session = Mock()
        resp = Mock(status_code=200)
        resp.json.return_value = {"results": []}
        session.get.return_value = resp

        assert fetch_snapshot("https://example.test/data.json", session=session) == {"results": []}
        session.get.assert_called_once_with("https://example.test/data.json", headers={"Cache-Control": "no-store"})


class TestLoadCycle:
    """Test cases for request-id guarded loading"""

    def test_begin_load_resets(self):
        state = GalleryState(error="old")
        rid = begin_load(state)
        assert rid == 1
        assert state.is_loading is True
        assert state.error == ""

    def test_complete_maps_results(self):
        state = GalleryState()
        rid = begin_load(state)
        assert complete_load(state, rid, {"results": [{"title": "a"}, {}]}) is True
        assert [a.title for a in state.assets] == ["a", "Untitled asset"]
        assert state.is_loading is False

    def test_results_not_a_list(self):
        state = GalleryState()
        rid = begin_load(state)
        complete_load(state, rid, {"results": "nope"})
        assert state.assets == []

    def test_stale_success_dropped(self):
        state = GalleryState()
        first = begin_load(state)
        second = begin_load(state)
        assert complete_load(state, second, {"results": [{"title": "new"}]}) is True
        assert complete_load(state, first, {"results": [{"title": "old"}]}) is False
        assert [a.title for a in state.assets] == ["new"]

    def test_stale_failure_dropped(self):
        state = GalleryState()
        first = begin_load(state)
        second = begin_load(state)
        complete_load(state, second, {"results": [{"title": "kept"}]})
        assert fail_load(state, first, "network down") is False
        assert state.error == ""
        assert len(state.assets) == 1

    def test_failure_clears_assets(self):
        state = GalleryState(assets=[map_asset({"title": "a"})])
        rid = begin_load(state)
        assert fail_load(state, rid, "") is True
        assert state.assets == []
        assert state.error == "Failed to load data."

    def test_load_assets_missing_snapshot(self, tmp_path):
        state = GalleryState()
        load_assets(state, tmp_path / "missing.json")
        assert state.assets == []
        assert state.error.startswith("Snapshot not found")
        assert state.is_loading is False

    def test_load_assets_with_fetcher(self):
        state = GalleryState()
        assert load_assets(state, "ignored", fetch=lambda src: {"results": [{"title": "t"}]}) is True
        assert state.assets[0].title == "t"


class TestRender:
    """Test cases for stats, cards and view"""

    def test_empty_stats(self):
        stats = render_stats([])
        assert stats.asset_count == "0"
        assert stats.total_size == "-"

    def test_all_sizes_unknown(self):
        assets = [map_asset({"title": "a"}), map_asset({"title": "b"})]
        stats = render_stats(assets)
        assert stats.asset_count == "2"
        assert stats.total_size == "N/A (known 0/2)"

    def test_partial_sizes(self):
        assets = [map_asset({"file_size": 1024 ** 3}), map_asset({"file_size": 512 * 1024 ** 2}), map_asset({})]
        assert render_stats(assets).total_size == "1.50 GB (known 2/3)"

    def test_card(self, make_record):
        card = build_card(map_asset(make_record()))
        assert card.badge == "uav"
        assert card.date == "Aug 15, 2017"
        assert card.file_size == "1.43 GB"
        assert card.uuid_href == card.uuid
        assert card.thumbnail.endswith("_thumb.png")
        assert card.size_known is True

    def test_card_plain_uuid_and_bad_thumbnail(self):
        card = build_card(map_asset({"uuid": "abc-123", "thumbnail": "not a url"}))
        assert card.uuid_href is None
        assert card.thumbnail is None
        assert card.file_size == "N/A"

    def test_render_applies_sort_without_mutating(self):
        state = GalleryState(assets=[map_asset({"title": "s", "file_size": 1}), map_asset({"title": "l", "file_size": 9})])
        set_sort(state, "size-desc")
        view = render(state)
        assert [c.title for c in view.cards] == ["l", "s"]
        assert [a.title for a in state.assets] == ["s", "l"]
        assert view.empty_message is None

    def test_render_date_outside_calendar_range(self):
        state = GalleryState(assets=[map_asset({"title": "edge", "acquisition_start": "0001-01-01T00:00:00+01:00"})])
        view = render(state)
        assert [c.date for c in view.cards] == ["Unknown"]

    def test_empty_view_message(self):
        view = render(GalleryState())
        assert view.cards == []
        assert view.empty_message == "No assets found."

    def test_set_sort_invalid_keeps_current(self):
        state = GalleryState(sort_key=SortKey.SIZE_ASC)
        assert set_sort(state, "sideways") == SortKey.SIZE_ASC
        assert set_sort(state, "date-asc") == SortKey.DATE_ASC


class TestEndToEnd:
    def test_empty_snapshot(self, tmp_path):
        state = GalleryState()
        load_assets(state, write_snapshot(tmp_path, {"results": []}))
        view = render(state)
        assert view.stats.asset_count == "0"
        assert view.stats.total_size == "-"

    def test_snapshot_without_sizes(self, tmp_path):
        state = GalleryState()
        load_assets(state, write_snapshot(tmp_path, {"results": [{"title": "a"}, {"title": "b"}, {"title": "c"}]}))
        assert "known 0/3" in render(state).stats.total_size
