from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import uvicorn
from fastapi import FastAPI, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse

from common.config import load_config
from common.logging_setup import get_logger
from catalog.sorting import sort_assets
from gallery.controller import (
    GalleryState,
    SnapshotError,
    begin_load,
    complete_load,
    fail_load,
    fetch_snapshot,
    render,
    render_stats,
    set_sort,
)
from gallery.page import render_page


log = get_logger("gallery")

NO_STORE = {"Cache-Control": "no-store"}


def create_app(P: Dict[str, Any], fetch: Callable[[str], Dict[str, Any]] = fetch_snapshot) -> FastAPI:
    g = P.get("gallery", {})
    source = str(g.get("snapshot", "public/data.json"))
    title = str(g.get("title", "OpenAerialMap Gallery"))

    state = GalleryState()
    set_sort(state, g.get("default_sort", "date-desc"))

    app = FastAPI(title="Aerial Imagery Gallery", version="1.0.0")
    app.state.gallery = state
    app.state.snapshot_source = source

    async def reload() -> bool:
        """
        One load cycle. The read runs in the threadpool; meanwhile a newer
        request may start, in which case this result is discarded.
        """
        rid = begin_load(state)
        try:
            payload = await run_in_threadpool(fetch, source)
        except SnapshotError as e:
            log.warning("snapshot load failed: %s", e)
            return fail_load(state, rid, str(e))
        return complete_load(state, rid, payload)

    app.state.reload = reload

    @app.get("/health")
    def health():
        local = not source.startswith(("http://", "https://"))
        return {
            "status": "ok",
            "snapshot": {
                "source": source,
                "exists": Path(source).is_file() if local else None,
            },
            "assets_loaded": len(state.assets),
            "request_id": state.request_id,
            "sort": state.sort_key.value,
        }

    @app.get("/", response_class=HTMLResponse)
    async def index(sort: Optional[str] = Query(None)):
        if sort:
            set_sort(state, sort)
        await reload()
        return HTMLResponse(render_page(render(state), title=title), headers=NO_STORE)

    @app.get("/data.json")
    async def data_json():
        try:
            payload = await run_in_threadpool(fetch, source)
        except SnapshotError as e:
            return JSONResponse({"error": "snapshot_not_found", "detail": str(e)}, status_code=404)
        return JSONResponse(payload, headers=NO_STORE)

    @app.get("/assets")
    async def assets(sort: Optional[str] = Query(None)):
        if sort:
            set_sort(state, sort)
        await reload()
        if state.error:
            return JSONResponse({"error": "snapshot_unavailable", "detail": state.error}, status_code=502)
        ordered = sort_assets(state.assets, state.sort_key)
        return {
            "sort": state.sort_key.value,
            "stats": asdict(render_stats(ordered)),
            "assets": [a.to_dict() for a in ordered],
        }

    return app


P = load_config()
app = create_app(P)


# -------- local dev entrypoint --------
if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
