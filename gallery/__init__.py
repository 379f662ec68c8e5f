"""
Gallery — snapshot viewer

- controller: load a snapshot, keep the latest accepted result, sort and build the view
- page: Jinja2 rendering of the gallery view to a standalone HTML page
- server: FastAPI app serving the page, the raw snapshot and the mapped assets

Run:
    uvicorn gallery.server:app --port 8000
"""
