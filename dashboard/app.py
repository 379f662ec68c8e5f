"""
Aerial Imagery Gallery (Streamlit)

- Loads a prebuilt snapshot (local JSON file or http(s) URL) written by prefetch
- Shows asset count and total known size
- Renders a card grid sorted by date or file size
- Lists the sorted assets in a table

Run:
    streamlit run dashboard/app.py
"""

from __future__ import annotations

from typing import List

import pandas as pd
import streamlit as st

from common.config import load_config
from common.types import SortKey
from gallery.controller import AssetCard, GalleryState, load_assets, render, set_sort


# -------------------------
# Config
# -------------------------
P = load_config()
SNAPSHOT_DEFAULT = str(P["gallery"]["snapshot"])
COLUMNS = 3  # cards per row
MAX_CARDS = 300


# -------------------------
# Helpers
# -------------------------
def cards_to_dataframe(cards: List[AssetCard]) -> pd.DataFrame:
    rows = [
        {
            "title": c.title,
            "date": c.date,
            "platform": c.badge,
            "provider": c.provider,
            "resolution": c.resolution,
            "file_size": c.file_size,
            "uuid": c.uuid,
        }
        for c in cards
    ]
    return pd.DataFrame(rows, columns=["title", "date", "platform", "provider", "resolution", "file_size", "uuid"])


def render_card(card: AssetCard) -> None:
    with st.container(border=True):
        if card.thumbnail:
            st.image(card.thumbnail, width="stretch")
        st.markdown(f"**{card.title}** · `{card.badge}`")
        st.caption(
            f"Date: {card.date}  \n"
            f"Provider: {card.provider}  \n"
            f"Resolution: {card.resolution}  \n"
            f"File size: {card.file_size}"
        )
        if card.uuid_href:
            st.markdown(f"UUID: [{card.uuid}]({card.uuid_href})")
        else:
            st.caption(f"UUID: {card.uuid}")


# -------------------------
# UI
# -------------------------
st.set_page_config(page_title="Aerial Imagery Gallery", layout="wide")
st.title(P["gallery"].get("title", "OpenAerialMap Gallery"))

if "gallery" not in st.session_state:
    st.session_state.gallery = GalleryState()
    set_sort(st.session_state.gallery, P["gallery"].get("default_sort", "date-desc"))
    st.session_state.loaded_from = None
state: GalleryState = st.session_state.gallery

with st.sidebar:
    st.subheader("Data Source")
    snapshot = st.text_input("Snapshot (path or URL)", SNAPSHOT_DEFAULT)
    keys = list(SortKey)
    choice = st.selectbox(
        "Sort",
        keys,
        index=keys.index(state.sort_key),
        format_func=lambda k: k.label,
    )
    refresh = st.button("Reload snapshot")
    st.caption("Build snapshots with: python -m prefetch.snapshot")

set_sort(state, choice)
if refresh or st.session_state.loaded_from != snapshot:
    with st.spinner("Loading snapshot..."):
        load_assets(state, snapshot)
    st.session_state.loaded_from = snapshot

view = render(state)

k1, k2 = st.columns(2)
k1.metric("Assets", view.stats.asset_count)
k2.metric("Total size", view.stats.total_size)

if view.error:
    st.error(view.error)

if view.empty_message:
    st.info(view.empty_message)
else:
    shown = view.cards[:MAX_CARDS]
    for start in range(0, len(shown), COLUMNS):
        cols = st.columns(COLUMNS)
        for col, card in zip(cols, shown[start:start + COLUMNS]):
            with col:
                render_card(card)
    if len(view.cards) > MAX_CARDS:
        st.caption(f"Showing {MAX_CARDS} of {len(view.cards)} assets; see the table for the rest.")

    st.subheader("All assets")
    st.dataframe(cards_to_dataframe(view.cards), width="stretch", height=320)
