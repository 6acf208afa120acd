"""
Lab Comparison: blood tests as rows, selected markers as columns.
A marker a test did not measure shows as a dash, never as zero.
"""

import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import pandas as pd
import streamlit as st

from utils.api_client import cached_lab_table, cached_markers, cached_profile
from utils.theme import (
    apply_theme,
    get_colors,
    kpi_tile,
    render_sidebar_profile,
    section_title,
)

st.set_page_config(page_title="Lab Comparison", page_icon="🧪", layout="wide")
apply_theme()
_, profile = cached_profile()
render_sidebar_profile(profile)
COLORS = get_colors()

ABSENT = "—"

# ── Header ────────────────────────────────────────────────────────────────
st.markdown(
    f"""
    <div style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">🧪 Lab Comparison</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Pick the markers to compare across your blood tests, newest first.
    </p>
    """,
    unsafe_allow_html=True,
)

m_ok, marker_data = cached_markers()
if not m_ok:
    st.error("Failed to load lab markers.")
    st.stop()

markers = marker_data.get("markers", [])
if not markers:
    st.info("No lab results yet. Add a blood test to start comparing markers.")
    st.stop()

selected = st.multiselect(
    "Markers",
    options=markers,
    default=marker_data.get("default_selection", []),
)
if not selected:
    st.info("Select at least one marker to build the comparison table.")
    st.stop()

t_ok, table = cached_lab_table(tuple(selected))
if not t_ok:
    st.error("Failed to load the comparison table.")
    st.stop()

rows = table.get("rows", [])

c1, c2 = st.columns(2)
c1.markdown(kpi_tile("Blood Tests", len(rows), COLORS["primary"]), unsafe_allow_html=True)
c2.markdown(kpi_tile("Markers Shown", len(selected), COLORS["info"]), unsafe_allow_html=True)

section_title("Results")


def _cell_text(cell: dict) -> str:
    if cell.get("status") != "present":
        return ABSENT
    unit = cell.get("unit") or ""
    return f"{cell['value']:g} {unit}".strip()


records = []
for row in rows:
    entry = {"Date": row["date"], "Test": row["title"]}
    for marker in selected:
        entry[marker] = _cell_text(row["cells"].get(marker, {}))
    records.append(entry)

df = pd.DataFrame(records, columns=["Date", "Test", *selected])
st.dataframe(df, use_container_width=True, hide_index=True)
st.caption(f"{ABSENT} means the marker was not measured in that test.")
