import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from utils.api_client import (
    cached_marker_series,
    cached_marker_trend,
    cached_markers,
    cached_profile,
    cached_timeline,
)
from utils.theme import (
    apply_theme,
    direction_arrow,
    get_colors,
    kpi_tile,
    parse_reference_range,
    plotly_layout_defaults,
    render_sidebar_profile,
    section_title,
)

st.set_page_config(page_title="Trends", page_icon="📈", layout="wide")
apply_theme()
_, profile = cached_profile()
render_sidebar_profile(profile)
COLORS = get_colors()

# ── Header ────────────────────────────────────────────────────────────────
st.markdown(
    f"""
    <div style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">📈 Marker Trends</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Follow one marker across every blood test, oldest to newest.
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
    st.info("No lab results yet. Add a blood test to see trends.")
    st.stop()

default_marker = "Thyroglobulin" if "Thyroglobulin" in markers else markers[0]
marker = st.selectbox("Marker", markers, index=markers.index(default_marker))

s_ok, series = cached_marker_series(marker)
tr_ok, trend = cached_marker_trend(marker)
if not s_ok or not tr_ok:
    st.error("Failed to load trend data.")
    st.stop()

points = series.get("points", [])
unit = points[-1]["unit"] if points else ""

# ── KPIs ──────────────────────────────────────────────────────────────────
current = trend.get("current")
delta = trend.get("delta_percent")
k1, k2, k3 = st.columns(3)
k1.markdown(
    kpi_tile("Latest", f"{current:g} {unit}".strip() if current is not None else "N/A", COLORS["primary"]),
    unsafe_allow_html=True,
)
k2.markdown(
    kpi_tile("Change", f"{delta:+.1f}%" if delta is not None else "N/A", COLORS["text"]),
    unsafe_allow_html=True,
)
k3.markdown(kpi_tile("Measurements", len(points), COLORS["info"]), unsafe_allow_html=True)
st.markdown(
    f"<p style='margin-top:8px;'>Direction: {direction_arrow(trend.get('direction'))}</p>",
    unsafe_allow_html=True,
)

# ── Chart ─────────────────────────────────────────────────────────────────
section_title(f"{marker} over time")
if not points:
    st.info(f"No {marker} measurements recorded.")
    st.stop()

df = pd.DataFrame(points)
df["date"] = pd.to_datetime(df["date"])

# Reference band from the most recent result that printed one.
_, timeline = cached_timeline("all")
ref_low = ref_high = None
for rec in (timeline or {}).get("records", []):
    for result in rec.get("results", []):
        if result["marker"] == marker and result.get("reference_range"):
            ref_low, ref_high = parse_reference_range(result["reference_range"])
            break
    if ref_low is not None:
        break

fig = go.Figure()
if ref_low is not None and ref_high is not None:
    fig.add_hrect(
        y0=ref_low,
        y1=ref_high,
        fillcolor=COLORS["success"],
        opacity=0.12,
        line_width=0,
        annotation_text="Reference range",
        annotation_position="top left",
    )
fig.add_trace(
    go.Scatter(
        x=df["date"],
        y=df["value"],
        mode="lines+markers",
        name=marker,
        line=dict(color=COLORS["primary"], width=3),
        marker=dict(size=9),
        hovertemplate="%{x|%Y-%m-%d}<br>%{y} " + unit + "<extra></extra>",
    )
)
fig.update_layout(**plotly_layout_defaults(height=420), showlegend=False)
fig.update_yaxes(title_text=unit)
st.plotly_chart(fig, use_container_width=True)

with st.expander("Raw values"):
    st.dataframe(
        df.rename(columns={"date": "Date", "value": "Value", "unit": "Unit"})[["Date", "Value", "Unit"]],
        use_container_width=True,
        hide_index=True,
    )
