import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import plotly.graph_objects as go
import streamlit as st
from utils.api_client import cached_profile, cached_stats
from utils.theme import (
    RECORD_TYPE_STYLES,
    apply_theme,
    get_colors,
    kpi_tile,
    plotly_layout_defaults,
    render_sidebar_profile,
    type_label,
)

st.set_page_config(
    page_title="ThyroTrack",
    page_icon="🦋",
    layout="wide",
    initial_sidebar_state="expanded",
)
apply_theme()
COLORS = get_colors()

p_ok, profile = cached_profile()
s_ok, stats = cached_stats()
render_sidebar_profile(profile if p_ok else None)

if not p_ok or not s_ok:
    st.error("Could not reach the ThyroTrack API. Is the backend running?")
    st.stop()

name = profile.get("name") or "there"
st.markdown(
    f"""
    <div style="margin-bottom:8px;">
        <span style="font-size:1.8rem;font-weight:800;color:{COLORS['text']};">
            Hello, {name}
        </span>
        <span style="font-size:1.8rem;">🦋</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Your thyroid care journey at a glance.
    </p>
    """,
    unsafe_allow_html=True,
)

latest_tg = stats.get("latest_thyroglobulin")
tg_display = f"{latest_tg:g} ng/mL" if latest_tg is not None else "N/A"
age = profile.get("age")
diagnosis = profile.get("diagnosis") or "Thyroid Condition"

cols = st.columns(4)
tiles = [
    ("Records", stats.get("total_records", 0), COLORS["primary"]),
    ("Milestones", stats.get("major_events", 0), COLORS["warning"]),
    ("Latest Thyroglobulin", tg_display, COLORS["info"]),
    (diagnosis, f"Age {age}" if age is not None else "Age N/A", COLORS["text"]),
]
for col, (label, value, color) in zip(cols, tiles):
    col.markdown(kpi_tile(label, value, color), unsafe_allow_html=True)

by_type = stats.get("by_type", {})
if any(by_type.values()):
    fig = go.Figure(
        go.Bar(
            x=[f"{RECORD_TYPE_STYLES[t][0]} {type_label(t)}" for t in RECORD_TYPE_STYLES],
            y=[by_type.get(t, 0) for t in RECORD_TYPE_STYLES],
            marker_color=[COLORS[RECORD_TYPE_STYLES[t][1]] for t in RECORD_TYPE_STYLES],
        )
    )
    fig.update_layout(**plotly_layout_defaults("Records by type", height=280), showlegend=False)
    st.plotly_chart(fig, use_container_width=True)

st.markdown("<div style='height:24px'></div>", unsafe_allow_html=True)

# Navigation cards
nav_items = [
    ("🗓️", "Timeline", "Every appointment, scan and result in date order."),
    ("✏️", "Record Editor", "Add or edit a record, or import lab values from report text."),
    ("🧪", "Lab Comparison", "Markers side by side across blood tests."),
    ("📈", "Trends", "How a marker has moved over time."),
    ("🤖", "AI Summary", "A plain-language summary to share with your care team."),
    ("👤", "Profile", "Name, birth date and diagnosis details."),
]

nav_cols = st.columns(3)
for i, (icon, title, desc) in enumerate(nav_items):
    nav_cols[i % 3].markdown(
        f"""
        <div class="nav-card" style="margin-bottom:16px;">
            <div class="nav-icon">{icon}</div>
            <div class="nav-title">{title}</div>
            <div class="nav-desc">{desc}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )
