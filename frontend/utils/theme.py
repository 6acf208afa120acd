"""
Shared theme, CSS injection, color palette, and UI helper functions
for the ThyroTrack Streamlit frontend.
"""

from __future__ import annotations

import re
import streamlit as st

# ---------------------------------------------------------------------------
# Color palettes (light + dark)
# ---------------------------------------------------------------------------
COLORS_LIGHT: dict[str, str] = {
    "primary": "#2563EB",       # blue-600
    "primary_light": "#DBEAFE", # blue-100
    "accent": "#9333EA",        # purple-600
    "danger": "#EF4444",        # red-500
    "danger_light": "#FEE2E2",  # red-100
    "warning": "#F59E0B",       # amber-500
    "warning_light": "#FEF3C7", # amber-100
    "success": "#10B981",       # emerald-500
    "success_light": "#D1FAE5", # emerald-100
    "info": "#3B82F6",          # blue-500
    "info_light": "#DBEAFE",    # blue-100
    "text": "#1E293B",          # slate-800
    "text_secondary": "#475569", # slate-600
    "text_muted": "#64748B",    # slate-500
    "bg_card": "#FFFFFF",
    "bg_page": "#F8FAFC",       # slate-50
    "border": "#E2E8F0",        # slate-200
}

COLORS_DARK: dict[str, str] = {
    "primary": "#60A5FA",       # blue-400
    "primary_light": "#172554", # blue-950
    "accent": "#C084FC",        # purple-400
    "danger": "#F87171",        # red-400
    "danger_light": "#450A0A",  # red-950
    "warning": "#FBBF24",       # amber-400
    "warning_light": "#451A03", # amber-950
    "success": "#34D399",       # emerald-400
    "success_light": "#022C22", # emerald-950
    "info": "#60A5FA",          # blue-400
    "info_light": "#172554",    # blue-950
    "text": "#F1F5F9",          # slate-100
    "text_secondary": "#CBD5E1", # slate-300
    "text_muted": "#94A3B8",    # slate-400
    "bg_card": "#1E293B",       # slate-800
    "bg_page": "#0F172A",       # slate-900
    "border": "#334155",        # slate-700
}

# Icon and palette key per record type. Every record type needs an entry.
RECORD_TYPE_STYLES: dict[str, tuple[str, str]] = {
    "BLOOD_TEST": ("🧪", "info"),
    "IMAGING": ("🩻", "accent"),
    "SURGERY": ("🩺", "danger"),
    "PATHOLOGY": ("🔬", "success"),
    "APPOINTMENT": ("📅", "warning"),
    "MEDICATION": ("💊", "text_muted"),
}

RECORD_TYPES = list(RECORD_TYPE_STYLES)


def get_colors() -> dict[str, str]:
    """Return the active palette based on ``st.session_state.dark_mode``."""
    if st.session_state.get("dark_mode", False):
        return COLORS_DARK
    return COLORS_LIGHT


# ---------------------------------------------------------------------------
# Plotly helpers (palette-aware)
# ---------------------------------------------------------------------------
def _plotly_template() -> str:
    if st.session_state.get("dark_mode", False):
        return "plotly_dark"
    return "plotly_white"


def plotly_layout_defaults(title: str = "", height: int = 400) -> dict:
    """Return a dict of common Plotly layout kwargs for consistent styling."""
    c = get_colors()
    _axis_common = dict(
        tickfont=dict(size=12, color=c["text"]),
        title=dict(font=dict(size=13, color=c["text"])),
        linecolor=c["border"],
        gridcolor=c["border"],
    )
    bg = "rgba(0,0,0,0)" if not st.session_state.get("dark_mode") else c["bg_card"]
    return dict(
        title=dict(text=title, font=dict(size=16, color=c["text"])),
        template=_plotly_template(),
        height=height,
        margin=dict(l=40, r=20, t=50, b=40),
        font=dict(family="Inter, system-ui, sans-serif", size=13, color=c["text"]),
        plot_bgcolor=bg,
        paper_bgcolor="rgba(0,0,0,0)",
        xaxis=dict(**_axis_common),
        yaxis=dict(**_axis_common),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )


# ---------------------------------------------------------------------------
# CSS injection (built dynamically for active palette)
# ---------------------------------------------------------------------------
_CSS_TEMPLATE = """
<style>
[data-testid="stAppViewContainer"] {
    background-color: %(bg_page)s;
}
[data-testid="stAppViewContainer"] > section[data-testid="stMain"] p,
[data-testid="stAppViewContainer"] > section[data-testid="stMain"] span,
[data-testid="stAppViewContainer"] > section[data-testid="stMain"] td,
[data-testid="stAppViewContainer"] > section[data-testid="stMain"] li {
    color: %(text)s;
}

/* ---------- Card container ---------- */
.card {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 12px;
    padding: 24px;
    margin-bottom: 16px;
    box-shadow: 0 1px 3px rgba(0,0,0,0.06);
}

/* ---------- Timeline ---------- */
.timeline-item {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-left: 4px solid %(primary)s;
    border-radius: 10px;
    padding: 14px 18px;
    margin-bottom: 6px;
}
.timeline-item.milestone { border-left-color: %(warning)s; }
.timeline-date { color: %(text_muted)s; font-size: 0.8rem; font-weight: 600; }
.timeline-title { color: %(text)s; font-size: 1.05rem; font-weight: 700; }
.timeline-body { color: %(text_secondary)s; font-size: 0.9rem; margin-top: 4px; }
.finding {
    background: %(bg_page)s;
    border-radius: 8px;
    padding: 8px 12px;
    margin-top: 8px;
    font-size: 0.85rem;
}

/* ---------- Pill tags ---------- */
.pill {
    display: inline-block;
    padding: 3px 12px;
    border-radius: 9999px;
    font-size: 0.78rem;
    font-weight: 500;
    margin: 2px 4px 2px 0;
    border: 1px solid %(border)s;
    background: %(bg_card)s;
    color: %(text_muted)s;
}
.pill-warning {
    background: %(warning_light)s;
    color: %(warning)s;
    border-color: %(warning)s;
}

/* ---------- KPI tile ---------- */
.kpi-tile {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 12px;
    padding: 20px;
    text-align: center;
    box-shadow: 0 1px 3px rgba(0,0,0,0.06);
}
.kpi-value {
    font-size: 1.8rem;
    font-weight: 800;
    line-height: 1.1;
}
.kpi-label {
    font-size: 0.82rem;
    color: %(text_muted)s;
    text-transform: uppercase;
    letter-spacing: 0.04em;
    margin-top: 6px;
}

/* ---------- Nav card ---------- */
.nav-card {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 12px;
    padding: 24px;
    text-align: center;
    box-shadow: 0 1px 3px rgba(0,0,0,0.06);
}
.nav-icon { font-size: 2rem; margin-bottom: 8px; }
.nav-title { font-weight: 700; font-size: 1rem; color: %(text)s; }
.nav-desc { color: %(text_muted)s; font-size: 0.82rem; margin-top: 4px; }

/* ---------- Section title ---------- */
.section-title {
    font-size: 1.15rem;
    font-weight: 700;
    color: %(text)s;
    margin: 24px 0 12px 0;
    padding-bottom: 6px;
    border-bottom: 2px solid %(border)s;
}
</style>
"""


def apply_theme() -> None:
    """Inject global CSS into the page. Call once at the top of every page."""
    if "dark_mode" not in st.session_state:
        st.session_state.dark_mode = False
    colors = get_colors()
    st.markdown(_CSS_TEMPLATE % colors, unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Sidebar profile / dark-mode toggle
# ---------------------------------------------------------------------------
def render_sidebar_profile(profile: dict | None) -> None:
    """Render patient initials, name, diagnosis and the dark-mode toggle."""
    profile = profile or {}
    name = profile.get("name") or "New Patient"
    initials = "".join(w[0].upper() for w in name.split()[:2]) if name else "?"
    diagnosis = profile.get("stage") or profile.get("diagnosis") or ""
    c = get_colors()

    with st.sidebar:
        st.markdown(
            f"""
            <div style="text-align:center; padding: 16px 0 8px 0;">
                <div style="width:56px;height:56px;border-radius:50%;background:{c['primary']};
                    color:white;font-size:1.3rem;font-weight:700;display:inline-flex;
                    align-items:center;justify-content:center;margin-bottom:6px;">
                    {initials}
                </div>
                <div style="font-weight:600;color:{c['text']};font-size:0.95rem;">{name}</div>
                <div style="color:{c['text_muted']};font-size:0.8rem;">{diagnosis}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )
        st.divider()

        dark = st.toggle(
            "🌙 Dark mode",
            value=st.session_state.get("dark_mode", False),
            key="dark_mode_toggle",
        )
        if dark != st.session_state.get("dark_mode", False):
            st.session_state.dark_mode = dark
            st.rerun()
        st.divider()


# ---------------------------------------------------------------------------
# Reusable HTML helpers
# ---------------------------------------------------------------------------
def type_label(record_type: str) -> str:
    return record_type.replace("_", " ").title()


def type_badge(record_type: str) -> str:
    """Return an HTML pill with the record type's icon and color."""
    icon, color_key = RECORD_TYPE_STYLES[record_type]
    color = get_colors()[color_key]
    return (
        f'<span class="pill" style="color:{color};border-color:{color};">'
        f'{icon} {type_label(record_type)}</span>'
    )


def direction_arrow(direction: str | None) -> str:
    """Return an HTML arrow element for trend direction."""
    c = get_colors()
    if direction == "up":
        return f'<span style="color:{c["danger"]};">&#9650; Up</span>'
    if direction == "down":
        return f'<span style="color:{c["info"]};">&#9660; Down</span>'
    if direction == "stable":
        return f'<span style="color:{c["success"]};">&#9654; Stable</span>'
    return f'<span style="color:{c["text_muted"]};">Not enough data</span>'


def kpi_tile(label: str, value: str | int | float, color: str) -> str:
    """Return HTML for a single KPI tile."""
    return (
        f'<div class="kpi-tile">'
        f'  <div class="kpi-value" style="color:{color};">{value}</div>'
        f'  <div class="kpi-label">{label}</div>'
        f'</div>'
    )


def section_title(text: str) -> None:
    """Render a styled section heading."""
    st.markdown(f'<div class="section-title">{text}</div>', unsafe_allow_html=True)


def pill_tag(text: str, warning: bool = False) -> str:
    """Return HTML for a small pill tag."""
    cls = "pill pill-warning" if warning else "pill"
    return f'<span class="{cls}">{text}</span>'


# ---------------------------------------------------------------------------
# Reference range parsing
# ---------------------------------------------------------------------------
_RANGE_RE = re.compile(
    r"(?P<low>[\d.]+)\s*[-–]\s*(?P<high>[\d.]+)"
)


def parse_reference_range(range_str: str | None) -> tuple[float | None, float | None]:
    """
    Extract (low, high) floats from a reference range string like '0.4-4.0'.
    Returns (None, None) if unparseable.
    """
    if not range_str:
        return None, None
    m = _RANGE_RE.search(range_str)
    if not m:
        return None, None
    try:
        return float(m.group("low")), float(m.group("high"))
    except (ValueError, TypeError):
        return None, None
