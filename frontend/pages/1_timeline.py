import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import streamlit as st

from utils.api_client import (
    ApiClient,
    cached_profile,
    cached_timeline,
    clear_cache,
    error_message,
)
from utils.theme import (
    apply_theme,
    get_colors,
    pill_tag,
    render_sidebar_profile,
    type_badge,
)

st.set_page_config(page_title="Timeline", page_icon="🗓️", layout="wide")
apply_theme()
_, profile = cached_profile()
render_sidebar_profile(profile)
COLORS = get_colors()

client = ApiClient()

# ── Header ────────────────────────────────────────────────────────────────
st.markdown(
    f"""
    <div style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">🗓️ Medical Timeline</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Newest first. Milestones mark the major turning points.
    </p>
    """,
    unsafe_allow_html=True,
)

if st.session_state.get("flash_warning"):
    st.warning(st.session_state.pop("flash_warning"))

top_l, top_r = st.columns([3, 1])
with top_l:
    mode = st.radio(
        "Show",
        options=["all", "milestones"],
        format_func=lambda m: "All records" if m == "all" else "Milestones only",
        horizontal=True,
        label_visibility="collapsed",
    )
with top_r:
    if st.button("➕ Add record", use_container_width=True, type="primary"):
        st.session_state.edit_record_id = None
        st.switch_page("pages/2_record_editor.py")

ok, data = cached_timeline(mode)
if not ok:
    st.error("Failed to load records.")
    st.stop()

records = data.get("records", [])
if not records:
    if mode == "milestones":
        st.info("No milestones recorded yet.")
    else:
        st.info("No records yet. Add your first appointment, scan or lab result.")
    st.stop()

st.caption(f"{data.get('total', len(records))} records")

for rec in records:
    milestone_cls = " milestone" if rec.get("is_major_event") else ""
    meta = " &middot; ".join(x for x in (rec.get("provider"), rec.get("location")) if x)
    extra = ""
    if rec.get("results"):
        extra += " ".join(
            pill_tag(f"{r['marker']}: {r['value']:g} {r.get('unit') or ''}".strip())
            for r in rec["results"]
        )
    if rec.get("imaging_findings"):
        extra += f'<div class="finding"><b>Findings:</b> {rec["imaging_findings"]}</div>'
    if rec.get("pathology_staging"):
        extra += f'<div class="finding"><b>Staging:</b> {rec["pathology_staging"]}</div>'
    star = pill_tag("★ Milestone", warning=True) if rec.get("is_major_event") else ""

    body_col, action_col = st.columns([6, 1])
    with body_col:
        st.markdown(
            f"""
            <div class="timeline-item{milestone_cls}">
                <div class="timeline-date">{rec['date']} {type_badge(rec['type'])} {star}</div>
                <div class="timeline-title">{rec['title']}</div>
                <div class="timeline-body">{rec.get('description') or ''}</div>
                <div class="timeline-body" style="color:{COLORS['text_muted']};">{meta}</div>
                <div style="margin-top:6px;">{extra}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )
    with action_col:
        if st.button("Edit", key=f"edit_{rec['id']}", use_container_width=True):
            st.session_state.edit_record_id = rec["id"]
            st.switch_page("pages/2_record_editor.py")
        if st.button("Delete", key=f"delete_{rec['id']}", use_container_width=True):
            st.session_state.confirm_delete = rec["id"]

    if st.session_state.get("confirm_delete") == rec["id"]:
        st.warning(f"Delete **{rec['title']}**? This cannot be undone.")
        yes, no, _ = st.columns([1, 1, 4])
        if yes.button("Yes, delete", key=f"confirm_{rec['id']}", type="primary"):
            res = client.delete_record(rec["id"])
            st.session_state.confirm_delete = None
            if res.ok:
                warning = res.json().get("warning")
                if warning:
                    st.session_state.flash_warning = warning
                clear_cache()
                st.rerun()
            else:
                st.error(f"Delete failed: {error_message(res)}")
        if no.button("Cancel", key=f"cancel_{rec['id']}"):
            st.session_state.confirm_delete = None
            st.rerun()
