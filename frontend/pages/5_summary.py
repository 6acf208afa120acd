import sys
import time
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import streamlit as st

from utils.api_client import ApiClient, cached_profile, error_message
from utils.theme import (
    apply_theme,
    get_colors,
    render_sidebar_profile,
    section_title,
)

st.set_page_config(page_title="AI Summary", page_icon="🤖", layout="wide")
apply_theme()
_, profile = cached_profile()
render_sidebar_profile(profile)
COLORS = get_colors()

client = ApiClient()

POLL_SECONDS = 2

# ── Header ────────────────────────────────────────────────────────────────
st.markdown(
    f"""
    <div style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">🤖 AI Health Summary</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        A plain-language overview of your records, written to share with your care team.
        It is not medical advice.
    </p>
    """,
    unsafe_allow_html=True,
)

res = client.summary_state()
if not res.ok:
    st.error(f"Could not load summary status: {error_message(res)}")
    st.stop()
state = res.json()["data"]
status = state["status"]


def _start():
    start = client.start_summary()
    if start.status_code == 409:
        st.info("A summary is already being written.")
    elif not start.ok:
        st.error(f"Could not start the summary: {error_message(start)}")
    else:
        st.rerun()


if status == "idle":
    if st.button("Generate summary", type="primary", use_container_width=True):
        _start()
elif status == "pending":
    with st.spinner("Writing your summary..."):
        time.sleep(POLL_SECONDS)
    st.rerun()
elif status == "failed":
    st.error(f"The summary could not be generated: {state.get('error') or 'unknown error'}")
    if st.button("Try again", type="primary"):
        _start()
else:
    section_title("Summary")
    with st.container(border=True):
        st.markdown(state["text"])
    if state.get("completed_at"):
        st.caption(f"Generated {state['completed_at'][:19].replace('T', ' ')}")

    st.markdown("<div style='height:12px'></div>", unsafe_allow_html=True)
    c1, c2, c3 = st.columns(3)
    with c1:
        if st.button("Regenerate", use_container_width=True):
            _start()
    with c2:
        share = client.share_text()
        if share.ok:
            st.download_button(
                "Download to share",
                data=share.json()["data"]["text"],
                file_name="thyrotrack_summary.txt",
                mime="text/plain",
                use_container_width=True,
            )
    with c3:
        if st.button("Clear", use_container_width=True):
            client.clear_summary()
            st.rerun()
