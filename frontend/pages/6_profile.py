import sys
from datetime import date
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import streamlit as st

from utils.api_client import ApiClient, cached_profile, clear_cache, error_message
from utils.theme import (
    apply_theme,
    get_colors,
    kpi_tile,
    render_sidebar_profile,
)

st.set_page_config(page_title="Profile", page_icon="👤", layout="wide")
apply_theme()
p_ok, profile = cached_profile()
render_sidebar_profile(profile)
COLORS = get_colors()

client = ApiClient()

# ── Header ────────────────────────────────────────────────────────────────
st.markdown(
    f"""
    <div style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">👤 Patient Profile</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Age is worked out from your date of birth whenever it changes.
    </p>
    """,
    unsafe_allow_html=True,
)

if not p_ok:
    st.error("Failed to load profile.")
    st.stop()

if st.session_state.get("flash_warning"):
    st.warning(st.session_state.pop("flash_warning"))
if st.session_state.get("flash_success"):
    st.success(st.session_state.pop("flash_success"))

age = profile.get("age")
c1, c2 = st.columns(2)
c1.markdown(kpi_tile("Age", age if age is not None else "N/A", COLORS["primary"]), unsafe_allow_html=True)
c2.markdown(kpi_tile("Diagnosis", profile.get("diagnosis") or "N/A", COLORS["text"]), unsafe_allow_html=True)
st.markdown("<div style='height:16px'></div>", unsafe_allow_html=True)


def _as_date(value):
    return date.fromisoformat(value) if value else None


with st.form("profile_form"):
    name = st.text_input("Name", value=profile.get("name") or "")
    f1, f2 = st.columns(2)
    with f1:
        dob = st.date_input(
            "Date of birth",
            value=_as_date(profile.get("dob")),
            min_value=date(1900, 1, 1),
            max_value=date.today(),
        )
        diagnosis = st.text_input("Diagnosis", value=profile.get("diagnosis") or "")
    with f2:
        manual_age = st.number_input(
            "Age",
            min_value=0,
            max_value=130,
            value=age,
            step=1,
            help="Recalculated whenever the date of birth changes.",
        )
        diagnosis_date = st.date_input("Diagnosis date", value=_as_date(profile.get("diagnosis_date")))
    stage = st.text_input("Stage", value=profile.get("stage") or "")
    submitted = st.form_submit_button("Save profile", type="primary", use_container_width=True)

if submitted:
    payload = {
        "name": name,
        "dob": dob.isoformat() if dob else None,
        "age": manual_age,
        "diagnosis": diagnosis,
        "diagnosis_date": diagnosis_date.isoformat() if diagnosis_date else None,
        "stage": stage or None,
    }
    res = client.update_profile(payload)
    if res.ok:
        body = res.json()
        clear_cache()
        if body.get("warning"):
            st.session_state.flash_warning = body["warning"]
        else:
            st.session_state.flash_success = "Profile saved."
        st.rerun()
    else:
        st.error(f"Could not save: {error_message(res)}")
