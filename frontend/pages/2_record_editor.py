import sys
from datetime import date
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import pandas as pd
import streamlit as st

from utils.api_client import ApiClient, cached_profile, clear_cache, error_message
from utils.theme import (
    RECORD_TYPE_STYLES,
    RECORD_TYPES,
    apply_theme,
    get_colors,
    render_sidebar_profile,
    section_title,
    type_label,
)

st.set_page_config(page_title="Record Editor", page_icon="✏️", layout="wide")
apply_theme()
_, profile = cached_profile()
render_sidebar_profile(profile)
COLORS = get_colors()

client = ApiClient()

RESULT_COLUMNS = ["marker", "value", "unit", "reference_range"]


def _blank_draft() -> dict:
    return {
        "id": None,
        "date": date.today().isoformat(),
        "type": "BLOOD_TEST",
        "title": "",
        "description": "",
        "location": "",
        "provider": "",
        "is_major_event": False,
        "results": [],
        "imaging_findings": "",
        "pathology_staging": "",
    }


def _results_frame(results: list[dict]) -> pd.DataFrame:
    rows = [
        {
            "marker": r.get("marker") or "",
            "value": "" if r.get("value") is None else f"{r['value']}",
            "unit": r.get("unit") or "",
            "reference_range": r.get("reference_range") or "",
        }
        for r in results
    ]
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def _results_from_frame(df: pd.DataFrame) -> list[dict]:
    results = []
    for row in df.to_dict("records"):
        cleaned = {k: (None if pd.isna(v) else str(v)) for k, v in row.items()}
        if not any((cleaned.get(k) or "").strip() for k in RESULT_COLUMNS):
            continue
        results.append({
            "marker": cleaned.get("marker") or "",
            "value": cleaned.get("value"),
            "unit": cleaned.get("unit") or "",
            "reference_range": cleaned.get("reference_range") or None,
        })
    return results


# ── Load the draft for this session ───────────────────────────────────────
edit_id = st.session_state.get("edit_record_id")
if st.session_state.get("draft_for") != edit_id or "draft" not in st.session_state:
    draft = _blank_draft()
    if edit_id:
        res = client.record(edit_id)
        if not res.ok:
            st.error(f"Could not load record: {error_message(res)}")
            st.session_state.edit_record_id = None
            st.stop()
        record = res.json()["data"]
        draft.update({k: v for k, v in record.items() if v is not None})
    st.session_state.draft = draft
    st.session_state.draft_for = edit_id
    st.session_state.editor_version = st.session_state.get("editor_version", 0) + 1

draft = st.session_state.draft
key_prefix = f"{edit_id or 'new'}_{st.session_state.editor_version}"

# ── Header ────────────────────────────────────────────────────────────────
heading = "Edit Record" if edit_id else "New Record"
st.markdown(
    f"""
    <div style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">✏️ {heading}</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Only the fields that apply to the chosen record type are kept on save.
    </p>
    """,
    unsafe_allow_html=True,
)

if edit_id and st.button("Start a new record instead"):
    st.session_state.edit_record_id = None
    st.rerun()

# ── Common fields ─────────────────────────────────────────────────────────
c1, c2 = st.columns(2)
with c1:
    record_date = st.date_input(
        "Date",
        value=date.fromisoformat(draft["date"]) if draft.get("date") else date.today(),
        key=f"date_{key_prefix}",
    )
    record_type = st.selectbox(
        "Type",
        options=RECORD_TYPES,
        index=RECORD_TYPES.index(draft.get("type", "BLOOD_TEST")),
        format_func=lambda t: f"{RECORD_TYPE_STYLES[t][0]} {type_label(t)}",
        key=f"type_{key_prefix}",
    )
    title = st.text_input("Title", value=draft.get("title", ""), key=f"title_{key_prefix}")
with c2:
    provider = st.text_input("Provider", value=draft.get("provider") or "", key=f"provider_{key_prefix}")
    location = st.text_input("Location", value=draft.get("location") or "", key=f"location_{key_prefix}")
    is_major = st.checkbox(
        "Milestone (major event)",
        value=bool(draft.get("is_major_event")),
        key=f"major_{key_prefix}",
    )
description = st.text_area("Description", value=draft.get("description", ""), key=f"desc_{key_prefix}")

imaging_findings = draft.get("imaging_findings") or ""
pathology_staging = draft.get("pathology_staging") or ""
results = draft.get("results", [])

# ── Type-specific fields ──────────────────────────────────────────────────
if record_type == "BLOOD_TEST":
    section_title("Lab Results")
    edited = st.data_editor(
        _results_frame(results),
        num_rows="dynamic",
        use_container_width=True,
        hide_index=True,
        column_config={
            "marker": st.column_config.TextColumn("Marker", help="e.g. TSH, Free T4, Thyroglobulin"),
            "value": st.column_config.TextColumn("Value", help="Numbers only"),
            "unit": st.column_config.TextColumn("Unit"),
            "reference_range": st.column_config.TextColumn("Reference range"),
        },
        key=f"results_{key_prefix}",
    )
    results = _results_from_frame(edited)

    with st.expander("📄 Import results from report text"):
        report_text = st.text_area(
            "Paste the text of a lab report",
            height=180,
            key=f"report_text_{key_prefix}",
        )
        if st.button("Extract lab values", disabled=not report_text.strip()):
            current = dict(draft, results=results, date=record_date.isoformat(), type=record_type)
            with st.spinner("Reading report..."):
                res = client.import_results(current, report_text)
            if res.ok:
                payload = res.json()["data"]
                imported = payload.get("imported", 0)
                st.session_state.draft = dict(payload["draft"], title=title, description=description,
                                              provider=provider, location=location, is_major_event=is_major)
                st.session_state.editor_version += 1
                if imported:
                    st.session_state.flash_success = f"Imported {imported} lab results."
                else:
                    st.session_state.flash_warning = "No lab values could be found in that text."
                st.rerun()
            else:
                st.error(f"Extraction failed: {error_message(res)}")
elif record_type == "IMAGING":
    imaging_findings = st.text_area("Imaging findings", value=imaging_findings, key=f"imaging_{key_prefix}")
elif record_type == "PATHOLOGY":
    pathology_staging = st.text_input("Pathology staging", value=pathology_staging, key=f"staging_{key_prefix}")

if st.session_state.get("flash_success"):
    st.success(st.session_state.pop("flash_success"))
if st.session_state.get("flash_warning"):
    st.warning(st.session_state.pop("flash_warning"))

# ── Save ──────────────────────────────────────────────────────────────────
st.markdown("<div style='height:12px'></div>", unsafe_allow_html=True)
if st.button("Save record", type="primary", use_container_width=True):
    payload = {
        "id": edit_id,
        "date": record_date.isoformat(),
        "type": record_type,
        "title": title,
        "description": description,
        "location": location or None,
        "provider": provider or None,
        "is_major_event": is_major,
        "results": results,
        "imaging_findings": imaging_findings or None,
        "pathology_staging": pathology_staging or None,
    }
    res = client.update_record(edit_id, payload) if edit_id else client.create_record(payload)
    if res.ok:
        body = res.json()
        clear_cache()
        if body.get("warning"):
            st.session_state.flash_warning = body["warning"]
        st.session_state.edit_record_id = None
        st.session_state.pop("draft", None)
        st.switch_page("pages/1_timeline.py")
    else:
        st.error(f"Could not save: {error_message(res)}")
