import os

import requests
import streamlit as st

BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


class ApiClient:
    def create_record(self, draft: dict):
        return requests.post(f"{BASE_URL}/api/records", json=draft, timeout=30)

    def update_record(self, record_id: str, draft: dict):
        return requests.put(f"{BASE_URL}/api/records/{record_id}", json=draft, timeout=30)

    def delete_record(self, record_id: str):
        return requests.delete(f"{BASE_URL}/api/records/{record_id}", timeout=30)

    def record(self, record_id: str):
        return requests.get(f"{BASE_URL}/api/records/{record_id}", timeout=30)

    def import_results(self, draft: dict, text: str):
        return requests.post(f"{BASE_URL}/api/records/draft/import-results", json={"draft": draft, "text": text}, timeout=120)

    def update_profile(self, draft: dict):
        return requests.put(f"{BASE_URL}/api/profile", json=draft, timeout=30)

    def start_summary(self):
        return requests.post(f"{BASE_URL}/api/summary", timeout=30)

    def summary_state(self):
        return requests.get(f"{BASE_URL}/api/summary", timeout=30)

    def clear_summary(self):
        return requests.delete(f"{BASE_URL}/api/summary", timeout=30)

    def share_text(self):
        return requests.get(f"{BASE_URL}/api/summary/share", timeout=30)


def error_message(res) -> str:
    """Pull the human-readable message out of an error envelope."""
    try:
        payload = res.json()
    except ValueError:
        return res.text
    message = payload.get("message") or res.text
    field = payload.get("field")
    return f"{field}: {message}" if field else message


def clear_cache() -> None:
    """Drop cached reads after any mutation so every page sees the new state."""
    st.cache_data.clear()


# ---------------------------------------------------------------------------
# Cached data fetchers: return (ok, data) and are cached for 60 seconds.
# These are standalone functions so @st.cache_data can hash the arguments.
# ---------------------------------------------------------------------------

def _get_data(path: str, params=None, default=None):
    res = requests.get(f"{BASE_URL}{path}", params=params, timeout=30)
    return res.ok, res.json()["data"] if res.ok else default


@st.cache_data(ttl=60, show_spinner=False)
def cached_timeline(filter_mode: str = "all") -> tuple[bool, dict]:
    return _get_data("/api/records", params={"filter": filter_mode}, default={})


@st.cache_data(ttl=60, show_spinner=False)
def cached_stats() -> tuple[bool, dict]:
    return _get_data("/api/records/stats", default={})


@st.cache_data(ttl=60, show_spinner=False)
def cached_profile() -> tuple[bool, dict]:
    return _get_data("/api/profile", default={})


@st.cache_data(ttl=60, show_spinner=False)
def cached_markers() -> tuple[bool, dict]:
    return _get_data("/api/labs/markers", default={})


@st.cache_data(ttl=60, show_spinner=False)
def cached_lab_table(markers: tuple[str, ...]) -> tuple[bool, dict]:
    return _get_data("/api/labs/table", params=[("markers", marker) for marker in markers], default={})


@st.cache_data(ttl=60, show_spinner=False)
def cached_marker_series(marker: str) -> tuple[bool, dict]:
    return _get_data("/api/labs/series", params={"marker": marker}, default={})


@st.cache_data(ttl=60, show_spinner=False)
def cached_marker_trend(marker: str) -> tuple[bool, dict]:
    return _get_data("/api/labs/trend", params={"marker": marker}, default={})
