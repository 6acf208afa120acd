from backend.errors import PersistenceError


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_timeline_default_and_milestones(client):
    payload = client.get("/api/records").json()["data"]
    assert payload["total"] == 6
    assert [r["id"] for r in payload["records"]] == ["6", "5", "4", "3", "2", "1"]

    milestones = client.get("/api/records", params={"filter": "milestones"}).json()["data"]
    assert [r["id"] for r in milestones["records"]] == ["5", "4", "2"]


def test_stats(client):
    data = client.get("/api/records/stats").json()["data"]
    assert data["major_events"] == 3
    assert data["latest_thyroglobulin"] == 0.8
    assert data["by_type"]["BLOOD_TEST"] == 2


def test_create_record(client, store):
    response = client.post(
        "/api/records",
        json={
            "date": "2024-08-01",
            "type": "BLOOD_TEST",
            "title": "Three-month follow-up",
            "results": [{"marker": "Thyroglobulin", "value": "0.2", "unit": "ng/mL"}],
        },
    )
    assert response.status_code == 200
    record = response.json()["data"]
    assert record["id"]
    assert record["results"][0]["value"] == 0.2
    assert store.get(record["id"]).title == "Three-month follow-up"

    latest = client.get("/api/labs/latest", params={"marker": "Thyroglobulin"}).json()["data"]
    assert latest == {"marker": "Thyroglobulin", "value": 0.2, "available": True}


def test_update_record_keeps_position(client, store):
    response = client.put(
        "/api/records/3",
        json={"date": "2023-03-06", "type": "IMAGING", "title": "CT Neck (revised)"},
    )
    assert response.status_code == 200
    records = store.records
    assert len(records) == 6
    assert records[2].id == "3"
    assert records[2].title == "CT Neck (revised)"


def test_create_record_validation_error_envelope(client, store):
    response = client.post("/api/records", json={"date": "2024-08-01", "type": "BLOOD_TEST", "title": ""})
    assert response.status_code == 422
    payload = response.json()
    assert payload["error"] == "ValidationError"
    assert payload["field"] == "title"
    assert len(store.records) == 6


def test_non_numeric_lab_value_is_rejected(client):
    response = client.post(
        "/api/records",
        json={
            "date": "2024-08-01",
            "type": "BLOOD_TEST",
            "title": "Labs",
            "results": [{"marker": "TSH", "value": "high", "unit": "mIU/L"}],
        },
    )
    assert response.status_code == 422
    assert response.json()["field"] == "results[0].value"


def test_delete_record_is_idempotent(client, store):
    assert client.delete("/api/records/4").status_code == 200
    assert client.delete("/api/records/4").status_code == 200
    assert len(store.records) == 5


def test_get_missing_record(client):
    response = client.get("/api/records/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


def test_persistence_failure_is_a_warning(client, store, monkeypatch):
    def failing_set(key, value):
        raise PersistenceError("Could not save 'thyrotrack_records' to storage")

    monkeypatch.setattr(store._kv, "set", failing_set)
    response = client.post("/api/records", json={"date": "2024-09-01", "type": "APPOINTMENT", "title": "Endocrinology"})
    assert response.status_code == 200
    assert "may not survive" in response.json()["warning"]
    assert len(store.records) == 7


def test_profile_update_derives_age(client):
    response = client.put("/api/profile", json={"name": "Alex Johnson", "dob": "1990-01-01", "diagnosis": ""})
    assert response.status_code == 200
    profile = client.get("/api/profile").json()["data"]
    assert profile["name"] == "Alex Johnson"
    assert profile["diagnosis"] == "Thyroid Condition"
    assert isinstance(profile["age"], int)


def test_profile_resave_keeps_derived_age(client):
    first = client.put("/api/profile", json={"name": "Alex Johnson", "dob": "1990-01-01", "age": None})
    derived = first.json()["data"]["age"]
    assert isinstance(derived, int)

    second = client.put(
        "/api/profile",
        json={"name": "Alex Johnson", "dob": "1990-01-01", "age": None, "stage": "Stage I"},
    )
    assert second.status_code == 200
    profile = client.get("/api/profile").json()["data"]
    assert profile["age"] == derived
    assert profile["stage"] == "Stage I"


def test_profile_requires_name(client):
    response = client.put("/api/profile", json={"name": ""})
    assert response.status_code == 422
    assert response.json()["field"] == "name"


def test_markers_and_table(client):
    markers = client.get("/api/labs/markers").json()["data"]
    assert markers["markers"] == ["Calcium", "Free T4", "Thyroglobulin", "TSH"]
    assert markers["default_selection"] == ["Free T4", "Thyroglobulin", "TSH"]

    table = client.get("/api/labs/table", params=[("markers", "TSH"), ("markers", "Free T4")]).json()["data"]
    assert table["markers"] == ["TSH", "Free T4"]
    assert [row["id"] for row in table["rows"]] == ["6", "1"]
    assert table["rows"][0]["cells"]["Free T4"] == {"status": "absent", "value": None, "unit": None}
    assert table["rows"][1]["cells"]["Free T4"]["status"] == "present"


def test_series_and_trend(client):
    series = client.get("/api/labs/series", params={"marker": "TSH"}).json()["data"]["points"]
    assert [p["date"] for p in series] == ["2023-01-15", "2024-05-25"]

    trend = client.get("/api/labs/trend", params={"marker": "TSH"}).json()["data"]
    assert trend["direction"] == "up"


def test_latest_marker_not_available(client):
    data = client.get("/api/labs/latest", params={"marker": "PTH"}).json()["data"]
    assert data["available"] is False
    assert data["value"] is None


def test_marker_with_slash_is_reachable(client):
    client.post(
        "/api/records",
        json={
            "date": "2024-08-01",
            "type": "BLOOD_TEST",
            "title": "Protein panel",
            "results": [{"marker": "A/G Ratio", "value": 1.4}],
        },
    )
    assert "A/G Ratio" in client.get("/api/labs/markers").json()["data"]["markers"]

    series = client.get("/api/labs/series", params={"marker": "A/G Ratio"})
    assert series.status_code == 200
    assert [p["value"] for p in series.json()["data"]["points"]] == [1.4]

    latest = client.get("/api/labs/latest", params={"marker": "A/G Ratio"}).json()["data"]
    assert latest["value"] == 1.4
    trend = client.get("/api/labs/trend", params={"marker": "A/G Ratio"}).json()["data"]
    assert trend["current"] == 1.4
    assert trend["previous"] is None


def test_summary_lifecycle(client):
    assert client.get("/api/summary").json()["data"]["status"] == "idle"

    started = client.post("/api/summary")
    assert started.status_code == 202
    assert started.json()["data"]["status"] == "pending"

    # Background task has run by the time TestClient returns.
    state = client.get("/api/summary").json()["data"]
    assert state["status"] == "succeeded"
    assert state["text"] == "Summary of 6 records"

    share = client.get("/api/summary/share").json()["data"]["text"]
    assert share == "Medical Summary for New Patient\n\nSummary of 6 records"

    assert client.delete("/api/summary").json()["data"]["status"] == "idle"


def test_summary_single_flight(client, tracker):
    tracker.begin()
    response = client.post("/api/summary")
    assert response.status_code == 409
    assert response.json()["error"] == "Conflict"


def test_extract_endpoint(client, monkeypatch):
    class FakeLLM:
        def complete(self, prompt):
            return type("Response", (), {"text": '[{"marker": "Tg", "value": 0.1, "unit": "ng/mL"}]'})()

    monkeypatch.setattr("backend.services.parser.get_llm", lambda model, temperature=0.2: FakeLLM())
    response = client.post("/api/summary/extract", json={"text": "Thyroglobulin <0.1 ng/mL"})
    assert response.status_code == 200
    assert response.json()["data"]["results"] == [{"marker": "Thyroglobulin", "value": 0.1, "unit": "ng/mL"}]

    imported = client.post(
        "/api/records/draft/import-results",
        json={"draft": {"title": "Labs", "date": "2024-10-01"}, "text": "Thyroglobulin <0.1 ng/mL"},
    ).json()["data"]
    assert imported["imported"] == 1
    assert imported["draft"]["results"][0]["marker"] == "Thyroglobulin"


def test_extract_failure_is_reported(client, monkeypatch):
    def broken_llm(model, temperature=0.2):
        raise RuntimeError("OPENAI_API_KEY is missing")

    monkeypatch.setattr("backend.services.parser.get_llm", broken_llm)
    response = client.post("/api/summary/extract", json={"text": "TSH 2.0"})
    assert response.status_code == 502
    assert response.json()["error"] == "SummaryGenerationError"
