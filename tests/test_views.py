from datetime import date

import pytest

from backend.schemas.record import RecordType
from backend.schemas.views import CellStatus, TimelineFilter
from backend.seed.record_seed import seed_records
from backend.services.trend_analyzer import compute_delta, marker_trend
from backend.services.views import (
    chronological_timeline,
    default_selected_markers,
    discover_markers,
    latest_value_for_marker,
    major_event_count,
    marker_time_series,
    pivot_table,
    record_stats,
    records_by_type,
)

from helpers import blood_test, make_record


def test_timeline_is_most_recent_first():
    a = make_record("a", "2024-05-12")
    b = make_record("b", "2023-01-15")
    assert [r.id for r in chronological_timeline([b, a])] == ["a", "b"]


def test_timeline_keeps_insertion_order_for_same_date():
    records = [
        make_record("first", "2024-01-01"),
        make_record("older", "2023-01-01"),
        make_record("second", "2024-01-01"),
        make_record("third", "2024-01-01"),
    ]
    ordered = chronological_timeline(records)
    assert [r.id for r in ordered] == ["first", "second", "third", "older"]


def test_timeline_milestones_only():
    ordered = chronological_timeline(seed_records(), TimelineFilter.MILESTONES)
    assert [r.id for r in ordered] == ["5", "4", "2"]


def test_major_event_count_over_seed():
    assert major_event_count(seed_records()) == 3


def test_discover_markers_sorted_and_deduplicated():
    records = [
        blood_test("1", "2023-01-15", ("TSH", 4.2), ("Free T4", 1.1), ("Thyroglobulin", 45)),
        blood_test("2", "2024-05-25", ("TSH", 12.5), ("Calcium", 8.2)),
        make_record("3", "2024-06-01", RecordType.IMAGING),
    ]
    assert discover_markers(records) == ["Calcium", "Free T4", "Thyroglobulin", "TSH"]


def test_latest_value_uses_latest_date():
    records = [
        blood_test("6", "2024-05-25", ("Thyroglobulin", 0.8)),
        blood_test("1", "2023-01-15", ("Thyroglobulin", 45)),
    ]
    assert latest_value_for_marker(records, "Thyroglobulin") == 0.8


def test_latest_value_skips_tests_without_the_marker():
    records = [
        blood_test("1", "2023-01-15", ("Thyroglobulin", 45)),
        blood_test("2", "2024-01-01", ("TSH", 2.0)),
    ]
    assert latest_value_for_marker(records, "Thyroglobulin") == 45


def test_latest_value_tie_goes_to_later_insertion():
    records = [
        blood_test("1", "2024-01-01", ("TSH", 1.0)),
        blood_test("2", "2024-01-01", ("TSH", 2.0)),
    ]
    assert latest_value_for_marker(records, "TSH") == 2.0


def test_latest_value_not_available():
    assert latest_value_for_marker(seed_records(), "PTH") is None


def test_pivot_table_marks_absent_cells():
    records = [
        blood_test("1", "2023-01-15", ("TSH", 4.2), ("Thyroglobulin", 0)),
        blood_test("2", "2024-05-25", ("TSH", 12.5)),
        make_record("3", "2024-06-01", RecordType.SURGERY),
    ]
    rows = pivot_table(records, ["TSH", "Thyroglobulin"])

    assert [row.id for row in rows] == ["2", "1"]
    assert rows[0].cells["Thyroglobulin"].status == CellStatus.ABSENT
    assert rows[0].cells["Thyroglobulin"].value is None
    assert rows[1].cells["Thyroglobulin"].status == CellStatus.PRESENT
    assert rows[1].cells["Thyroglobulin"].value == 0
    assert rows[0].cells["TSH"].unit == "u"


def test_marker_time_series_is_chronological():
    points = marker_time_series(seed_records(), "TSH")
    assert [(p.date, p.value) for p in points] == [(date(2023, 1, 15), 4.2), (date(2024, 5, 25), 12.5)]
    assert points[0].record_id == "1"


def test_default_selection_prefers_thyroid_trio():
    assert default_selected_markers(["Calcium", "Free T4", "Thyroglobulin", "TSH"]) == ["Free T4", "Thyroglobulin", "TSH"]
    assert default_selected_markers(["A", "B", "C", "D"]) == ["A", "B", "C"]


def test_records_by_type_covers_every_type():
    counts = records_by_type(seed_records())
    assert set(counts) == set(RecordType)
    assert counts[RecordType.IMAGING] == 2
    assert counts[RecordType.MEDICATION] == 0


def test_record_stats():
    stats = record_stats(seed_records())
    assert stats.total_records == 6
    assert stats.major_events == 3
    assert stats.latest_thyroglobulin == 0.8


def test_compute_delta():
    assert compute_delta(10, 12) == pytest.approx(20.0)
    assert compute_delta(0, 5) is None
    assert compute_delta(None, 5) is None


def test_marker_trend_compares_last_two_readings():
    trend = marker_trend(seed_records(), "Thyroglobulin")
    assert trend.previous == 45
    assert trend.current == 0.8
    assert trend.direction == "down"
    assert trend.latest_date == date(2024, 5, 25)


def test_marker_trend_with_single_reading():
    trend = marker_trend(seed_records(), "Calcium")
    assert trend.current == 8.2
    assert trend.previous is None
    assert trend.delta_percent is None
    assert trend.direction is None
