"""Read-only projections of the record collection.

Every function here is pure: it takes the current records and returns a new
value without touching the store.
"""

from collections import Counter
from collections.abc import Iterable, Iterator

from backend.schemas.record import LabResult, MedicalRecord, RecordType
from backend.schemas.views import CellStatus, MarkerCell, PivotRow, RecordStats, TimelineFilter, TrendPoint
from backend.seed.record_seed import PREFERRED_MARKERS


def _blood_tests(records: Iterable[MedicalRecord]) -> Iterator[MedicalRecord]:
    return (record for record in records if record.type == RecordType.BLOOD_TEST)


def _find_result(record: MedicalRecord, marker: str) -> LabResult | None:
    return next((result for result in record.results if result.marker == marker), None)


def chronological_timeline(
    records: list[MedicalRecord],
    filter_mode: TimelineFilter = TimelineFilter.ALL,
) -> list[MedicalRecord]:
    """Most recent first; records on the same date keep their insertion order."""
    if filter_mode == TimelineFilter.MILESTONES:
        records = [record for record in records if record.is_major_event]
    return sorted(records, key=lambda record: record.date, reverse=True)


def major_event_count(records: list[MedicalRecord]) -> int:
    return sum(1 for record in records if record.is_major_event)


def latest_value_for_marker(records: list[MedicalRecord], marker: str) -> float | None:
    """Value from the most recent blood test carrying ``marker``.

    On a date tie the record later in the collection wins. ``None`` means the
    marker was never measured.
    """
    best_date = None
    best_value = None
    for record in _blood_tests(records):
        result = _find_result(record, marker)
        if result is None:
            continue
        if best_date is None or record.date >= best_date:
            best_date = record.date
            best_value = result.value
    return best_value


def discover_markers(records: list[MedicalRecord]) -> list[str]:
    markers = {result.marker for record in _blood_tests(records) for result in record.results if result.marker}
    return sorted(markers, key=lambda marker: (marker.casefold(), marker))


def default_selected_markers(markers: list[str]) -> list[str]:
    preferred = [marker for marker in markers if marker in PREFERRED_MARKERS]
    return preferred or markers[:3]


def pivot_table(records: list[MedicalRecord], selected_markers: list[str]) -> list[PivotRow]:
    rows = []
    for record in _blood_tests(records):
        cells = {}
        for marker in selected_markers:
            result = _find_result(record, marker)
            if result is None:
                cells[marker] = MarkerCell.absent()
            else:
                cells[marker] = MarkerCell(status=CellStatus.PRESENT, value=result.value, unit=result.unit)
        rows.append(PivotRow(id=record.id, date=record.date, title=record.title, cells=cells))
    return sorted(rows, key=lambda row: row.date, reverse=True)


def marker_time_series(records: list[MedicalRecord], marker: str) -> list[TrendPoint]:
    """Oldest first, so charts read left to right in time."""
    points = []
    for record in _blood_tests(records):
        result = _find_result(record, marker)
        if result is not None:
            points.append(TrendPoint(date=record.date, value=result.value, unit=result.unit, record_id=record.id))
    return sorted(points, key=lambda point: point.date)


def records_by_type(records: list[MedicalRecord]) -> dict[RecordType, int]:
    counts = Counter(record.type for record in records)
    return {record_type: counts.get(record_type, 0) for record_type in RecordType}


def record_stats(records: list[MedicalRecord]) -> RecordStats:
    return RecordStats(
        total_records=len(records),
        major_events=major_event_count(records),
        by_type=records_by_type(records),
        latest_thyroglobulin=latest_value_for_marker(records, "Thyroglobulin"),
    )
