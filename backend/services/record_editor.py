"""Turns editor drafts into finalized records.

Drafts are never mutated in place; every row operation returns a new draft so
the caller can keep the previous one for cancel/undo.
"""

import math
from datetime import date, datetime
from uuid import uuid4

from backend.errors import ValidationError
from backend.schemas.record import LabResult, LabResultDraft, MedicalRecord, RecordDraft, RecordType
from backend.schemas.summary import ExtractedLabResult

# Type-specific fields each record type keeps. Every RecordType must appear here.
TYPE_SPECIFIC_FIELDS: dict[RecordType, frozenset[str]] = {
    RecordType.BLOOD_TEST: frozenset({"results"}),
    RecordType.IMAGING: frozenset({"imaging_findings"}),
    RecordType.SURGERY: frozenset(),
    RecordType.PATHOLOGY: frozenset({"pathology_staging"}),
    RecordType.APPOINTMENT: frozenset(),
    RecordType.MEDICATION: frozenset(),
}

EDITABLE_RESULT_FIELDS = ("marker", "value", "unit", "reference_range")


def parse_iso_date(value: str | date | None, field: str) -> date:
    if isinstance(value, date):
        return value
    if not value or not value.strip():
        raise ValidationError(field, "A date is required")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(field, f"'{value}' is not a valid YYYY-MM-DD date") from None


def parse_lab_value(raw: float | str | None, field: str) -> float:
    """Parse a lab value, rejecting anything that is not a finite number."""
    if raw is None or isinstance(raw, bool):
        raise ValidationError(field, "A numeric value is required")
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValidationError(field, "A numeric value is required")
        try:
            value = float(text)
        except ValueError:
            raise ValidationError(field, f"'{raw}' is not a number") from None
    else:
        value = float(raw)
    if not math.isfinite(value):
        raise ValidationError(field, "Value must be a finite number")
    return value


def _check_index(draft: RecordDraft, index: int) -> None:
    if index < 0 or index >= len(draft.results):
        raise ValidationError("results", f"No lab result at position {index}")


def add_result_row(draft: RecordDraft) -> RecordDraft:
    results = [*draft.results, LabResultDraft()]
    return draft.model_copy(update={"results": results}, deep=True)


def remove_result_row(draft: RecordDraft, index: int) -> RecordDraft:
    _check_index(draft, index)
    results = [row for position, row in enumerate(draft.results) if position != index]
    return draft.model_copy(update={"results": results}, deep=True)


def update_result_field(draft: RecordDraft, index: int, field: str, value) -> RecordDraft:
    _check_index(draft, index)
    if field not in EDITABLE_RESULT_FIELDS:
        raise ValidationError(f"results[{index}]", f"Unknown lab result field '{field}'")
    results = list(draft.results)
    results[index] = results[index].model_copy(update={field: value})
    return draft.model_copy(update={"results": results}, deep=True)


def merge_extracted_results(draft: RecordDraft, extracted: list[ExtractedLabResult]) -> RecordDraft:
    for item in extracted:
        draft = add_result_row(draft)
        index = len(draft.results) - 1
        draft = update_result_field(draft, index, "marker", item.marker)
        draft = update_result_field(draft, index, "value", item.value)
        draft = update_result_field(draft, index, "unit", item.unit)
    return draft


def _finalize_results(rows: list[LabResultDraft]) -> list[LabResult]:
    results = []
    for index, row in enumerate(rows):
        marker = (row.marker or "").strip()
        if not marker:
            raise ValidationError(f"results[{index}].marker", "Marker name is required")
        results.append(
            LabResult(
                marker=marker,
                value=parse_lab_value(row.value, f"results[{index}].value"),
                unit=(row.unit or "").strip(),
                reference_range=(row.reference_range or "").strip() or None,
            )
        )
    return results


def finalize_record(draft: RecordDraft) -> MedicalRecord:
    """Validate ``draft`` and return the record to store.

    A draft without an id is a new record and gets a fresh one; an existing id
    is kept so the store replaces the record in place.
    """
    title = (draft.title or "").strip()
    if not title:
        raise ValidationError("title", "Title is required")
    record_date = parse_iso_date(draft.date, "date")

    kept = TYPE_SPECIFIC_FIELDS[draft.type]
    results = _finalize_results(draft.results) if "results" in kept else []
    imaging_findings = draft.imaging_findings if "imaging_findings" in kept else None
    pathology_staging = draft.pathology_staging if "pathology_staging" in kept else None

    return MedicalRecord(
        id=draft.id or str(uuid4()),
        date=record_date,
        type=draft.type,
        title=title,
        description=(draft.description or "").strip(),
        location=(draft.location or "").strip() or None,
        provider=(draft.provider or "").strip() or None,
        is_major_event=draft.is_major_event,
        results=results,
        imaging_findings=imaging_findings,
        pathology_staging=pathology_staging,
    )

