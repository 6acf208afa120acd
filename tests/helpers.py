from datetime import date

from backend.schemas.record import LabResult, MedicalRecord, RecordType


def make_record(
    record_id: str,
    on: str,
    record_type: RecordType = RecordType.APPOINTMENT,
    major: bool = False,
    results: list[tuple[str, float]] | None = None,
    title: str | None = None,
) -> MedicalRecord:
    return MedicalRecord(
        id=record_id,
        date=date.fromisoformat(on),
        type=record_type,
        title=title or f"Record {record_id}",
        is_major_event=major,
        results=[LabResult(marker=marker, value=value, unit="u") for marker, value in results or []],
    )


def blood_test(record_id: str, on: str, *results: tuple[str, float]) -> MedicalRecord:
    return make_record(record_id, on, RecordType.BLOOD_TEST, results=list(results))
