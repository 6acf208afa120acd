from fastapi import APIRouter, Depends, Query

from backend.errors import PersistenceError
from backend.routers.deps import get_record_store
from backend.schemas.record import MedicalRecord, RecordDraft
from backend.schemas.summary import ImportResultsRequest
from backend.schemas.views import TimelineFilter
from backend.services.parser import extract_lab_results
from backend.services.record_editor import finalize_record, merge_extracted_results
from backend.services.record_store import RecordStore
from backend.services.views import chronological_timeline, record_stats

router = APIRouter(prefix="/api/records", tags=["records"])


def _save(store: RecordStore, record: MedicalRecord, message: str) -> dict:
    body = {"statusCode": 200, "message": message, "data": record.model_dump(mode="json")}
    try:
        store.upsert(record)
    except PersistenceError as exc:
        body["warning"] = f"{exc}. The change may not survive a restart."
    return body


@router.get("")
def timeline(
    filter_mode: TimelineFilter = Query(default=TimelineFilter.ALL, alias="filter"),
    store: RecordStore = Depends(get_record_store),
):
    records = chronological_timeline(store.records, filter_mode)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {
            "filter": filter_mode.value,
            "total": len(records),
            "records": [record.model_dump(mode="json") for record in records],
        },
    }


@router.get("/stats")
def stats(store: RecordStore = Depends(get_record_store)):
    return {"statusCode": 200, "message": "Success", "data": record_stats(store.records).model_dump(mode="json")}


@router.post("/draft/import-results")
def import_results(payload: ImportResultsRequest):
    extracted = extract_lab_results(payload.text)
    draft = merge_extracted_results(payload.draft, extracted)
    return {
        "statusCode": 200,
        "message": f"Imported {len(extracted)} lab results",
        "data": {"draft": draft.model_dump(mode="json"), "imported": len(extracted)},
    }


@router.get("/{record_id}")
def get_record(record_id: str, store: RecordStore = Depends(get_record_store)):
    return {"statusCode": 200, "message": "Success", "data": store.get(record_id).model_dump(mode="json")}


@router.post("")
def create_record(draft: RecordDraft, store: RecordStore = Depends(get_record_store)):
    record = finalize_record(draft)
    return _save(store, record, "Record saved")


@router.put("/{record_id}")
def update_record(record_id: str, draft: RecordDraft, store: RecordStore = Depends(get_record_store)):
    record = finalize_record(draft.model_copy(update={"id": record_id}))
    return _save(store, record, "Record updated")


@router.delete("/{record_id}")
def delete_record(record_id: str, store: RecordStore = Depends(get_record_store)):
    body = {"statusCode": 200, "message": "Record deleted", "data": None}
    try:
        store.delete(record_id)
    except PersistenceError as exc:
        body["warning"] = f"{exc}. The change may not survive a restart."
    return body
