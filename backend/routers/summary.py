from fastapi import APIRouter, BackgroundTasks, Depends

from backend.routers.deps import get_record_store, get_summary_tracker
from backend.schemas.summary import ExtractRequest
from backend.services.parser import extract_lab_results
from backend.services.record_store import RecordStore
from backend.services.summarizer import SummaryTracker, share_text

router = APIRouter(prefix="/api/summary", tags=["summary"])


@router.post("", status_code=202)
def start_summary(
    background_tasks: BackgroundTasks,
    store: RecordStore = Depends(get_record_store),
    tracker: SummaryTracker = Depends(get_summary_tracker),
):
    state = tracker.begin()
    background_tasks.add_task(tracker.run, store.records)
    return {"statusCode": 202, "message": "Summary requested", "data": state.model_dump(mode="json")}


@router.get("")
def summary_state(tracker: SummaryTracker = Depends(get_summary_tracker)):
    return {"statusCode": 200, "message": "Success", "data": tracker.state.model_dump(mode="json")}


@router.delete("")
def clear_summary(tracker: SummaryTracker = Depends(get_summary_tracker)):
    return {"statusCode": 200, "message": "Summary cleared", "data": tracker.reset().model_dump(mode="json")}


@router.get("/share")
def share(
    store: RecordStore = Depends(get_record_store),
    tracker: SummaryTracker = Depends(get_summary_tracker),
):
    return {"statusCode": 200, "message": "Success", "data": {"text": share_text(store.profile.name, tracker.state.text)}}


@router.post("/extract")
def extract(payload: ExtractRequest):
    results = extract_lab_results(payload.text)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {"results": [result.model_dump(mode="json") for result in results]},
    }
