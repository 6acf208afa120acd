from fastapi import Request

from backend.services.record_store import RecordStore
from backend.services.summarizer import SummaryTracker


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_summary_tracker(request: Request) -> SummaryTracker:
    return request.app.state.summary_tracker
