from fastapi import APIRouter, Depends, Query

from backend.routers.deps import get_record_store
from backend.services.record_store import RecordStore
from backend.services.trend_analyzer import marker_trend
from backend.services.views import (
    default_selected_markers,
    discover_markers,
    latest_value_for_marker,
    marker_time_series,
    pivot_table,
)

router = APIRouter(prefix="/api/labs", tags=["labs"])


@router.get("/markers")
def markers(store: RecordStore = Depends(get_record_store)):
    found = discover_markers(store.records)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {"markers": found, "default_selection": default_selected_markers(found)},
    }


@router.get("/table")
def table(
    markers: list[str] | None = Query(default=None),
    store: RecordStore = Depends(get_record_store),
):
    records = store.records
    selected = markers if markers is not None else default_selected_markers(discover_markers(records))
    rows = pivot_table(records, selected)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {"markers": selected, "rows": [row.model_dump(mode="json") for row in rows]},
    }


@router.get("/series")
def series(marker: str = Query(..., min_length=1), store: RecordStore = Depends(get_record_store)):
    points = marker_time_series(store.records, marker)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {"marker": marker, "points": [point.model_dump(mode="json") for point in points]},
    }


@router.get("/latest")
def latest(marker: str = Query(..., min_length=1), store: RecordStore = Depends(get_record_store)):
    value = latest_value_for_marker(store.records, marker)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {"marker": marker, "value": value, "available": value is not None},
    }


@router.get("/trend")
def trend(marker: str = Query(..., min_length=1), store: RecordStore = Depends(get_record_store)):
    return {"statusCode": 200, "message": "Success", "data": marker_trend(store.records, marker).model_dump(mode="json")}
