from backend.schemas.record import MedicalRecord
from backend.schemas.views import MarkerTrend
from backend.services.views import marker_time_series

STABLE_BAND_PERCENT = 5.0


def compute_delta(prev: float | None, curr: float | None) -> float | None:
    if prev is None or curr is None or prev == 0:
        return None
    return ((curr - prev) / abs(prev)) * 100.0


def direction_for(delta: float | None) -> str | None:
    if delta is None:
        return None
    if delta > STABLE_BAND_PERCENT:
        return "up"
    if delta < -STABLE_BAND_PERCENT:
        return "down"
    return "stable"


def marker_trend(records: list[MedicalRecord], marker: str) -> MarkerTrend:
    series = marker_time_series(records, marker)
    latest = series[-1] if series else None
    previous = series[-2] if len(series) >= 2 else None
    delta = compute_delta(
        previous.value if previous else None,
        latest.value if latest else None,
    )
    return MarkerTrend(
        marker=marker,
        previous=previous.value if previous else None,
        current=latest.value if latest else None,
        previous_date=previous.date if previous else None,
        latest_date=latest.date if latest else None,
        delta_percent=round(delta, 2) if delta is not None else None,
        direction=direction_for(delta),
    )
