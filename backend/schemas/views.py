from datetime import date
from enum import Enum

from pydantic import BaseModel

from backend.schemas.record import RecordType


class TimelineFilter(str, Enum):
    ALL = "all"
    MILESTONES = "milestones"


class CellStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class MarkerCell(BaseModel):
    status: CellStatus
    value: float | None = None
    unit: str | None = None

    @classmethod
    def absent(cls) -> "MarkerCell":
        return cls(status=CellStatus.ABSENT)


class PivotRow(BaseModel):
    id: str
    date: date
    title: str
    cells: dict[str, MarkerCell]


class TrendPoint(BaseModel):
    date: date
    value: float
    unit: str
    record_id: str


class MarkerTrend(BaseModel):
    marker: str
    previous: float | None
    current: float | None
    previous_date: date | None
    latest_date: date | None
    delta_percent: float | None
    direction: str | None


class RecordStats(BaseModel):
    total_records: int
    major_events: int
    by_type: dict[RecordType, int]
    latest_thyroglobulin: float | None
