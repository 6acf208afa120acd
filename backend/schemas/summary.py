from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from backend.schemas.record import RecordDraft


class SummaryStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SummaryState(BaseModel):
    status: SummaryStatus = SummaryStatus.IDLE
    text: str | None = None
    error: str | None = None
    requested_at: datetime | None = None
    completed_at: datetime | None = None


class ExtractedLabResult(BaseModel):
    """A lab measurement pulled out of raw report text by the AI collaborator."""
    marker: str = Field(description="The medical lab marker name")
    value: float = Field(description="The numerical value recorded")
    unit: str = Field(default="", description="The measurement unit, e.g. mIU/L")


class ExtractRequest(BaseModel):
    text: str


class ImportResultsRequest(BaseModel):
    draft: RecordDraft
    text: str
