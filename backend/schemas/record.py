from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class RecordType(str, Enum):
    BLOOD_TEST = "BLOOD_TEST"
    IMAGING = "IMAGING"
    SURGERY = "SURGERY"
    PATHOLOGY = "PATHOLOGY"
    APPOINTMENT = "APPOINTMENT"
    MEDICATION = "MEDICATION"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class LabResult(BaseModel):
    """One named measurement within a blood-test record."""
    marker: str = Field(description="Lab marker name, e.g. TSH or Thyroglobulin")
    value: float = Field(description="Numeric measurement")
    unit: str = Field(default="", description="Display unit, not used in computation")
    reference_range: str | None = Field(default=None, description="Reference range as printed on the report")


class MedicalRecord(BaseModel):
    """One dated clinical event."""
    id: str
    date: date
    type: RecordType
    title: str
    description: str = ""
    location: str | None = None
    provider: str | None = None
    is_major_event: bool = False
    results: list[LabResult] = Field(default_factory=list)
    imaging_findings: str | None = None
    pathology_staging: str | None = None


class PatientProfile(BaseModel):
    name: str
    dob: date | None = None
    age: int | None = None
    diagnosis: str = "Thyroid Condition"
    diagnosis_date: date | None = None
    stage: str | None = None


class LabResultDraft(BaseModel):
    """A lab row as typed into the editor; value may still be raw text."""
    marker: str = ""
    value: float | str | None = None
    unit: str = ""
    reference_range: str | None = None


class RecordDraft(BaseModel):
    """A possibly partial record handed to the record editor."""
    id: str | None = None
    date: str | None = None
    type: RecordType = RecordType.BLOOD_TEST
    title: str = ""
    description: str = ""
    location: str | None = None
    provider: str | None = None
    is_major_event: bool = False
    results: list[LabResultDraft] = Field(default_factory=list)
    imaging_findings: str | None = None
    pathology_staging: str | None = None


class ProfileDraft(BaseModel):
    name: str = ""
    dob: str | None = None
    age: int | str | None = None
    diagnosis: str = ""
    diagnosis_date: str | None = None
    stage: str | None = None
