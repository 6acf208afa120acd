from datetime import date

from backend.schemas.record import LabResult, MedicalRecord, PatientProfile, RecordType


SEED_RECORDS = [
    MedicalRecord(
        id="1",
        date=date(2023, 1, 15),
        type=RecordType.BLOOD_TEST,
        title="Baseline Thyroid Panel",
        description="Initial tests after noticing a neck lump.",
        results=[
            LabResult(marker="TSH", value=4.2, unit="mIU/L", reference_range="0.4-4.0"),
            LabResult(marker="Free T4", value=1.1, unit="ng/dL", reference_range="0.8-1.8"),
            LabResult(marker="Thyroglobulin", value=45, unit="ng/mL"),
        ],
    ),
    MedicalRecord(
        id="2",
        date=date(2023, 2, 10),
        type=RecordType.IMAGING,
        title="Neck Ultrasound",
        description="Ultrasound of thyroid and lymph nodes.",
        imaging_findings="2.4cm solid, hypoechoic nodule in left lobe. TIRADS 5. Multiple enlarged level VI lymph nodes.",
        is_major_event=True,
    ),
    MedicalRecord(
        id="3",
        date=date(2023, 3, 5),
        type=RecordType.IMAGING,
        title="CT Chest/Neck",
        description="Staging scan prior to surgery.",
        imaging_findings="No distant metastasis. Confirmed primary nodule and suspicious lymphadenopathy.",
    ),
    MedicalRecord(
        id="4",
        date=date(2024, 5, 12),
        type=RecordType.SURGERY,
        title="Total Thyroidectomy",
        description="Total thyroidectomy with central neck dissection.",
        location="City Medical Center",
        provider="Dr. Sarah Chen",
        is_major_event=True,
    ),
    MedicalRecord(
        id="5",
        date=date(2024, 5, 18),
        type=RecordType.PATHOLOGY,
        title="Pathology Report",
        description="Post-surgical tissue analysis.",
        pathology_staging="pT2 N1a M0. Papillary Thyroid Carcinoma, Classic Variant.",
        is_major_event=True,
    ),
    MedicalRecord(
        id="6",
        date=date(2024, 5, 25),
        type=RecordType.BLOOD_TEST,
        title="Post-Op Lab Work",
        description="First labs after surgery.",
        results=[
            LabResult(marker="TSH", value=12.5, unit="mIU/L"),
            LabResult(marker="Thyroglobulin", value=0.8, unit="ng/mL"),
            LabResult(marker="Calcium", value=8.2, unit="mg/dL"),
        ],
    ),
]

# Canonical thyroid-care markers and the spellings reports commonly use for them.
COMMON_MARKERS = [
    {"name": "TSH", "aliases": ["THYROID STIMULATING HORMONE", "THYROTROPIN"]},
    {"name": "Free T4", "aliases": ["FT4", "FREE THYROXINE", "T4 FREE"]},
    {"name": "Free T3", "aliases": ["FT3", "FREE TRIIODOTHYRONINE", "T3 FREE"]},
    {"name": "Thyroglobulin", "aliases": ["TG", "THYROGLOBULIN TUMOR MARKER"]},
    {"name": "TgAb", "aliases": ["THYROGLOBULIN ANTIBODY", "THYROGLOBULIN AB", "ANTI-TG", "ANTI THYROGLOBULIN"]},
    {"name": "Calcium", "aliases": ["CA", "SERUM CALCIUM", "TOTAL CALCIUM"]},
    {"name": "PTH", "aliases": ["PARATHYROID HORMONE", "INTACT PTH"]},
    {"name": "Calcitonin", "aliases": ["CALCITONIN SERUM"]},
    {"name": "Vitamin D", "aliases": ["25-OH VITAMIN D", "25-HYDROXYVITAMIN D"]},
]

PREFERRED_MARKERS = ["TSH", "Thyroglobulin", "Free T4"]


def seed_records() -> list[MedicalRecord]:
    return [record.model_copy(deep=True) for record in SEED_RECORDS]


def default_profile(today: date | None = None) -> PatientProfile:
    return PatientProfile(
        name="New Patient",
        dob=None,
        age=None,
        diagnosis="Thyroid Condition",
        diagnosis_date=today or date.today(),
        stage="",
    )
