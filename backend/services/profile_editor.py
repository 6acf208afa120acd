from datetime import date

from backend.errors import ValidationError
from backend.schemas.record import PatientProfile, ProfileDraft
from backend.services.record_editor import parse_iso_date

DEFAULT_DIAGNOSIS = "Thyroid Condition"


def calculate_age(dob: date, today: date | None = None) -> int:
    """Whole years since ``dob``, one less if this year's birthday hasn't come yet."""
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def _parse_age(raw: int | str | None) -> int | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            raw = int(raw.strip())
        except ValueError:
            raise ValidationError("age", f"'{raw}' is not a whole number") from None
    if raw < 0:
        raise ValidationError("age", "Age cannot be negative")
    return raw


def finalize_profile(
    draft: ProfileDraft,
    previous: PatientProfile | None = None,
    today: date | None = None,
) -> PatientProfile:
    """Validate ``draft`` against the current profile.

    Age is derived from the date of birth whenever the date of birth changed;
    otherwise the typed age is kept, and a missing age keeps the stored one
    while a date of birth is set.
    """
    name = (draft.name or "").strip()
    if not name:
        raise ValidationError("name", "Name is required")

    dob = parse_iso_date(draft.dob, "dob") if draft.dob and draft.dob.strip() else None
    diagnosis_date = (
        parse_iso_date(draft.diagnosis_date, "diagnosis_date")
        if draft.diagnosis_date and draft.diagnosis_date.strip()
        else None
    )

    previous_dob = previous.dob if previous else None
    if dob is not None and dob != previous_dob:
        if dob > (today or date.today()):
            raise ValidationError("dob", "Date of birth cannot be in the future")
        age = calculate_age(dob, today)
    else:
        age = _parse_age(draft.age)
        if age is None and previous is not None and dob is not None:
            age = previous.age

    return PatientProfile(
        name=name,
        dob=dob,
        age=age,
        diagnosis=(draft.diagnosis or "").strip() or DEFAULT_DIAGNOSIS,
        diagnosis_date=diagnosis_date,
        stage=(draft.stage or "").strip(),
    )
