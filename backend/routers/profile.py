from fastapi import APIRouter, Depends

from backend.errors import PersistenceError
from backend.routers.deps import get_record_store
from backend.schemas.record import ProfileDraft
from backend.services.profile_editor import finalize_profile
from backend.services.record_store import RecordStore

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
def get_profile(store: RecordStore = Depends(get_record_store)):
    return {"statusCode": 200, "message": "Success", "data": store.profile.model_dump(mode="json")}


@router.put("")
def update_profile(draft: ProfileDraft, store: RecordStore = Depends(get_record_store)):
    profile = finalize_profile(draft, previous=store.profile)
    body = {"statusCode": 200, "message": "Profile updated", "data": profile.model_dump(mode="json")}
    try:
        store.set_profile(profile)
    except PersistenceError as exc:
        body["warning"] = f"{exc}. The change may not survive a restart."
    return body
