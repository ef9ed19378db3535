"""The caller's own profile. Authenticated, but no organization required."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.cors import register_resource_methods
from app.core.deps import get_db, get_identity
from app.schemas.auth import Identity
from app.schemas.common import DataResponse
from app.schemas.profile import ProfileRead, ProfileUpdate
from app.services import profile_service
from app.services.profile_service import ProfileNotFoundError

router = APIRouter(prefix="/api/auth/profile", tags=["profile"])
register_resource_methods(router.prefix, ("GET", "PUT", "OPTIONS"))


@router.get("", response_model=DataResponse[ProfileRead])
def read_profile(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    try:
        profile = profile_service.get_profile(db, identity.user_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"data": ProfileRead.model_validate(profile)}


@router.put("", response_model=DataResponse[ProfileRead])
def update_profile(
    data: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    try:
        profile = profile_service.update_profile(db, identity.user_id, data)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"data": ProfileRead.model_validate(profile)}
