"""Profile service - the caller's own profile."""

from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.db.models import Profile
from app.schemas.profile import ProfileUpdate


class ProfileNotFoundError(Exception):
    pass


def get_profile(db: Session, user_id: UUID) -> Profile:
    profile = (
        db.query(Profile)
        .options(joinedload(Profile.organization))
        .filter(Profile.id == user_id)
        .first()
    )
    if not profile:
        raise ProfileNotFoundError()
    return profile


def update_profile(db: Session, user_id: UUID, data: ProfileUpdate) -> Profile:
    """Apply the user-writable subset of profile fields."""
    profile = get_profile(db, user_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    db.commit()
    return get_profile(db, user_id)
