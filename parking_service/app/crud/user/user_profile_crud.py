import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import error_response, success_response
from shared.models.user_login_session import UserLoginSession
from shared.models.user_profiles import UserProfile
from shared.utils.app_status_code import AppStatusCode
from ...schemas.user.user_profile_schemas import (
    UserProfileOut,
    UserProfileResponse,
    UserProfileUpdate,
)
from ..parking.reservation_crud import get_user_reservations

logger = logging.getLogger(__name__)


def get_profile_or_404(db: Session, uid) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.uid == uid).first()
    if not profile:
        return error_response(
            message="User profile not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )
    return profile


def get_profile(db: Session, current_user: UserToken) -> UserProfileResponse:
    profile = get_profile_or_404(db, current_user.user_id)
    reservations = get_user_reservations(db, current_user.user_id)
    return UserProfileResponse(
        profile=UserProfileOut.model_validate(profile),
        reservations=reservations.reservations
    )


def update_profile(db: Session, current_user: UserToken, payload: UserProfileUpdate):
    updates = payload.model_dump(exclude_none=True)
    if not updates:
        return error_response(
            message="No valid fields to update",
            status_code=AppStatusCode.INVALID_INPUT
        )

    profile = get_profile_or_404(db, current_user.user_id)

    if "username" in updates and updates["username"] != profile.username:
        taken = db.query(UserProfile).filter(
            UserProfile.username == updates["username"],
            UserProfile.uid != profile.uid
        ).first()
        if taken:
            return error_response(
                message="Username already exists",
                status_code=AppStatusCode.USER_USERNAME_IS_UNIQUE
            )

    for key, value in updates.items():
        setattr(profile, key, value.value if hasattr(value, "value") else value)
    profile.updated_at = datetime.now(timezone.utc)
    profile.updated_by = current_user.user_id
    db.commit()
    db.refresh(profile)

    return success_response(
        data=UserProfileOut.model_validate(profile),
        message="Profile updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY
    )


def deactivate_profile(db: Session, auth_db: Session, current_user: UserToken):
    """Soft-delete the caller's own profile and end all of their sessions."""
    profile = get_profile_or_404(db, current_user.user_id)

    profile.is_active = False
    profile.deleted_at = datetime.now(timezone.utc)
    profile.deleted_by = current_user.user_id
    db.commit()

    auth_db.query(UserLoginSession).filter(
        UserLoginSession.user_id == current_user.user_id,
        UserLoginSession.is_active == True
    ).update({"is_active": False, "ended_at": datetime.now(timezone.utc)},
            synchronize_session=False)
    auth_db.commit()

    logger.info(f"User {current_user.user_id} deactivated their profile")
    return success_response(
        data={"uid": str(profile.uid)},
        message="Account deactivated successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY
    )
