from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_auth_db, get_facility_db as get_db
from shared.core.schemas import UserToken
from ...crud.user import user_profile_crud as crud
from ...schemas.user.user_profile_schemas import UserProfileResponse, UserProfileUpdate

router = APIRouter(prefix="/api/user", tags=["user profile"])


@router.get("/profile", response_model=UserProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_profile(db, current_user)


@router.put("/profile", response_model=None)
def update_profile(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.update_profile(db, current_user, payload)


@router.delete("/profile", response_model=None)
def deactivate_profile(
    db: Session = Depends(get_db),
    auth_db: Session = Depends(get_auth_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.deactivate_profile(db, auth_db, current_user)
