import logging
from datetime import datetime, timezone
from fastapi import Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core import auth
from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import error_response, success_response
from shared.models.user_login_session import UserLoginSession
from shared.models.user_profiles import UserProfile
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from ..schemas.authschemas import (
    AuthenticationResponse,
    AuthUserOut,
    LoginRequest,
    ValidateResponse,
)

logger = logging.getLogger(__name__)


def _invalid_credentials():
    return error_response(
        message="Invalid email or password",
        status_code=str(AppStatusCode.AUTHENTICATION_CREDENTIALS_INVALID),
        http_status=status.HTTP_401_UNAUTHORIZED
    )


def login(request: Request, db: Session, facility_db: Session, req: LoginRequest) -> AuthenticationResponse:
    user = db.query(Users).filter(
        func.lower(Users.email) == req.email.lower()).first()

    if not user or not user.verify_password(req.password):
        logger.info(f"Failed login attempt for {req.email}")
        return _invalid_credentials()

    if user.is_disabled:
        return error_response(
            message="User account is disabled",
            status_code=str(AppStatusCode.AUTHENTICATION_USER_INACTIVE),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    profile = facility_db.query(UserProfile).filter(
        UserProfile.uid == user.id).first()
    if not profile or not profile.is_active:
        return error_response(
            message="User is not active. Access denied",
            status_code=str(AppStatusCode.AUTHENTICATION_USER_INACTIVE),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    return get_user_token(request, db, user, profile)


def get_user_token(request: Request, db: Session, user: Users, profile: UserProfile) -> AuthenticationResponse:
    session = UserLoginSession(
        user_id=user.id,
        ip_address=request.client.host if request.client else None,
        user_agent=(request.headers.get("user-agent") or "")[:255],
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    token = auth.create_access_token({
        "user_id": str(user.id),
        "session_id": str(session.id),
        "email": user.email,
        "role": profile.role,
    })

    logger.info(f"User {user.id} logged in (session {session.id})")
    return AuthenticationResponse(
        access_token=token,
        token_type="bearer",
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=AuthUserOut.model_validate(profile)
    )


def logout_user(db: Session, current_user: UserToken):
    session = db.query(UserLoginSession).filter(
        UserLoginSession.id == current_user.session_id,
        UserLoginSession.user_id == current_user.user_id
    ).first()

    if session:
        session.is_active = False
        session.ended_at = datetime.now(timezone.utc)
        db.commit()

    logger.info(f"User {current_user.user_id} logged out (session {current_user.session_id})")
    return success_response(
        data=None,
        message="Logged out successfully",
        status_code=AppStatusCode.OPERATION_SUCCESSFUL
    )


def validate_user(facility_db: Session, current_user: UserToken) -> ValidateResponse:
    profile = facility_db.query(UserProfile).filter(
        UserProfile.uid == current_user.user_id).first()
    return ValidateResponse(valid=True, user=AuthUserOut.model_validate(profile))
