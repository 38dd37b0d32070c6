from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from shared.models.user_login_session import UserLoginSession
from shared.models.user_profiles import UserProfile
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole
from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.core.schemas import UserToken
from shared.core.database import get_auth_db as get_db, get_facility_db

security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None):
    payload = data.copy()
    expires = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload['exp'] = expires

    return jwt.encode(payload, settings.JWT_SECRET,
                      algorithm=settings.JWT_ALGORITHM)


def verify_token(db: Session, token: str) -> UserToken:
    """Verify and decode a JWT token bound to an active login session."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        user = UserToken(**payload)
    except (JWTError, PydanticValidationError):
        return error_response(
            message="Invalid or expired token",
            status_code=str(AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    session = db.query(UserLoginSession).filter(
        UserLoginSession.id == user.session_id,
        UserLoginSession.user_id == user.user_id
    ).first()

    if not session or not session.is_active:
        return error_response(
            message="Session has been logged out or is inactive",
            status_code=str(AppStatusCode.AUTHENTICATION_SESSION_TIMEOUT),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    return user


def validate_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    facility_db: Session = Depends(get_facility_db)
) -> UserToken:
    if credentials is None or not credentials.credentials:
        return error_response(
            message="Missing bearer token",
            status_code=str(AppStatusCode.AUTHENTICATION_TOKEN_INVALID),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    user_data = verify_token(db, credentials.credentials)

    identity = db.query(Users).filter(Users.id == user_data.user_id).first()
    if not identity:
        return error_response(
            message="User not found",
            status_code=str(AppStatusCode.AUTHENTICATION_USER_INVALID),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if identity.is_disabled:
        return error_response(
            message="User account is disabled",
            status_code=str(AppStatusCode.AUTHENTICATION_USER_INACTIVE),
            http_status=status.HTTP_403_FORBIDDEN
        )

    # role is read from the profile so role changes apply without a new login
    profile = facility_db.query(UserProfile).filter(
        UserProfile.uid == user_data.user_id).first()
    if not profile or not profile.is_active:
        return error_response(
            message="User is not active. Access denied",
            status_code=str(AppStatusCode.AUTHENTICATION_USER_INACTIVE),
            http_status=status.HTTP_403_FORBIDDEN
        )

    user_data.role = profile.role
    user_data.status = "active"
    return user_data


def allow_admin(current_user: UserToken = Depends(validate_current_token)):
    if current_user.role != UserRole.ADMIN.value:
        return error_response(
            message="Access forbidden: Admins only",
            status_code=str(AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS),
            http_status=status.HTTP_403_FORBIDDEN
        )

    return current_user
