import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional
from sqlalchemy import asc, desc, func, or_
from sqlalchemy.orm import Session

from shared.core.schemas import Lookup, UserToken
from shared.helpers.email_helper import EmailHelper
from shared.helpers.json_response_helper import error_response, success_response
from shared.helpers.password_generator import generate_temporary_password
from shared.models.user_login_session import UserLoginSession
from shared.models.user_profiles import UserProfile
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import Department, UserRole
from ...enum.parking_enum import ReservationStatus, UserBulkAction
from ...models.parking.reservations import Reservation
from ...schemas.admin.user_management_schemas import (
    BulkUserRequest,
    BulkUserResponse,
    BulkUserResult,
    UserCreate,
    UserListResponse,
    UserOut,
    UserRequest,
    UserUpdate,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_BULK_USERS = 100
SORTABLE_FIELDS = {
    "created_at": UserProfile.created_at,
    "updated_at": UserProfile.updated_at,
    "email": UserProfile.email,
    "username": UserProfile.username,
    "first_name": UserProfile.first_name,
    "last_name": UserProfile.last_name,
    "department": UserProfile.department,
    "role": UserProfile.role,
}


def _now():
    return datetime.now(timezone.utc)


def _active_reservation_counts(db: Session, user_ids) -> Dict[uuid.UUID, int]:
    if not user_ids:
        return {}
    rows = (
        db.query(Reservation.user_id, func.count(Reservation.id))
        .filter(
            Reservation.user_id.in_(user_ids),
            Reservation.status == ReservationStatus.active.value
        )
        .group_by(Reservation.user_id)
        .all()
    )
    return {user_id: count for user_id, count in rows}


def get_users(db: Session, params: UserRequest) -> UserListResponse:
    query = db.query(UserProfile)

    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(
            or_(
                UserProfile.email.ilike(search_term),
                UserProfile.username.ilike(search_term),
                UserProfile.first_name.ilike(search_term),
                UserProfile.last_name.ilike(search_term)
            )
        )

    if params.role and params.role != "all":
        query = query.filter(UserProfile.role == params.role)

    if params.department and params.department != "all":
        query = query.filter(UserProfile.department == params.department)

    if params.is_active is not None:
        query = query.filter(UserProfile.is_active == params.is_active)

    total = query.with_entities(func.count(UserProfile.uid)).scalar()

    sort_column = SORTABLE_FIELDS.get(params.sort_by, UserProfile.created_at)
    order = asc if (params.sort_order or "").lower() == "asc" else desc
    profiles = (
        query.order_by(order(sort_column))
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    counts = _active_reservation_counts(db, [p.uid for p in profiles])
    users = [
        UserOut.model_validate(profile).model_copy(
            update={"active_reservations": counts.get(profile.uid, 0)})
        for profile in profiles
    ]

    return UserListResponse(
        users=users,
        total=total,
        has_more=params.skip + len(users) < total
    )


def validate_user_fields(db: Session, data: dict, existing_uid=None, creating: bool = False) -> dict:
    """Collect every field problem so the client can show them together."""
    field_errors = {}

    if creating:
        for field in ("email", "username", "first_name", "last_name"):
            if not data.get(field):
                field_errors[field] = f"{field.replace('_', ' ').capitalize()} is required"

    email = data.get("email")
    if email and not EMAIL_PATTERN.match(email):
        field_errors["email"] = "Invalid email format"

    department = data.get("department")
    if department and department not in [d.value for d in Department]:
        field_errors["department"] = (
            "Department must be one of: " + ", ".join(d.value for d in Department))

    role = data.get("role")
    if role and role not in [r.value for r in UserRole]:
        field_errors["role"] = (
            "Role must be one of: " + ", ".join(r.value for r in UserRole))

    if email and "email" not in field_errors:
        query = db.query(UserProfile).filter(
            func.lower(UserProfile.email) == email.lower())
        if existing_uid:
            query = query.filter(UserProfile.uid != existing_uid)
        if query.first():
            field_errors["email"] = "Email already exists"

    username = data.get("username")
    if username:
        query = db.query(UserProfile).filter(UserProfile.username == username)
        if existing_uid:
            query = query.filter(UserProfile.uid != existing_uid)
        if query.first():
            field_errors["username"] = "Username already exists"

    return field_errors


def _raise_field_errors(field_errors: dict):
    return error_response(
        message="Validation failed",
        status_code=AppStatusCode.REQUIRED_VALIDATION_ERROR,
        data={"field_errors": field_errors}
    )


def get_profile_or_404(db: Session, user_id) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.uid == user_id).first()
    if not profile:
        return error_response(
            message="User not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )
    return profile


def create_user(
    background_tasks,
    db: Session,
    auth_db: Session,
    current_user: UserToken,
    payload: UserCreate
):
    data = payload.model_dump()
    data["role"] = data.get("role") or UserRole.USER.value

    field_errors = validate_user_fields(db, data, creating=True)
    if auth_db.query(Users).filter(func.lower(Users.email) == (data["email"] or "").lower()).first():
        field_errors.setdefault("email", "Email already exists")
    if field_errors:
        return _raise_field_errors(field_errors)

    temporary_password = generate_temporary_password()

    # identity first; a failure here leaves no profile behind
    identity = Users(
        email=data["email"].lower(),
        display_name=f"{data['first_name']} {data['last_name']}",
    )
    identity.set_password(temporary_password)
    auth_db.add(identity)
    auth_db.commit()
    auth_db.refresh(identity)

    profile = UserProfile(
        uid=identity.id,
        email=identity.email,
        username=data["username"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        department=data.get("department"),
        role=data["role"],
        is_active=True,
        password_reset=True,
        created_by=current_user.user_id,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)

    logger.info(f"Admin {current_user.user_id} created user {profile.uid} ({profile.email})")
    send_account_created_email(background_tasks, profile, temporary_password)

    return success_response(
        data=UserOut.model_validate(profile),
        message="User created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY
    )


def update_user(db: Session, auth_db: Session, current_user: UserToken, payload: UserUpdate):
    profile = get_profile_or_404(db, payload.user_id)
    updates = payload.model_dump(exclude_none=True, exclude={"user_id"})
    if not updates:
        return error_response(
            message="No valid fields to update",
            status_code=AppStatusCode.INVALID_INPUT
        )

    field_errors = validate_user_fields(db, updates, existing_uid=profile.uid)
    if field_errors:
        return _raise_field_errors(field_errors)

    if updates.get("is_active") is False and profile.uid == current_user.user_id:
        return error_response(
            message="You cannot deactivate your own account",
            status_code=AppStatusCode.INVALID_INPUT
        )

    identity = auth_db.query(Users).filter(Users.id == profile.uid).first()

    if "email" in updates and updates["email"].lower() != profile.email:
        if not identity:
            return error_response(
                message="Failed to update email in authentication",
                status_code=AppStatusCode.DEPENDENCY_FAILURE,
                http_status=500
            )
        updates["email"] = updates["email"].lower()
        identity.email = updates["email"]
        auth_db.commit()

    if "is_active" in updates and identity:
        identity.is_disabled = not updates["is_active"]
        if not updates["is_active"]:
            _end_sessions(auth_db, profile.uid)
        auth_db.commit()

    for key, value in updates.items():
        setattr(profile, key, value)
    profile.updated_at = _now()
    profile.updated_by = current_user.user_id
    db.commit()
    db.refresh(profile)

    logger.info(f"Admin {current_user.user_id} updated user {profile.uid}: {sorted(updates)}")
    return success_response(
        data=UserOut.model_validate(profile),
        message="User updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY
    )


def _end_sessions(auth_db: Session, user_id):
    auth_db.query(UserLoginSession).filter(
        UserLoginSession.user_id == user_id,
        UserLoginSession.is_active == True
    ).update({"is_active": False, "ended_at": _now()}, synchronize_session=False)


def _soft_delete(db: Session, auth_db: Session, profile: UserProfile, admin_id):
    profile.is_active = False
    profile.deleted_at = _now()
    profile.deleted_by = admin_id
    profile.updated_at = _now()
    profile.updated_by = admin_id

    identity = auth_db.query(Users).filter(Users.id == profile.uid).first()
    if identity:
        identity.is_disabled = True
    _end_sessions(auth_db, profile.uid)


def _has_active_reservations(db: Session, user_id) -> bool:
    return db.query(Reservation.id).filter(
        Reservation.user_id == user_id,
        Reservation.status == ReservationStatus.active.value
    ).first() is not None


def delete_user(db: Session, auth_db: Session, current_user: UserToken, user_id):
    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        return error_response(
            message="User not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )

    if user_uuid == current_user.user_id:
        return error_response(
            message="You cannot delete your own account",
            status_code=AppStatusCode.INVALID_INPUT
        )

    profile = get_profile_or_404(db, user_uuid)

    if _has_active_reservations(db, user_uuid):
        return error_response(
            message="Cannot delete user with active reservations. Cancel their reservations first.",
            status_code=AppStatusCode.USER_HAS_ACTIVE_RESERVATIONS
        )

    _soft_delete(db, auth_db, profile, current_user.user_id)
    auth_db.commit()
    db.commit()

    logger.info(f"Admin {current_user.user_id} deleted user {user_uuid}")
    return success_response(
        data={"user_id": str(user_uuid)},
        message="User deleted successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY
    )


def _apply_bulk_action(
    background_tasks,
    db: Session,
    auth_db: Session,
    profile: UserProfile,
    action: UserBulkAction,
    data: dict,
    admin_id
) -> Optional[str]:
    """Apply one bulk action to one user; returns an error message or None."""
    identity = auth_db.query(Users).filter(Users.id == profile.uid).first()

    if action == UserBulkAction.activate:
        profile.is_active = True
        profile.deleted_at = None
        profile.deleted_by = None
        if identity:
            identity.is_disabled = False

    elif action == UserBulkAction.deactivate:
        profile.is_active = False
        if identity:
            identity.is_disabled = True
        _end_sessions(auth_db, profile.uid)

    elif action == UserBulkAction.delete:
        if _has_active_reservations(db, profile.uid):
            return "User has active reservations"
        _soft_delete(db, auth_db, profile, admin_id)

    elif action == UserBulkAction.updateRole:
        role = data.get("role")
        if role not in [r.value for r in UserRole]:
            return "Invalid role"
        profile.role = role

    elif action == UserBulkAction.updateDepartment:
        department = data.get("department")
        if department not in [d.value for d in Department]:
            return "Invalid department"
        profile.department = department

    elif action == UserBulkAction.resetPassword:
        if not identity:
            return "Authentication account not found"
        temporary_password = generate_temporary_password()
        identity.set_password(temporary_password)
        profile.password_reset = True
        profile.password_reset_requested_at = _now()
        profile.password_reset_requested_by = admin_id
        send_password_reset_email(background_tasks, profile, temporary_password)

    profile.updated_at = _now()
    profile.updated_by = admin_id
    return None


def bulk_update_users(
    background_tasks,
    db: Session,
    auth_db: Session,
    current_user: UserToken,
    payload: BulkUserRequest
) -> BulkUserResponse:
    if not payload.user_ids:
        return error_response(
            message="user_ids must be a non-empty list",
            status_code=AppStatusCode.INVALID_INPUT
        )

    if len(payload.user_ids) > MAX_BULK_USERS:
        return error_response(
            message=f"Cannot process more than {MAX_BULK_USERS} users at once",
            status_code=AppStatusCode.INVALID_INPUT
        )

    if current_user.user_id in payload.user_ids:
        return error_response(
            message="Cannot perform bulk actions on your own account",
            status_code=AppStatusCode.INVALID_INPUT
        )

    data = payload.data or {}
    results, errors = [], []

    for user_id in payload.user_ids:
        profile = db.query(UserProfile).filter(UserProfile.uid == user_id).first()
        if not profile:
            errors.append(BulkUserResult(
                user_id=str(user_id), success=False, message="User not found"))
            continue

        error = _apply_bulk_action(
            background_tasks, db, auth_db, profile, payload.action, data, current_user.user_id)
        if error:
            errors.append(BulkUserResult(
                user_id=str(user_id), success=False, message=error))
        else:
            results.append(BulkUserResult(
                user_id=str(user_id), success=True, message=f"{payload.action.value} applied"))

    auth_db.commit()
    db.commit()

    logger.info(f"Admin {current_user.user_id} bulk {payload.action.value}: "
                f"{len(results)} processed, {len(errors)} failed")
    return BulkUserResponse(
        action=payload.action,
        processed=len(results),
        failed=len(errors),
        results=results,
        errors=errors
    )


def department_lookup():
    return [Lookup(id=d.value, name=d.value.capitalize()) for d in Department]


def role_lookup():
    return [Lookup(id=r.value, name=r.value.capitalize()) for r in UserRole]


def send_account_created_email(background_tasks, profile: UserProfile, password: str):
    email_helper = EmailHelper()

    context = {
        "first_name": profile.first_name,
        "username": profile.username,
        "password": password,
    }

    background_tasks.add_task(
        email_helper.send_email,
        template_code="account_created",
        recipients=[profile.email],
        context=context
    )


def send_password_reset_email(background_tasks, profile: UserProfile, password: str):
    email_helper = EmailHelper()

    background_tasks.add_task(
        email_helper.send_email,
        template_code="password_reset",
        recipients=[profile.email],
        context={"first_name": profile.first_name, "password": password}
    )
