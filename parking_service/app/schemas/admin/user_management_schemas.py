from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.parking_enum import UserBulkAction
from ..user.user_profile_schemas import UserProfileOut


class UserRequest(CommonQueryParams):
    role: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None
    sort_by: Optional[str] = "created_at"
    sort_order: Optional[str] = "desc"


class UserOut(UserProfileOut):
    active_reservations: int = 0


class UserListResponse(BaseModel):
    users: List[UserOut]
    total: int
    has_more: bool


# Field checks live in the crud so every problem is reported at once in
# ``field_errors``, hence plain strings here.
class UserCreate(EmptyStringModel):
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = "user"


class UserUpdate(EmptyStringModel):
    user_id: UUID
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


class BulkUserRequest(BaseModel):
    user_ids: List[UUID]
    action: UserBulkAction
    data: Optional[Dict[str, Any]] = None


class BulkUserResult(BaseModel):
    user_id: str
    success: bool
    message: str


class BulkUserResponse(BaseModel):
    action: UserBulkAction
    processed: int
    failed: int
    results: List[BulkUserResult]
    errors: List[BulkUserResult]
