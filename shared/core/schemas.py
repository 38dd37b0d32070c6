from pydantic import BaseModel
from typing import Generic, Optional, TypeVar
from uuid import UUID

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: UUID
    session_id: UUID
    email: Optional[str] = None
    role: str
    status: Optional[str] = None
    exp: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class CommonQueryParams(EmptyStringModel):
    search: Optional[str] = None
    skip: Optional[int] = 0
    limit: Optional[int] = 20


class Lookup(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class JsonOutResult(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
    error: Optional[str] = None

