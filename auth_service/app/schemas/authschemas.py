from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class LoginRequest(EmptyStringModel):
    email: EmailStr
    password: str


class AuthUserOut(BaseModel):
    uid: UUID
    email: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department: Optional[str] = None
    role: str
    password_reset: bool = False

    model_config = {
        "from_attributes": True
    }


class AuthenticationResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AuthUserOut


class ValidateResponse(BaseModel):
    valid: bool = True
    user: AuthUserOut
