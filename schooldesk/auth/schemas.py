from typing import Optional

from pydantic import BaseModel, Field

from schooldesk.core.enums import Role
from schooldesk.core.schemas import ApiModel


class Principal(BaseModel):
    """Who is making the request. Built per request from the users table; never persisted."""

    user_id: int
    role: Role
    home_school_id: Optional[int] = None
    username: str


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(ApiModel):
    token: str
    role: Role
    username: str
    school_id: Optional[int] = None


class MeResponse(ApiModel):
    user_id: int
    username: str
    role: Role
    school_id: Optional[int] = None


class ResetPasswordRequest(ApiModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


class ChangePasswordRequest(ApiModel):
    new_password: str = Field(..., min_length=8)
