from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.core.enums import Role
from schooldesk.core.schemas import ApiModel


class UserCreate(ApiModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Role
    school_id: Optional[int] = None


class UserUpdate(ApiModel):
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    school_id: Optional[int] = None


class UserResponse(ApiModel):
    id: int
    username: str
    email: str
    role: Role
    school_id: Optional[int] = None
    created_at: datetime
