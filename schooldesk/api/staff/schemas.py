from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.core.schemas import ApiModel


class StaffCreate(ApiModel):
    school_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    position: Optional[str] = Field(None, max_length=100)
    user_id: Optional[int] = None


class StaffUpdate(ApiModel):
    school_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    position: Optional[str] = Field(None, max_length=100)
    user_id: Optional[int] = None


class StaffResponse(ApiModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    position: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime
