from datetime import date, datetime
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.core.schemas import ApiModel


class TeacherCreate(ApiModel):
    school_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    user_id: Optional[int] = None


class TeacherUpdate(ApiModel):
    school_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    user_id: Optional[int] = None


class TeacherResponse(ApiModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    user_id: Optional[int] = None
    created_at: datetime
