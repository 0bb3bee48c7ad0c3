from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.core.enums import Gender
from schooldesk.core.schemas import ApiModel


class StudentCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    roll_no: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    gender: Optional[Gender] = None
    phone: Optional[str] = Field(None, max_length=50)
    class_id: int
    # Student login account to pair with this row
    user_id: Optional[int] = None


class StudentUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    roll_no: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = Field(None, max_length=50)
    class_id: Optional[int] = None
    user_id: Optional[int] = None


class StudentResponse(ApiModel):
    id: int
    name: str
    roll_no: str
    email: str
    gender: Optional[str] = None
    phone: Optional[str] = None
    class_id: int
    class_name: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime
