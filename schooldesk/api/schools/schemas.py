from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.core.schemas import ApiModel


class SchoolCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    contact: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None


class SchoolUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    contact: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None


class SchoolResponse(ApiModel):
    id: int
    name: str
    address: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime


class SchoolName(ApiModel):
    id: int
    name: str
