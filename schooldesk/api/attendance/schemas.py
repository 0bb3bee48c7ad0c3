import datetime
from typing import Optional

from pydantic import model_validator

from schooldesk.core.enums import AttendanceStatus
from schooldesk.core.schemas import ApiModel


class AttendanceCreate(ApiModel):
    student_id: Optional[int] = None
    teacher_id: Optional[int] = None
    date: datetime.date
    status: AttendanceStatus

    @model_validator(mode="after")
    def exactly_one_subject(self) -> "AttendanceCreate":
        if (self.student_id is None) == (self.teacher_id is None):
            raise ValueError("Exactly one of studentId or teacherId must be provided")
        return self


class AttendanceUpdate(ApiModel):
    date: Optional[datetime.date] = None
    status: Optional[AttendanceStatus] = None


class AttendanceResponse(ApiModel):
    id: int
    student_id: Optional[int] = None
    teacher_id: Optional[int] = None
    date: datetime.date
    status: AttendanceStatus
