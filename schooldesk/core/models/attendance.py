from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint

from schooldesk.db.session import Base


class Attendance(Base):
    """Daily attendance for either a student or a teacher, never both."""

    __tablename__ = "attendance"
    __table_args__ = (
        CheckConstraint(
            "(student_id IS NULL) <> (teacher_id IS NULL)",
            name="ck_attendance_one_subject",
        ),
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
        UniqueConstraint("teacher_id", "date", name="uq_attendance_teacher_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=True)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)  # Present, Absent, Late
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
