"""Timetable slot: one subject period for a class on a weekday."""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from schooldesk.db.session import Base


class Timetable(Base):
    __tablename__ = "timetables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    day = Column(String(10), nullable=False)  # Monday .. Sunday
    period = Column(String(20), nullable=False)
    subject = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
