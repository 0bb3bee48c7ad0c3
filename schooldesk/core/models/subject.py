from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from schooldesk.db.session import Base


class Subject(Base):
    """Subject taught in a class, optionally assigned to a teacher of the same school."""

    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(100), nullable=False)
    periods_per_week = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
