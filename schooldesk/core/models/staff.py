from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from schooldesk.db.session import Base


class StaffMember(Base):
    """Non-teaching staff employed directly by a school."""

    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    position = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
