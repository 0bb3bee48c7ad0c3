from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String

from schooldesk.db.session import Base


class Teacher(Base):
    """Teacher employed directly by a school."""

    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False)
    # Login account paired with this teacher (role Teacher)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
