from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from schooldesk.db.session import Base


class User(Base):
    """Login account. Role and school are read from here on every request, never from the token."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    # Admin, School, Teacher, Student, Staff
    role = Column(String(20), nullable=False)
    # Null for Admin (unscoped)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
