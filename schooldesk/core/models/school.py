"""Schools: root of the tenancy tree. Every scoped row resolves to exactly one school."""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from schooldesk.db.session import Base


class School(Base):
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    contact = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
