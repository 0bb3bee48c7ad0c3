from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String

from schooldesk.db.session import Base


class Fee(Base):
    """Fee charged to a student. balance is stored, computed on every write."""

    __tablename__ = "fees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    submitted = Column(Numeric(12, 2), nullable=False, default=0)
    fine = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="Pending")  # Pending, Paid, Overdue
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
