from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String

from schooldesk.db.session import Base


class Salary(Base):
    """Monthly salary for either a teacher or a staff member. net_salary is stored."""

    __tablename__ = "salaries"
    __table_args__ = (
        CheckConstraint(
            "(teacher_id IS NULL) <> (staff_id IS NULL)",
            name="ck_salary_one_payee",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    pf = Column(Numeric(12, 2), nullable=False, default=0)
    bonus = Column(Numeric(12, 2), nullable=False, default=0)
    net_salary = Column(Numeric(12, 2), nullable=False)
    month = Column(String(7), nullable=False)  # YYYY-MM
    status = Column(String(20), nullable=False, default="Not Credited")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
