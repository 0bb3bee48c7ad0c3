from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from schooldesk.db.session import Base


class Student(Base):
    """Student enrolled in a class; scoped to a school through that class."""

    __tablename__ = "students"
    __table_args__ = (
        # Roll number is unique within a class
        UniqueConstraint("class_id", "roll_no", name="uq_student_class_roll_no"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    # Login account paired with this student (role Student); used for self-scoped access
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    roll_no = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    gender = Column(String(20), nullable=True)
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
