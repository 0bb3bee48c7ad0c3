from enum import Enum


class Role(str, Enum):
    ADMIN = "Admin"
    SCHOOL = "School"
    TEACHER = "Teacher"
    STUDENT = "Student"
    STAFF = "Staff"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"


class FeeStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"


class SalaryStatus(str, Enum):
    NOT_CREDITED = "Not Credited"
    CREDITED = "Credited"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class DenyReason(str, Enum):
    CROSS_TENANT = "CrossTenant"
    NOT_OWNER = "NotOwner"
    INSUFFICIENT_ROLE = "InsufficientRole"
