from schooldesk.core.models.school import School
from schooldesk.core.models.class_model import SchoolClass
from schooldesk.core.models.student import Student
from schooldesk.core.models.teacher import Teacher
from schooldesk.core.models.staff import StaffMember
from schooldesk.core.models.subject import Subject
from schooldesk.core.models.timetable import Timetable
from schooldesk.core.models.attendance import Attendance
from schooldesk.core.models.fee import Fee
from schooldesk.core.models.salary import Salary
from schooldesk.core.models.report import Report
from schooldesk.core.models.bulletin import Event, Holiday, Notice
