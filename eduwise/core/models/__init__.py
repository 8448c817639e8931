from eduwise.core.models.assignment import Assignment
from eduwise.core.models.attendance_record import AttendanceRecord
from eduwise.core.models.audit_log import AuditLog
from eduwise.core.models.class_model import SchoolClass
from eduwise.core.models.class_schedule import ClassSchedule
from eduwise.core.models.course import Course
from eduwise.core.models.enrollment import Enrollment
from eduwise.core.models.grade_record import GradeRecord
from eduwise.core.models.notification import Notification
from eduwise.core.models.registration import Registration
from eduwise.core.models.section_model import Section
from eduwise.core.models.student import Student
from eduwise.core.models.teacher import Teacher
from eduwise.core.models.term import Term

__all__ = [
    "Assignment",
    "AttendanceRecord",
    "AuditLog",
    "ClassSchedule",
    "Course",
    "Enrollment",
    "GradeRecord",
    "Notification",
    "Registration",
    "SchoolClass",
    "Section",
    "Student",
    "Teacher",
    "Term",
]
