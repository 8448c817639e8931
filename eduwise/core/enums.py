from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"
    REGISTRAR = "REGISTRAR"
    STAFF = "STAFF"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class RegistrationStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class StudentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    GRADUATED = "Graduated"
    TRANSFERRED = "Transferred"
    WITHDRAWN = "Withdrawn"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class TeacherStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"


class TermType(str, Enum):
    semester = "semester"
    quarter = "quarter"
    trimester = "trimester"
    summer = "summer"
    full_year = "full_year"


class ClassStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    cancelled = "cancelled"
    completed = "completed"


class SectionStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    archived = "archived"


class DayOfWeek(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


class AttendanceStatus(str, Enum):
    present = "present"
    absent = "absent"
    tardy = "tardy"
    excused = "excused"


class AssignmentType(str, Enum):
    assignment = "assignment"
    quiz = "quiz"
    exam = "exam"
    project = "project"
    homework = "homework"


class GradeStatus(str, Enum):
    submitted = "submitted"
    missing = "missing"
    excused = "excused"
    incomplete = "incomplete"


class NotificationType(str, Enum):
    announcement = "announcement"
    message = "message"
    grade = "grade"
    attendance = "attendance"
    assignment = "assignment"
    event = "event"
    system = "system"


class NotificationChannel(str, Enum):
    email = "email"
    sms = "sms"
    in_app = "in_app"


class ScheduleAdjustmentType(str, Enum):
    room = "room"
    time = "time"
