# Academia database
from .models import (
    Base,
    User,
    Student,
    Teacher,
    Course,
    Enrollment,
    Assignment,
    AssignmentSubmission,
    Grade,
    Notification,
    Attendance,
    Role,
    CourseStatus,
    EnrollmentStatus,
    SubmissionStatus,
    AttendanceStatus,
    utcnow,
)
from .database import get_db, init_db, dispose_db, commit_or_conflict

__all__ = [
    "Base",
    "User",
    "Student",
    "Teacher",
    "Course",
    "Enrollment",
    "Assignment",
    "AssignmentSubmission",
    "Grade",
    "Notification",
    "Attendance",
    "Role",
    "CourseStatus",
    "EnrollmentStatus",
    "SubmissionStatus",
    "AttendanceStatus",
    "utcnow",
    "get_db",
    "init_db",
    "dispose_db",
    "commit_or_conflict",
]
