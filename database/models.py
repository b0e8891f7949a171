# Academia - database models
from datetime import datetime, timezone
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, declarative_base
import enum


Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo so all stored datetimes are naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(str, enum.Enum):
    admin = "Admin"
    teacher = "Teacher"
    student = "Student"


class CourseStatus(str, enum.Enum):
    active = "Active"
    inactive = "Inactive"
    completed = "Completed"


class EnrollmentStatus(str, enum.Enum):
    enrolled = "Enrolled"
    dropped = "Dropped"
    completed = "Completed"


class SubmissionStatus(str, enum.Enum):
    submitted = "Submitted"
    graded = "Graded"
    late = "Late"


class AttendanceStatus(str, enum.Enum):
    present = "Present"
    absent = "Absent"
    late = "Late"
    excused = "Excused"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    role = Column(String(20), nullable=False)  # Admin, Teacher, Student
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"


class Student(Base):
    __tablename__ = "students"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    student_number = Column(String(20), unique=True, nullable=False)
    first_name = Column(String(50), nullable=False, default="")
    last_name = Column(String(50), nullable=False, default="")
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(200), nullable=True)
    enrollment_date = Column(DateTime, default=utcnow)
    major = Column(String(100), nullable=True)
    class_name = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Student(id={self.id}, number={self.student_number})>"


class Teacher(Base):
    __tablename__ = "teachers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    teacher_number = Column(String(20), unique=True, nullable=False)
    first_name = Column(String(50), nullable=False, default="")
    last_name = Column(String(50), nullable=False, default="")
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(200), nullable=True)
    department = Column(String(100), nullable=True)
    title = Column(String(50), nullable=True)
    hire_date = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Teacher(id={self.id}, number={self.teacher_number})>"


class Course(Base):
    __tablename__ = "courses"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course_code = Column(String(20), unique=True, nullable=False)
    course_name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    credits = Column(Integer, nullable=False, default=0)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=True)
    max_students = Column(Integer, nullable=False, default=50)  # 0 = unlimited
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    schedule = Column(String(100), nullable=True)
    location = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=CourseStatus.active.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    teacher = relationship("Teacher", lazy="selectin")

    def __repr__(self):
        return f"<Course(id={self.id}, code={self.course_code})>"


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    enrollment_date = Column(DateTime, default=utcnow)
    status = Column(String(20), nullable=False, default=EnrollmentStatus.enrolled.value)
    final_grade = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    student = relationship("Student", lazy="selectin")
    course = relationship("Course", lazy="selectin")


class Assignment(Base):
    __tablename__ = "assignments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    due_date = Column(DateTime, nullable=False)
    max_score = Column(Numeric(5, 2, asdecimal=False), nullable=False, default=100)
    weight = Column(Numeric(5, 2, asdecimal=False), nullable=False, default=1.0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    course = relationship("Course", lazy="selectin")


class AssignmentSubmission(Base):
    __tablename__ = "assignment_submissions"
    __table_args__ = (UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    submission_date = Column(DateTime, default=utcnow)
    content = Column(Text, nullable=True)
    score = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    feedback = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=SubmissionStatus.submitted.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    assignment = relationship("Assignment", lazy="selectin")
    student = relationship("Student", lazy="selectin")


class Grade(Base):
    __tablename__ = "grades"
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=True)
    score = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    grade_letter = Column(String(2), nullable=True)
    comments = Column(String(500), nullable=True)
    graded_by = Column(Integer, ForeignKey("teachers.id"), nullable=True)
    graded_at = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    student = relationship("Student", lazy="selectin")
    course = relationship("Course", lazy="selectin")
    assignment = relationship("Assignment", lazy="selectin")
    graded_by_teacher = relationship("Teacher", lazy="selectin")

    def __repr__(self):
        return f"<Grade(student_id={self.student_id}, course_id={self.course_id}, letter={self.grade_letter})>"


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    content = Column(String(500), nullable=False)
    type = Column(String(20), nullable=False, default="General")
    target_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    target_role = Column(String(20), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    target_user = relationship("User", foreign_keys=[target_user_id], lazy="selectin")


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("student_id", "course_id", "date", name="uq_attendance_student_course_date"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=AttendanceStatus.present.value)
    notes = Column(String(200), nullable=True)
    recorded_by = Column(Integer, ForeignKey("teachers.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    student = relationship("Student", lazy="selectin")
    course = relationship("Course", lazy="selectin")
