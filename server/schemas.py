# Academia - request models
from datetime import date, datetime, timezone
from typing import ClassVar

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from database.models import AttendanceStatus, CourseStatus, EnrollmentStatus, Role


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class UtcModel(BaseModel):
    """Aware datetimes in the payload are stored as naive UTC."""

    @field_validator("*", mode="after")
    @classmethod
    def _normalize_datetimes(cls, value):
        if isinstance(value, datetime):
            return _naive_utc(value)
        return value


class PatchModel(BaseModel):
    """Partial update body. Omitted fields are left alone; null may only clear nullable columns."""

    not_null_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _reject_null_for_required(cls, data):
        if isinstance(data, dict):
            cleared = sorted(k for k in cls.not_null_fields if k in data and data[k] is None)
            if cleared:
                raise ValueError(f"Field(s) cannot be null: {', '.join(cleared)}")
        return data


# --- auth ---
class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    username: str
    role: Role
    user_id: int
    expires_at: datetime


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    email: EmailStr
    role: Role = Role.student
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    student_number: str | None = Field(default=None, max_length=20)
    teacher_number: str | None = Field(default=None, max_length=20)
    major: str | None = None
    class_name: str | None = None
    department: str | None = None
    title: str | None = None


class ResetPasswordRequest(BaseModel):
    user_id: int
    password: str = Field(..., min_length=1)


# --- people ---
class StudentCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    email: EmailStr
    student_number: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=10)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=200)
    major: str | None = Field(default=None, max_length=100)
    class_name: str | None = Field(default=None, max_length=50)


class StudentUpdate(PatchModel):
    not_null_fields = frozenset({"first_name", "last_name", "email"})

    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=10)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=200)
    major: str | None = Field(default=None, max_length=100)
    class_name: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None


class TeacherCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    email: EmailStr
    teacher_number: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=10)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=200)
    department: str | None = Field(default=None, max_length=100)
    title: str | None = Field(default=None, max_length=50)


class TeacherUpdate(PatchModel):
    not_null_fields = frozenset({"first_name", "last_name", "email", "username"})

    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=10)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=200)
    department: str | None = Field(default=None, max_length=100)
    title: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    username: str | None = Field(default=None, min_length=1, max_length=50)


# --- courses ---
class CourseCreate(UtcModel):
    course_code: str = Field(..., min_length=1, max_length=20)
    course_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    credits: int = Field(default=0, ge=0)
    teacher_id: int | None = None
    max_students: int = Field(default=50, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    schedule: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=100)


class CourseUpdate(PatchModel, UtcModel):
    not_null_fields = frozenset({"course_name", "credits", "max_students", "status"})

    course_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    credits: int | None = Field(default=None, ge=0)
    teacher_id: int | None = None
    max_students: int | None = Field(default=None, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    schedule: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=100)
    status: CourseStatus | None = None


# --- enrollments ---
class EnrollmentCreate(BaseModel):
    course_id: int


class EnrollmentUpdate(PatchModel):
    not_null_fields = frozenset({"status"})

    status: EnrollmentStatus | None = None
    final_grade: float | None = Field(default=None, ge=0)


# --- assignments ---
class AssignmentCreate(UtcModel):
    course_id: int
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    due_date: datetime
    max_score: float = Field(default=100, gt=0)
    weight: float = Field(default=1.0, ge=0)


class AssignmentUpdate(PatchModel, UtcModel):
    not_null_fields = frozenset({"course_id", "title", "due_date", "max_score", "weight"})

    course_id: int | None = None
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    due_date: datetime | None = None
    max_score: float | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, ge=0)


# --- submissions ---
class SubmissionCreate(BaseModel):
    assignment_id: int
    content: str = ""


class SubmissionUpdate(BaseModel):
    content: str | None = None


class SubmissionGrade(BaseModel):
    score: float | None = Field(default=None, ge=0)
    feedback: str | None = Field(default=None, max_length=500)
    grade_letter: str | None = Field(default=None, min_length=1, max_length=2)


# --- grades ---
class GradeCreate(BaseModel):
    student_id: int
    course_id: int
    assignment_id: int | None = None
    score: float = Field(..., ge=0)
    grade_letter: str | None = Field(default=None, min_length=1, max_length=2)
    comments: str | None = Field(default=None, max_length=500)


class GradeUpdate(PatchModel):
    not_null_fields = frozenset({"score"})

    score: float | None = Field(default=None, ge=0)
    grade_letter: str | None = Field(default=None, min_length=1, max_length=2)
    comments: str | None = Field(default=None, max_length=500)


# --- notifications ---
class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=500)
    type: str = Field(default="General", max_length=20)
    target_user_id: int | None = None
    target_role: Role | None = None


class NotificationUpdate(PatchModel):
    not_null_fields = frozenset({"title", "content", "type", "is_read"})

    title: str | None = Field(default=None, min_length=1, max_length=100)
    content: str | None = Field(default=None, min_length=1, max_length=500)
    type: str | None = Field(default=None, max_length=20)
    target_user_id: int | None = None
    target_role: Role | None = None
    is_read: bool | None = None


# --- attendance ---
class AttendanceCreate(BaseModel):
    student_id: int
    course_id: int
    date: date
    status: AttendanceStatus = AttendanceStatus.present
    notes: str | None = Field(default=None, max_length=200)


class AttendanceUpdate(PatchModel):
    not_null_fields = frozenset({"status"})

    status: AttendanceStatus | None = None
    notes: str | None = Field(default=None, max_length=200)
