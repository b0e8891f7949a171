# Academia - Invariant guards (checked before any row is written or removed)
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import (
    Assignment,
    AssignmentSubmission,
    Attendance,
    Course,
    CourseStatus,
    Enrollment,
    EnrollmentStatus,
    Student,
    Teacher,
    utcnow,
)
from .errors import Conflict, NotFound


async def count_enrolled(session: AsyncSession, course_id: int) -> int:
    r = await session.execute(
        select(func.count(Enrollment.id)).where(
            Enrollment.course_id == course_id,
            Enrollment.status == EnrollmentStatus.enrolled.value,
        )
    )
    return r.scalar_one()


async def has_active_enrollment(session: AsyncSession, student_id: int, course_id: int) -> bool:
    r = await session.execute(
        select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.status == EnrollmentStatus.enrolled.value,
        )
    )
    return r.first() is not None


async def guard_enrollment_create(session: AsyncSession, student: Student, course_id: int) -> Course:
    """Course must exist, the pair must be new (in any status) and the course not full."""
    course = await session.get(Course, course_id)
    if course is None:
        raise NotFound("Course not found")
    r = await session.execute(
        select(Enrollment.id).where(Enrollment.student_id == student.id, Enrollment.course_id == course_id)
    )
    if r.first() is not None:
        raise Conflict("Already enrolled in this course")
    if course.max_students > 0 and await count_enrolled(session, course_id) >= course.max_students:
        raise Conflict("Course is full")
    return course


def guard_submission_window(assignment: Assignment, now: datetime | None = None) -> None:
    """Submissions can be created, edited or withdrawn only up to the due date."""
    now = now or utcnow()
    if assignment.due_date < now:
        raise Conflict("Assignment is past its due date")


async def guard_submission_create(
    session: AsyncSession,
    student: Student,
    assignment_id: int,
    now: datetime | None = None,
) -> Assignment:
    assignment = await session.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found")
    if not await has_active_enrollment(session, student.id, assignment.course_id):
        raise Conflict("You are not enrolled in this course")
    r = await session.execute(
        select(AssignmentSubmission.id).where(
            AssignmentSubmission.student_id == student.id,
            AssignmentSubmission.assignment_id == assignment_id,
        )
    )
    if r.first() is not None:
        raise Conflict("You have already submitted this assignment")
    guard_submission_window(assignment, now)
    return assignment


async def guard_course_delete(session: AsyncSession, course: Course) -> None:
    if await count_enrolled(session, course.id) > 0:
        raise Conflict("Cannot delete a course with enrolled students")


async def guard_student_delete(session: AsyncSession, student: Student) -> None:
    r = await session.execute(
        select(Enrollment.id).where(
            Enrollment.student_id == student.id,
            Enrollment.status == EnrollmentStatus.enrolled.value,
        )
    )
    if r.first() is not None:
        raise Conflict("Cannot delete a student with active enrollments; deactivate instead")


async def guard_teacher_delete(session: AsyncSession, teacher: Teacher) -> None:
    r = await session.execute(
        select(Course.id).where(
            Course.teacher_id == teacher.id,
            Course.status == CourseStatus.active.value,
        )
    )
    if r.first() is not None:
        raise Conflict("Cannot delete a teacher with active courses; deactivate instead")


async def guard_attendance_create(session: AsyncSession, student_id: int, course: Course, on: date) -> Student:
    student = await session.get(Student, student_id)
    if student is None:
        raise NotFound("Student not found")
    if not await has_active_enrollment(session, student_id, course.id):
        raise Conflict("Student is not enrolled in this course")
    r = await session.execute(
        select(Attendance.id).where(
            Attendance.student_id == student_id,
            Attendance.course_id == course.id,
            Attendance.date == on,
        )
    )
    if r.first() is not None:
        raise Conflict("Attendance already recorded for this date")
    return student
