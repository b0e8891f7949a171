# Academia - application-level cascades, run after the invariant guard in the same transaction
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    Assignment,
    AssignmentSubmission,
    Attendance,
    Course,
    Enrollment,
    Grade,
    Notification,
    Student,
    Teacher,
    User,
)


async def delete_assignment_cascade(session: AsyncSession, assignment: Assignment) -> None:
    await session.execute(delete(Grade).where(Grade.assignment_id == assignment.id))
    await session.execute(delete(AssignmentSubmission).where(AssignmentSubmission.assignment_id == assignment.id))
    await session.delete(assignment)


async def delete_course_cascade(session: AsyncSession, course: Course) -> None:
    assignment_ids = select(Assignment.id).where(Assignment.course_id == course.id)
    await session.execute(delete(Attendance).where(Attendance.course_id == course.id))
    await session.execute(delete(Grade).where(Grade.course_id == course.id))
    await session.execute(
        delete(AssignmentSubmission).where(AssignmentSubmission.assignment_id.in_(assignment_ids))
    )
    await session.execute(delete(Assignment).where(Assignment.course_id == course.id))
    await session.execute(delete(Enrollment).where(Enrollment.course_id == course.id))
    await session.delete(course)


async def delete_user_cascade(session: AsyncSession, user: User) -> None:
    await session.execute(delete(Notification).where(Notification.target_user_id == user.id))
    await session.execute(update(Notification).where(Notification.created_by == user.id).values(created_by=None))
    await session.delete(user)


async def delete_student_cascade(session: AsyncSession, student: Student) -> None:
    user = await session.get(User, student.user_id)
    await session.execute(delete(Attendance).where(Attendance.student_id == student.id))
    await session.execute(delete(Grade).where(Grade.student_id == student.id))
    await session.execute(delete(AssignmentSubmission).where(AssignmentSubmission.student_id == student.id))
    await session.execute(delete(Enrollment).where(Enrollment.student_id == student.id))
    await session.delete(student)
    await session.flush()
    if user is not None:
        await delete_user_cascade(session, user)


async def delete_teacher_cascade(session: AsyncSession, teacher: Teacher) -> None:
    """Courses, grades and attendance outlive the teacher; their references are cleared."""
    user = await session.get(User, teacher.user_id)
    await session.execute(update(Course).where(Course.teacher_id == teacher.id).values(teacher_id=None))
    await session.execute(update(Grade).where(Grade.graded_by == teacher.id).values(graded_by=None))
    await session.execute(update(Attendance).where(Attendance.recorded_by == teacher.id).values(recorded_by=None))
    await session.delete(teacher)
    await session.flush()
    if user is not None:
        await delete_user_cascade(session, user)
