# Academia - Role-scoped data access and response projections
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import (
    Assignment,
    AssignmentSubmission,
    Attendance,
    Course,
    Enrollment,
    EnrollmentStatus,
    Grade,
    Notification,
    Student,
    Teacher,
    User,
)
from access import AdminActor, StudentActor, TeacherActor
from access.errors import NotFound
from access.grading import score_band
from access.models import Actor


# ---------- projections ----------

def user_dict(u: User) -> dict:
    return {"id": u.id, "username": u.username, "email": u.email, "role": u.role, "is_active": u.is_active}


def student_dict(s: Student) -> dict:
    return {
        "id": s.id,
        "user_id": s.user_id,
        "student_number": s.student_number,
        "first_name": s.first_name,
        "last_name": s.last_name,
        "date_of_birth": s.date_of_birth,
        "gender": s.gender,
        "phone": s.phone,
        "address": s.address,
        "enrollment_date": s.enrollment_date,
        "major": s.major,
        "class_name": s.class_name,
        "email": s.user.email if s.user else None,
        "username": s.user.username if s.user else None,
        "is_active": s.user.is_active if s.user else None,
    }


def teacher_dict(t: Teacher) -> dict:
    return {
        "id": t.id,
        "user_id": t.user_id,
        "teacher_number": t.teacher_number,
        "first_name": t.first_name,
        "last_name": t.last_name,
        "date_of_birth": t.date_of_birth,
        "gender": t.gender,
        "phone": t.phone,
        "address": t.address,
        "department": t.department,
        "title": t.title,
        "hire_date": t.hire_date,
        "email": t.user.email if t.user else None,
        "username": t.user.username if t.user else None,
        "is_active": t.user.is_active if t.user else None,
    }


def course_dict(c: Course, enrolled_students: int = 0) -> dict:
    return {
        "id": c.id,
        "course_code": c.course_code,
        "course_name": c.course_name,
        "description": c.description,
        "credits": c.credits,
        "teacher_id": c.teacher_id,
        "teacher_name": c.teacher.full_name if c.teacher else None,
        "max_students": c.max_students,
        "start_date": c.start_date,
        "end_date": c.end_date,
        "schedule": c.schedule,
        "location": c.location,
        "status": c.status,
        "enrolled_students": enrolled_students,
    }


def enrollment_dict(e: Enrollment) -> dict:
    return {
        "id": e.id,
        "student_id": e.student_id,
        "student_name": e.student.full_name if e.student else None,
        "student_number": e.student.student_number if e.student else None,
        "course_id": e.course_id,
        "course_name": e.course.course_name if e.course else None,
        "course_code": e.course.course_code if e.course else None,
        "teacher_name": e.course.teacher.full_name if e.course and e.course.teacher else None,
        "credits": e.course.credits if e.course else None,
        "status": e.status,
        "enrollment_date": e.enrollment_date,
        "final_grade": e.final_grade,
    }


def assignment_dict(a: Assignment) -> dict:
    return {
        "id": a.id,
        "course_id": a.course_id,
        "course_name": a.course.course_name if a.course else None,
        "title": a.title,
        "description": a.description,
        "due_date": a.due_date,
        "max_score": a.max_score,
        "weight": a.weight,
        "created_at": a.created_at,
        "updated_at": a.updated_at,
    }


def submission_dict(s: AssignmentSubmission) -> dict:
    assignment = s.assignment
    return {
        "id": s.id,
        "student_id": s.student_id,
        "student_name": s.student.full_name if s.student else None,
        "student_number": s.student.student_number if s.student else None,
        "assignment_id": s.assignment_id,
        "assignment_title": assignment.title if assignment else None,
        "course_id": assignment.course_id if assignment else None,
        "course_name": assignment.course.course_name if assignment and assignment.course else None,
        "content": s.content,
        "submission_date": s.submission_date,
        "score": s.score,
        "feedback": s.feedback,
        "status": s.status,
        "due_date": assignment.due_date if assignment else None,
        "max_score": assignment.max_score if assignment else None,
        "is_late": bool(assignment and s.submission_date and s.submission_date > assignment.due_date),
    }


def grade_dict(g: Grade) -> dict:
    return {
        "id": g.id,
        "student_id": g.student_id,
        "student_name": g.student.full_name if g.student else None,
        "course_id": g.course_id,
        "course_name": g.course.course_name if g.course else None,
        "assignment_id": g.assignment_id,
        "assignment_title": g.assignment.title if g.assignment else None,
        "score": g.score,
        "grade_letter": g.grade_letter,
        "comments": g.comments,
        "graded_by": g.graded_by,
        "graded_by_teacher_name": g.graded_by_teacher.full_name if g.graded_by_teacher else None,
        "graded_at": g.graded_at,
    }


def notification_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "title": n.title,
        "content": n.content,
        "type": n.type,
        "target_user_id": n.target_user_id,
        "target_role": n.target_role,
        "target_user_name": n.target_user.username if n.target_user else None,
        "is_read": n.is_read,
        "created_by": n.created_by,
        "created_at": n.created_at,
    }


def attendance_dict(a: Attendance) -> dict:
    return {
        "id": a.id,
        "student_id": a.student_id,
        "student_name": a.student.full_name if a.student else None,
        "course_id": a.course_id,
        "course_name": a.course.course_name if a.course else None,
        "date": a.date,
        "status": a.status,
        "notes": a.notes,
        "recorded_by": a.recorded_by,
    }


# ---------- lookups ----------

async def get_or_404(session: AsyncSession, model, obj_id: int, label: str):
    obj = await session.get(model, obj_id)
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


async def enrolled_counts(session: AsyncSession, course_ids: list[int] | None = None) -> dict[int, int]:
    stmt = (
        select(Enrollment.course_id, func.count(Enrollment.id))
        .where(Enrollment.status == EnrollmentStatus.enrolled.value)
        .group_by(Enrollment.course_id)
    )
    if course_ids is not None:
        stmt = stmt.where(Enrollment.course_id.in_(course_ids))
    r = await session.execute(stmt)
    return {course_id: count for course_id, count in r.all()}


async def courses_with_counts(session: AsyncSession, courses: list[Course]) -> list[dict]:
    counts = await enrolled_counts(session, [c.id for c in courses])
    return [course_dict(c, counts.get(c.id, 0)) for c in courses]


def enrolled_course_ids(student_id: int):
    return select(Enrollment.course_id).where(
        Enrollment.student_id == student_id,
        Enrollment.status == EnrollmentStatus.enrolled.value,
    )


def taught_course_ids(teacher_id: int):
    return select(Course.id).where(Course.teacher_id == teacher_id)


async def get_courses_for_actor(session: AsyncSession, actor: Actor) -> list[Course]:
    """Courses: admin all; teacher the ones they own; student the ones they are enrolled in."""
    stmt = select(Course).order_by(Course.course_code)
    if isinstance(actor, TeacherActor):
        stmt = stmt.where(Course.teacher_id == actor.teacher.id)
    elif isinstance(actor, StudentActor):
        stmt = stmt.where(Course.id.in_(enrolled_course_ids(actor.student.id)))
    r = await session.execute(stmt)
    return list(r.scalars().all())


async def get_grades_for_actor(session: AsyncSession, actor: Actor) -> list[Grade]:
    """Grades: admin all; teacher grades in their courses; student only own."""
    stmt = select(Grade).order_by(Grade.graded_at.desc(), Grade.id.desc())
    if isinstance(actor, TeacherActor):
        stmt = stmt.where(Grade.course_id.in_(taught_course_ids(actor.teacher.id)))
    elif isinstance(actor, StudentActor):
        stmt = stmt.where(Grade.student_id == actor.student.id)
    r = await session.execute(stmt)
    return list(r.scalars().all())


async def get_students_taught_by(session: AsyncSession, teacher: Teacher) -> list[Student]:
    stmt = (
        select(Student)
        .where(
            Student.id.in_(
                select(Enrollment.student_id).where(Enrollment.course_id.in_(taught_course_ids(teacher.id)))
            )
        )
        .order_by(Student.last_name, Student.first_name)
    )
    r = await session.execute(stmt)
    return list(r.scalars().all())


# ---------- dashboard ----------

async def _grade_summary(session: AsyncSession, condition=None) -> dict:
    stmt = select(Grade.score)
    if condition is not None:
        stmt = stmt.where(condition)
    r = await session.execute(stmt)
    scores = [s for s in r.scalars().all() if s is not None]
    dist: dict[str, int] = {}
    for s in scores:
        band = score_band(s)
        dist[band] = dist.get(band, 0) + 1
    return {
        "grade_count": len(scores),
        "avg_score": round(sum(scores) / len(scores), 2) if scores else 0,
        "grade_dist": [{"range": band, "count": count} for band, count in dist.items()],
    }


async def _count(session: AsyncSession, stmt) -> int:
    r = await session.execute(select(func.count()).select_from(stmt.subquery()))
    return r.scalar_one()


async def dashboard_overview(session: AsyncSession, actor: Actor) -> dict:
    """Role-scoped aggregate counts for the landing page."""
    if isinstance(actor, AdminActor):
        out = {
            "course_count": await _count(session, select(Course.id)),
            "student_count": await _count(session, select(Student.id)),
            "teacher_count": await _count(session, select(Teacher.id)),
            "assignment_count": await _count(session, select(Assignment.id)),
        }
        out.update(await _grade_summary(session))
        return out
    if isinstance(actor, TeacherActor):
        taught = taught_course_ids(actor.teacher.id)
        out = {
            "course_count": await _count(session, taught),
            "student_count": await _count(
                session, select(Enrollment.student_id).where(Enrollment.course_id.in_(taught)).distinct()
            ),
            "assignment_count": await _count(session, select(Assignment.id).where(Assignment.course_id.in_(taught))),
        }
        out.update(await _grade_summary(session, Grade.course_id.in_(taught)))
        return out
    enrolled = enrolled_course_ids(actor.student.id)
    out = {
        "course_count": await _count(session, enrolled),
        "assignment_count": await _count(session, select(Assignment.id).where(Assignment.course_id.in_(enrolled))),
    }
    out.update(await _grade_summary(session, Grade.student_id == actor.student.id))
    return out
