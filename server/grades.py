# Academia - grades
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.database import get_db
from database.models import Assignment, Course, Grade, Student, utcnow
from access import IdentityScope, TeacherActor, ValidationFailed, resolve_letter
from access.policy import (
    audit_allowed,
    current_teacher,
    enforce_role,
    ensure_can_view_student_record,
    ensure_teaches,
    resolve_actor,
)
from access.resources import RESOURCE_GRADES
from server.data_access import (
    get_grades_for_actor,
    get_or_404,
    get_students_taught_by,
    grade_dict,
    taught_course_ids,
)
from server.schemas import GradeCreate, GradeUpdate

router = APIRouter(prefix="/api/grades", tags=["Grades"])


@router.get("")
async def list_grades(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_GRADES, "list")
    actor = await resolve_actor(db, identity)
    return [grade_dict(g) for g in await get_grades_for_actor(db, actor)]


@router.get("/my-grades")
async def my_grades(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    """Grades recorded in the calling Teacher's courses."""
    enforce_role(identity, RESOURCE_GRADES, "read_taught")
    actor = await resolve_actor(db, identity)
    return [grade_dict(g) for g in await get_grades_for_actor(db, actor)]


@router.get("/students-dropdown")
async def students_dropdown(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_GRADES, "read_taught")
    teacher = await current_teacher(db, identity)
    return [
        {"id": s.id, "student_number": s.student_number, "name": s.full_name}
        for s in await get_students_taught_by(db, teacher)
    ]


@router.get("/courses-dropdown")
async def courses_dropdown(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_GRADES, "read_taught")
    teacher = await current_teacher(db, identity)
    r = await db.execute(select(Course).where(Course.teacher_id == teacher.id).order_by(Course.course_code))
    return [{"id": c.id, "course_code": c.course_code, "course_name": c.course_name} for c in r.scalars().all()]


@router.get("/assignments-dropdown")
async def assignments_dropdown(
    course_id: int | None = Query(default=None),
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_GRADES, "read_taught")
    teacher = await current_teacher(db, identity)
    stmt = select(Assignment).where(Assignment.course_id.in_(taught_course_ids(teacher.id)))
    if course_id is not None:
        stmt = stmt.where(Assignment.course_id == course_id)
    r = await db.execute(stmt.order_by(Assignment.due_date))
    return [{"id": a.id, "title": a.title, "course_id": a.course_id} for a in r.scalars().all()]


@router.get("/{grade_id}")
async def get_grade(grade_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_GRADES, "read")
    grade = await get_or_404(db, Grade, grade_id, "Grade")
    actor = await resolve_actor(db, identity)
    ensure_can_view_student_record(actor, grade.student_id, grade.course, RESOURCE_GRADES, grade.id)
    return grade_dict(grade)


@router.post("", status_code=201)
async def create_grade(body: GradeCreate, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_GRADES, "create")
    course = await get_or_404(db, Course, body.course_id, "Course")
    actor = await resolve_actor(db, identity)
    ensure_teaches(actor, course, RESOURCE_GRADES, "create")
    student = await get_or_404(db, Student, body.student_id, "Student")
    assignment = None
    if body.assignment_id is not None:
        assignment = await get_or_404(db, Assignment, body.assignment_id, "Assignment")
        if assignment.course_id != course.id:
            raise ValidationFailed("Assignment does not belong to this course")
    grade = Grade(
        student=student,
        course=course,
        assignment=assignment,
        score=body.score,
        grade_letter=resolve_letter(body.score, body.grade_letter),
        comments=body.comments,
        graded_by_teacher=actor.teacher if isinstance(actor, TeacherActor) else None,
        graded_at=utcnow(),
    )
    db.add(grade)
    await db.commit()
    audit_allowed(identity, "create", RESOURCE_GRADES, grade.id)
    return grade_dict(grade)


@router.put("/{grade_id}", status_code=204)
async def update_grade(
    grade_id: int,
    body: GradeUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_GRADES, "update")
    grade = await get_or_404(db, Grade, grade_id, "Grade")
    ensure_teaches(await resolve_actor(db, identity), grade.course, RESOURCE_GRADES, "update")
    if body.score is not None:
        grade.score = body.score
        grade.grade_letter = resolve_letter(body.score, body.grade_letter)
    elif body.grade_letter:
        grade.grade_letter = body.grade_letter
    if body.comments is not None:
        grade.comments = body.comments
    grade.graded_at = utcnow()
    await db.commit()
    audit_allowed(identity, "update", RESOURCE_GRADES, grade.id)


@router.delete("/{grade_id}", status_code=204)
async def delete_grade(grade_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_GRADES, "delete")
    grade = await get_or_404(db, Grade, grade_id, "Grade")
    ensure_teaches(await resolve_actor(db, identity), grade.course, RESOURCE_GRADES, "delete")
    await db.delete(grade)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_GRADES, grade_id)
