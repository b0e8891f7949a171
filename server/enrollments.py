# Academia - course enrollment
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.database import commit_or_conflict, get_db
from database.models import Course, Enrollment
from access import IdentityScope
from access.guards import guard_enrollment_create
from access.policy import (
    audit_allowed,
    current_student,
    enforce_role,
    ensure_can_view_student_record,
    ensure_self,
    ensure_teaches,
    resolve_actor,
)
from access.resources import RESOURCE_ENROLLMENTS
from server.data_access import enrollment_dict, get_or_404
from server.schemas import EnrollmentCreate, EnrollmentUpdate

router = APIRouter(prefix="/api/enrollments", tags=["Enrollments"])


@router.get("")
async def list_enrollments(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_ENROLLMENTS, "list")
    r = await db.execute(select(Enrollment).order_by(Enrollment.id))
    return [enrollment_dict(e) for e in r.scalars().all()]


@router.get("/my-enrollments")
async def my_enrollments(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_ENROLLMENTS, "read_own")
    student = await current_student(db, identity)
    r = await db.execute(
        select(Enrollment).where(Enrollment.student_id == student.id).order_by(Enrollment.enrollment_date.desc())
    )
    return [enrollment_dict(e) for e in r.scalars().all()]


@router.get("/course/{course_id}")
async def course_enrollments(
    course_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ENROLLMENTS, "list_course")
    course = await get_or_404(db, Course, course_id, "Course")
    ensure_teaches(await resolve_actor(db, identity), course, RESOURCE_ENROLLMENTS, "list_course")
    r = await db.execute(select(Enrollment).where(Enrollment.course_id == course.id).order_by(Enrollment.id))
    return [enrollment_dict(e) for e in r.scalars().all()]


@router.get("/{enrollment_id}")
async def get_enrollment(
    enrollment_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ENROLLMENTS, "read")
    enrollment = await get_or_404(db, Enrollment, enrollment_id, "Enrollment")
    actor = await resolve_actor(db, identity)
    ensure_can_view_student_record(actor, enrollment.student_id, enrollment.course, RESOURCE_ENROLLMENTS, enrollment.id)
    return enrollment_dict(enrollment)


@router.post("", status_code=201)
async def enroll(body: EnrollmentCreate, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    """A Student enrolls themselves; the pair must be new and the course not full."""
    enforce_role(identity, RESOURCE_ENROLLMENTS, "create")
    student = await current_student(db, identity)
    course = await guard_enrollment_create(db, student, body.course_id)
    enrollment = Enrollment(student=student, course=course)
    db.add(enrollment)
    await commit_or_conflict(db, "Already enrolled in this course")
    audit_allowed(identity, "create", RESOURCE_ENROLLMENTS, enrollment.id)
    return enrollment_dict(enrollment)


@router.put("/{enrollment_id}", status_code=204)
async def update_enrollment(
    enrollment_id: int,
    body: EnrollmentUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ENROLLMENTS, "update")
    enrollment = await get_or_404(db, Enrollment, enrollment_id, "Enrollment")
    ensure_teaches(await resolve_actor(db, identity), enrollment.course, RESOURCE_ENROLLMENTS, "update")
    data = body.model_dump(exclude_unset=True)
    if data.get("status") is not None:
        enrollment.status = data["status"].value
    if "final_grade" in data:
        enrollment.final_grade = data["final_grade"]
    await db.commit()
    audit_allowed(identity, "update", RESOURCE_ENROLLMENTS, enrollment.id)


@router.delete("/{enrollment_id}", status_code=204)
async def delete_enrollment(
    enrollment_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ENROLLMENTS, "delete")
    enrollment = await get_or_404(db, Enrollment, enrollment_id, "Enrollment")
    ensure_self(identity, enrollment.student.user_id, RESOURCE_ENROLLMENTS, "delete")
    await db.delete(enrollment)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_ENROLLMENTS, enrollment_id)
