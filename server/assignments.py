# Academia - assignments
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.cascade import delete_assignment_cascade
from database.database import get_db
from database.models import Assignment, Course
from access import IdentityScope
from access.policy import audit_allowed, current_student, current_teacher, enforce_role, ensure_teaches, resolve_actor
from access.resources import RESOURCE_ASSIGNMENTS
from server.data_access import assignment_dict, enrolled_course_ids, get_or_404, taught_course_ids
from server.schemas import AssignmentCreate, AssignmentUpdate

router = APIRouter(prefix="/api/assignments", tags=["Assignments"])


@router.get("")
async def list_assignments(
    course_id: int | None = Query(default=None),
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ASSIGNMENTS, "read")
    stmt = select(Assignment).order_by(Assignment.due_date)
    if course_id is not None:
        stmt = stmt.where(Assignment.course_id == course_id)
    r = await db.execute(stmt)
    return [assignment_dict(a) for a in r.scalars().all()]


@router.get("/my-assignments")
async def my_assignments(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_ASSIGNMENTS, "read_taught")
    teacher = await current_teacher(db, identity)
    r = await db.execute(
        select(Assignment).where(Assignment.course_id.in_(taught_course_ids(teacher.id))).order_by(Assignment.due_date)
    )
    return [assignment_dict(a) for a in r.scalars().all()]


@router.get("/my-student-assignments")
async def my_student_assignments(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_ASSIGNMENTS, "read_own")
    student = await current_student(db, identity)
    r = await db.execute(
        select(Assignment)
        .where(Assignment.course_id.in_(enrolled_course_ids(student.id)))
        .order_by(Assignment.due_date)
    )
    return [assignment_dict(a) for a in r.scalars().all()]


@router.get("/{assignment_id}")
async def get_assignment(
    assignment_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ASSIGNMENTS, "read")
    return assignment_dict(await get_or_404(db, Assignment, assignment_id, "Assignment"))


@router.post("", status_code=201)
async def create_assignment(
    body: AssignmentCreate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ASSIGNMENTS, "create")
    course = await get_or_404(db, Course, body.course_id, "Course")
    ensure_teaches(await resolve_actor(db, identity), course, RESOURCE_ASSIGNMENTS, "create")
    assignment = Assignment(course=course, **body.model_dump(exclude={"course_id"}))
    db.add(assignment)
    await db.commit()
    audit_allowed(identity, "create", RESOURCE_ASSIGNMENTS, assignment.id)
    return assignment_dict(assignment)


@router.put("/{assignment_id}", status_code=204)
async def update_assignment(
    assignment_id: int,
    body: AssignmentUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ASSIGNMENTS, "update")
    assignment = await get_or_404(db, Assignment, assignment_id, "Assignment")
    actor = await resolve_actor(db, identity)
    ensure_teaches(actor, assignment.course, RESOURCE_ASSIGNMENTS, "update")
    data = body.model_dump(exclude_unset=True)
    course_id = data.pop("course_id", None)
    if course_id is not None and course_id != assignment.course_id:
        # Moving an assignment needs ownership of the destination course too
        course = await get_or_404(db, Course, course_id, "Course")
        ensure_teaches(actor, course, RESOURCE_ASSIGNMENTS, "update")
        assignment.course = course
    for key, value in data.items():
        if value is not None:
            setattr(assignment, key, value)
    await db.commit()
    audit_allowed(identity, "update", RESOURCE_ASSIGNMENTS, assignment.id)


@router.delete("/{assignment_id}", status_code=204)
async def delete_assignment(
    assignment_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ASSIGNMENTS, "delete")
    assignment = await get_or_404(db, Assignment, assignment_id, "Assignment")
    ensure_teaches(await resolve_actor(db, identity), assignment.course, RESOURCE_ASSIGNMENTS, "delete")
    await delete_assignment_cascade(db, assignment)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_ASSIGNMENTS, assignment_id)
