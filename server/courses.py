# Academia - course catalogue
from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.cascade import delete_course_cascade
from database.database import commit_or_conflict, get_db
from database.models import Course, Teacher
from access import Forbidden, IdentityScope, TeacherActor
from access.guards import guard_course_delete
from access.policy import audit_allowed, enforce_role, ensure_teaches, resolve_actor
from access.resources import RESOURCE_COURSES
from server.data_access import course_dict, courses_with_counts, enrolled_counts, get_courses_for_actor, get_or_404
from server.schemas import CourseCreate, CourseUpdate

router = APIRouter(prefix="/api/courses", tags=["Courses"])


@router.get("")
async def list_courses(
    search: str | None = Query(default=None),
    status: str | None = Query(default=None),
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_COURSES, "read")
    stmt = select(Course).order_by(Course.course_code)
    if search:
        like = f"%{search}%"
        stmt = stmt.where(or_(Course.course_code.ilike(like), Course.course_name.ilike(like)))
    if status:
        stmt = stmt.where(Course.status == status)
    r = await db.execute(stmt)
    return await courses_with_counts(db, list(r.scalars().all()))


@router.get("/my-courses")
async def my_courses(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    """Enrolled courses for a Student, owned courses for a Teacher, everything for Admin."""
    enforce_role(identity, RESOURCE_COURSES, "read")
    actor = await resolve_actor(db, identity)
    return await courses_with_counts(db, await get_courses_for_actor(db, actor))


@router.get("/{course_id}")
async def get_course(course_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_COURSES, "read")
    course = await get_or_404(db, Course, course_id, "Course")
    counts = await enrolled_counts(db, [course.id])
    return course_dict(course, counts.get(course.id, 0))


@router.post("", status_code=201)
async def create_course(
    body: CourseCreate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_COURSES, "create")
    actor = await resolve_actor(db, identity)
    if isinstance(actor, TeacherActor):
        teacher = actor.teacher
    elif body.teacher_id is not None:
        teacher = await get_or_404(db, Teacher, body.teacher_id, "Teacher")
    else:
        teacher = None
    course = Course(**body.model_dump(exclude={"teacher_id"}), teacher=teacher)
    db.add(course)
    await commit_or_conflict(db, "Course code already exists")
    audit_allowed(identity, "create", RESOURCE_COURSES, course.id)
    return course_dict(course)


@router.put("/{course_id}", status_code=204)
async def update_course(
    course_id: int,
    body: CourseUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_COURSES, "update")
    course = await get_or_404(db, Course, course_id, "Course")
    actor = await resolve_actor(db, identity)
    ensure_teaches(actor, course, RESOURCE_COURSES, "update")
    data = body.model_dump(exclude_unset=True)
    if "teacher_id" in data:
        teacher_id = data.pop("teacher_id")
        if teacher_id != course.teacher_id:
            if isinstance(actor, TeacherActor):
                raise Forbidden("Only an administrator can reassign a course")
            course.teacher = await get_or_404(db, Teacher, teacher_id, "Teacher") if teacher_id else None
    for key, value in data.items():
        if key == "status" and value is not None:
            value = value.value
        setattr(course, key, value)
    await commit_or_conflict(db, "Course code already exists")
    audit_allowed(identity, "update", RESOURCE_COURSES, course.id)


@router.delete("/{course_id}", status_code=204)
async def delete_course(course_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_COURSES, "delete")
    course = await get_or_404(db, Course, course_id, "Course")
    await guard_course_delete(db, course)
    await delete_course_cascade(db, course)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_COURSES, course_id)
