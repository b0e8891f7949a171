# Academia - teacher profiles (administration only, plus a teacher's own roster)
from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.cascade import delete_teacher_cascade
from database.database import commit_or_conflict, get_db
from database.models import Role, Teacher, User
from access import Conflict, IdentityScope
from access.guards import guard_teacher_delete
from access.policy import audit_allowed, current_teacher, enforce_role
from access.resources import RESOURCE_TEACHERS
from server.accounts import ensure_number_free, new_user
from server.data_access import get_or_404, get_students_taught_by, student_dict, teacher_dict, user_dict
from server.schemas import TeacherCreate, TeacherUpdate

router = APIRouter(prefix="/api/teachers", tags=["Teachers"])


@router.get("")
async def list_teachers(
    search: str | None = Query(default=None),
    department: str | None = Query(default=None),
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_TEACHERS, "list")
    stmt = select(Teacher).order_by(Teacher.teacher_number)
    if search:
        like = f"%{search}%"
        stmt = stmt.where(
            or_(
                Teacher.teacher_number.ilike(like),
                Teacher.first_name.ilike(like),
                Teacher.last_name.ilike(like),
            )
        )
    if department:
        stmt = stmt.where(Teacher.department == department)
    r = await db.execute(stmt)
    return [teacher_dict(t) for t in r.scalars().all()]


@router.get("/users")
async def teacher_users(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_TEACHERS, "users")
    r = await db.execute(select(Teacher).order_by(Teacher.teacher_number))
    return [user_dict(t.user) for t in r.scalars().all()]


@router.get("/my-students")
async def my_students(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_TEACHERS, "read_taught")
    teacher = await current_teacher(db, identity)
    return [student_dict(s) for s in await get_students_taught_by(db, teacher)]


@router.get("/{teacher_id}")
async def get_teacher(teacher_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_TEACHERS, "read")
    return teacher_dict(await get_or_404(db, Teacher, teacher_id, "Teacher"))


@router.post("", status_code=201)
async def create_teacher(
    body: TeacherCreate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_TEACHERS, "create")
    user = await new_user(db, body.username, body.password, body.email, Role.teacher)
    await ensure_number_free(db, Teacher, Teacher.teacher_number, body.teacher_number, "Teacher number")
    teacher = Teacher(user=user, **body.model_dump(exclude={"username", "password", "email"}))
    db.add(teacher)
    await commit_or_conflict(db, "Username, email or teacher number already exists")
    audit_allowed(identity, "create", RESOURCE_TEACHERS, teacher.id)
    return teacher_dict(teacher)


@router.put("/{teacher_id}", status_code=204)
async def update_teacher(
    teacher_id: int,
    body: TeacherUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_TEACHERS, "update")
    teacher = await get_or_404(db, Teacher, teacher_id, "Teacher")
    data = body.model_dump(exclude_unset=True)
    email = data.pop("email", None)
    username = data.pop("username", None)
    if email and email != teacher.user.email:
        r = await db.execute(select(User.id).where(User.email == email))
        if r.first() is not None:
            raise Conflict("Email already exists")
        teacher.user.email = email
    if username and username != teacher.user.username:
        r = await db.execute(select(User.id).where(User.username == username))
        if r.first() is not None:
            raise Conflict("Username already exists")
        teacher.user.username = username
    for key, value in data.items():
        setattr(teacher, key, value)
    await commit_or_conflict(db, "Username or email already exists")
    audit_allowed(identity, "update", RESOURCE_TEACHERS, teacher.id)


@router.put("/{teacher_id}/deactivate", status_code=204)
async def deactivate_teacher(
    teacher_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_TEACHERS, "deactivate")
    teacher = await get_or_404(db, Teacher, teacher_id, "Teacher")
    teacher.user.is_active = False
    await db.commit()
    audit_allowed(identity, "deactivate", RESOURCE_TEACHERS, teacher.id)


@router.delete("/{teacher_id}", status_code=204)
async def delete_teacher(teacher_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_TEACHERS, "delete")
    teacher = await get_or_404(db, Teacher, teacher_id, "Teacher")
    await guard_teacher_delete(db, teacher)
    await delete_teacher_cascade(db, teacher)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_TEACHERS, teacher_id)
