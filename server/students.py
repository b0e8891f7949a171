# Academia - student profiles
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.cascade import delete_student_cascade
from database.database import commit_or_conflict, get_db
from database.models import (
    Assignment,
    AssignmentSubmission,
    Course,
    Enrollment,
    Grade,
    Role,
    Student,
    User,
)
from access import Conflict, IdentityScope
from access.guards import guard_student_delete
from access.policy import audit_allowed, current_student, current_teacher, enforce_role, ensure_self
from access.resources import RESOURCE_STUDENTS
from server.accounts import ensure_number_free, new_user
from server.data_access import (
    assignment_dict,
    courses_with_counts,
    enrolled_course_ids,
    get_or_404,
    get_students_taught_by,
    grade_dict,
    student_dict,
    user_dict,
)
from server.schemas import StudentCreate, StudentUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["Students"])


def _ensure_may_access(identity: IdentityScope, student: Student, action: str) -> None:
    # Staff pass; a Student only reaches their own profile
    if identity.role == Role.student:
        ensure_self(identity, student.user_id, RESOURCE_STUDENTS, action)


async def _create_student(db: AsyncSession, body: StudentCreate) -> Student:
    user = await new_user(db, body.username, body.password, body.email, Role.student)
    await ensure_number_free(db, Student, Student.student_number, body.student_number, "Student number")
    student = Student(user=user, **body.model_dump(exclude={"username", "password", "email"}))
    db.add(student)
    await db.flush()
    return student


@router.get("")
async def list_students(
    search: str | None = Query(default=None),
    major: str | None = Query(default=None),
    class_name: str | None = Query(default=None),
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_STUDENTS, "list")
    stmt = select(Student).order_by(Student.student_number)
    if search:
        like = f"%{search}%"
        stmt = stmt.where(
            or_(
                Student.student_number.ilike(like),
                Student.first_name.ilike(like),
                Student.last_name.ilike(like),
            )
        )
    if major:
        stmt = stmt.where(Student.major == major)
    if class_name:
        stmt = stmt.where(Student.class_name == class_name)
    r = await db.execute(stmt)
    return [student_dict(s) for s in r.scalars().all()]


@router.get("/statistics")
async def statistics(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_STUDENTS, "statistics")
    total = (await db.execute(select(func.count(Student.id)))).scalar_one()
    active = (
        await db.execute(select(func.count(Student.id)).join(User, User.id == Student.user_id).where(User.is_active.is_(True)))
    ).scalar_one()
    by_major = await db.execute(select(Student.major, func.count(Student.id)).group_by(Student.major))
    by_class = await db.execute(select(Student.class_name, func.count(Student.id)).group_by(Student.class_name))
    return {
        "total": total,
        "active": active,
        "inactive": total - active,
        "by_major": [{"major": m, "count": c} for m, c in by_major.all()],
        "by_class": [{"class_name": n, "count": c} for n, c in by_class.all()],
    }


@router.get("/majors")
async def majors(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_STUDENTS, "list")
    r = await db.execute(select(Student.major).where(Student.major.is_not(None)).distinct().order_by(Student.major))
    return list(r.scalars().all())


@router.get("/classes")
async def classes(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_STUDENTS, "list")
    r = await db.execute(
        select(Student.class_name).where(Student.class_name.is_not(None)).distinct().order_by(Student.class_name)
    )
    return list(r.scalars().all())


@router.get("/users")
async def student_users(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    """Login accounts behind student profiles, for account management."""
    enforce_role(identity, RESOURCE_STUDENTS, "users")
    r = await db.execute(select(Student).order_by(Student.student_number))
    return [user_dict(s.user) for s in r.scalars().all()]


@router.get("/my-grades")
async def my_grades(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_STUDENTS, "read_own")
    student = await current_student(db, identity)
    r = await db.execute(
        select(Grade).where(Grade.student_id == student.id).order_by(Grade.graded_at.desc(), Grade.id.desc())
    )
    return [grade_dict(g) for g in r.scalars().all()]


@router.get("/my-assignments")
async def my_assignments(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    """Assignments of the caller's enrolled courses, each with the caller's submission state."""
    enforce_role(identity, RESOURCE_STUDENTS, "read_own")
    student = await current_student(db, identity)
    r = await db.execute(
        select(Assignment)
        .where(Assignment.course_id.in_(enrolled_course_ids(student.id)))
        .order_by(Assignment.due_date)
    )
    assignments = list(r.scalars().all())
    subs = await db.execute(
        select(AssignmentSubmission).where(
            AssignmentSubmission.student_id == student.id,
            AssignmentSubmission.assignment_id.in_([a.id for a in assignments]),
        )
    )
    by_assignment = {s.assignment_id: s for s in subs.scalars().all()}
    out = []
    for a in assignments:
        row = assignment_dict(a)
        sub = by_assignment.get(a.id)
        row["submission_id"] = sub.id if sub else None
        row["submission_status"] = sub.status if sub else None
        row["score"] = sub.score if sub else None
        out.append(row)
    return out


@router.get("/my-students")
async def my_students(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_STUDENTS, "read_taught")
    teacher = await current_teacher(db, identity)
    return [student_dict(s) for s in await get_students_taught_by(db, teacher)]


@router.get("/{student_id}")
async def get_student(student_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_STUDENTS, "read")
    student = await get_or_404(db, Student, student_id, "Student")
    _ensure_may_access(identity, student, "read")
    return student_dict(student)


@router.get("/{student_id}/courses")
async def student_courses(
    student_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_STUDENTS, "read")
    student = await get_or_404(db, Student, student_id, "Student")
    _ensure_may_access(identity, student, "read")
    r = await db.execute(
        select(Course).where(Course.id.in_(select(Enrollment.course_id).where(Enrollment.student_id == student.id)))
    )
    return await courses_with_counts(db, list(r.scalars().all()))


@router.post("", status_code=201)
async def create_student(
    body: StudentCreate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_STUDENTS, "create")
    student = await _create_student(db, body)
    await commit_or_conflict(db, "Username, email or student number already exists")
    audit_allowed(identity, "create", RESOURCE_STUDENTS, student.id)
    return student_dict(student)


@router.post("/batch")
async def create_students_batch(
    body: list[StudentCreate],
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Create many students; each row is committed on its own, so one bad row does not sink the rest."""
    enforce_role(identity, RESOURCE_STUDENTS, "create_batch")
    results = []
    for index, row in enumerate(body):
        try:
            student = await _create_student(db, row)
            await commit_or_conflict(db, "Username, email or student number already exists")
            results.append({"index": index, "student_number": row.student_number, "ok": True, "id": student.id})
        except HTTPException as e:
            await db.rollback()
            results.append({"index": index, "student_number": row.student_number, "ok": False, "error": e.detail})
    created = sum(1 for r in results if r["ok"])
    logger.info("Batch student import: %d created, %d failed", created, len(results) - created)
    audit_allowed(identity, "create_batch", RESOURCE_STUDENTS)
    return {"created": created, "failed": len(results) - created, "results": results}


@router.put("/{student_id}", status_code=204)
async def update_student(
    student_id: int,
    body: StudentUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_STUDENTS, "update")
    student = await get_or_404(db, Student, student_id, "Student")
    _ensure_may_access(identity, student, "update")
    data = body.model_dump(exclude_unset=True)
    email = data.pop("email", None)
    if email and email != student.user.email:
        r = await db.execute(select(User.id).where(User.email == email))
        if r.first() is not None:
            raise Conflict("Email already exists")
        student.user.email = email
    for key, value in data.items():
        setattr(student, key, value)
    await commit_or_conflict(db, "Email already exists")
    audit_allowed(identity, "update", RESOURCE_STUDENTS, student.id)


@router.put("/{student_id}/deactivate", status_code=204)
async def deactivate_student(
    student_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_STUDENTS, "deactivate")
    student = await get_or_404(db, Student, student_id, "Student")
    student.user.is_active = False
    await db.commit()
    audit_allowed(identity, "deactivate", RESOURCE_STUDENTS, student.id)


@router.delete("/{student_id}", status_code=204)
async def delete_student(student_id: int, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_STUDENTS, "delete")
    student = await get_or_404(db, Student, student_id, "Student")
    await guard_student_delete(db, student)
    await delete_student_cascade(db, student)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_STUDENTS, student_id)
