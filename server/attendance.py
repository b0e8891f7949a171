# Academia - attendance records per student, course and day
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.database import commit_or_conflict, get_db
from database.models import Attendance, Course
from access import IdentityScope, TeacherActor
from access.guards import guard_attendance_create
from access.policy import audit_allowed, current_student, enforce_role, ensure_teaches, resolve_actor
from access.resources import RESOURCE_ATTENDANCE
from server.data_access import attendance_dict, get_or_404
from server.schemas import AttendanceCreate, AttendanceUpdate

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


@router.post("", status_code=201)
async def record_attendance(
    body: AttendanceCreate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ATTENDANCE, "create")
    course = await get_or_404(db, Course, body.course_id, "Course")
    actor = await resolve_actor(db, identity)
    ensure_teaches(actor, course, RESOURCE_ATTENDANCE, "create")
    student = await guard_attendance_create(db, body.student_id, course, body.date)
    record = Attendance(
        student=student,
        course=course,
        date=body.date,
        status=body.status.value,
        notes=body.notes,
        recorded_by=actor.teacher.id if isinstance(actor, TeacherActor) else None,
    )
    db.add(record)
    await commit_or_conflict(db, "Attendance already recorded for this date")
    audit_allowed(identity, "create", RESOURCE_ATTENDANCE, record.id)
    return attendance_dict(record)


@router.get("/course/{course_id}")
async def course_attendance(
    course_id: int,
    on: date | None = Query(default=None),
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ATTENDANCE, "list_course")
    course = await get_or_404(db, Course, course_id, "Course")
    ensure_teaches(await resolve_actor(db, identity), course, RESOURCE_ATTENDANCE, "list_course")
    stmt = select(Attendance).where(Attendance.course_id == course.id)
    if on is not None:
        stmt = stmt.where(Attendance.date == on)
    r = await db.execute(stmt.order_by(Attendance.date.desc(), Attendance.student_id))
    return [attendance_dict(a) for a in r.scalars().all()]


@router.get("/my-attendance")
async def my_attendance(
    course_id: int | None = Query(default=None),
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ATTENDANCE, "read_own")
    student = await current_student(db, identity)
    stmt = select(Attendance).where(Attendance.student_id == student.id)
    if course_id is not None:
        stmt = stmt.where(Attendance.course_id == course_id)
    r = await db.execute(stmt.order_by(Attendance.date.desc()))
    return [attendance_dict(a) for a in r.scalars().all()]


@router.put("/{attendance_id}", status_code=204)
async def update_attendance(
    attendance_id: int,
    body: AttendanceUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ATTENDANCE, "update")
    record = await get_or_404(db, Attendance, attendance_id, "Attendance record")
    ensure_teaches(await resolve_actor(db, identity), record.course, RESOURCE_ATTENDANCE, "update")
    if body.status is not None:
        record.status = body.status.value
    if body.notes is not None:
        record.notes = body.notes
    await db.commit()
    audit_allowed(identity, "update", RESOURCE_ATTENDANCE, record.id)


@router.delete("/{attendance_id}", status_code=204)
async def delete_attendance(
    attendance_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_ATTENDANCE, "delete")
    record = await get_or_404(db, Attendance, attendance_id, "Attendance record")
    ensure_teaches(await resolve_actor(db, identity), record.course, RESOURCE_ATTENDANCE, "delete")
    await db.delete(record)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_ATTENDANCE, attendance_id)
