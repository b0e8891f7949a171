# Academia - Policy enforcement (role gate > ownership > invariants)
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Course, Notification, Role, Student, Teacher
from .audit import audit_decision
from .errors import Forbidden, NotFound
from .models import (
    Actor,
    AdminActor,
    IdentityScope,
    PolicyDecision,
    StudentActor,
    TeacherActor,
)
from .resources import RESOURCE_DESCRIPTORS

logger = logging.getLogger(__name__)


def _deny(identity: IdentityScope, action: str, resource: str, reason: str, resource_id: int | None = None):
    audit_decision(identity, action, resource, PolicyDecision.DENY, resource_id=resource_id, reason=reason)
    logger.info("Denied %s on %s/%s for user %s: %s", action, resource, resource_id, identity.user_id, reason)
    return Forbidden(reason)


def enforce_role(identity: IdentityScope, resource: str, action: str) -> None:
    """Role-only gate from RESOURCE_DESCRIPTORS. Unknown resource/action pairs are denied."""
    descriptor = RESOURCE_DESCRIPTORS.get(resource)
    allowed = descriptor.allowed_roles.get(action, []) if descriptor else []
    if identity.role not in allowed:
        names = ", ".join(r.value for r in allowed) or "none"
        raise _deny(identity, action, resource, f"Access denied. Required role: {names}")


def audit_allowed(identity: IdentityScope, action: str, resource: str, resource_id: int | None = None) -> None:
    audit_decision(identity, action, resource, PolicyDecision.ALLOW, resource_id=resource_id, reason="ok")


async def resolve_actor(session: AsyncSession, identity: IdentityScope) -> Actor:
    """Join the identity with its profile row. A Student/Teacher without a profile is NotFound."""
    if identity.role == Role.admin:
        return AdminActor(identity)
    if identity.role == Role.teacher:
        r = await session.execute(select(Teacher).where(Teacher.user_id == identity.user_id))
        teacher = r.scalar_one_or_none()
        if teacher is None:
            raise NotFound("Teacher not found")
        return TeacherActor(identity, teacher)
    r = await session.execute(select(Student).where(Student.user_id == identity.user_id))
    student = r.scalar_one_or_none()
    if student is None:
        raise NotFound("Student not found")
    return StudentActor(identity, student)


async def current_student(session: AsyncSession, identity: IdentityScope) -> Student:
    actor = await resolve_actor(session, identity)
    if not isinstance(actor, StudentActor):
        raise Forbidden("Access denied. Required role: Student")
    return actor.student


async def current_teacher(session: AsyncSession, identity: IdentityScope) -> Teacher:
    actor = await resolve_actor(session, identity)
    if not isinstance(actor, TeacherActor):
        raise Forbidden("Access denied. Required role: Teacher")
    return actor.teacher


def ensure_self(identity: IdentityScope, owner_user_id: int, resource: str = "", action: str = "read") -> None:
    """Self-only: the resource's owning user must be the caller. Admin bypasses."""
    if identity.is_admin or identity.user_id == owner_user_id:
        return
    raise _deny(identity, action, resource, "Access denied")


def teaches(actor: Actor, course: Course | None) -> bool:
    if isinstance(actor, AdminActor):
        return True
    if isinstance(actor, TeacherActor) and course is not None:
        return course.teacher_id is not None and course.teacher_id == actor.teacher.id
    return False


def ensure_teaches(actor: Actor, course: Course | None, resource: str = "", action: str = "update") -> None:
    """Relationship-derived: the caller's Teacher row must own the course. Admin bypasses."""
    if not teaches(actor, course):
        raise _deny(
            actor.identity,
            action,
            resource,
            "Access denied. You do not teach this course",
            resource_id=course.id if course is not None else None,
        )


def ensure_can_view_student_record(
    actor: Actor,
    student_id: int,
    course: Course | None,
    resource: str = "",
    resource_id: int | None = None,
) -> None:
    """A row belonging to a student: readable by that student, the course's teacher, or Admin."""
    if isinstance(actor, AdminActor):
        return
    if isinstance(actor, StudentActor) and actor.student.id == student_id:
        return
    if isinstance(actor, TeacherActor) and teaches(actor, course):
        return
    raise _deny(actor.identity, "read", resource, "Access denied", resource_id=resource_id)


def notification_visible_to(identity: IdentityScope, notification: Notification) -> bool:
    if notification.target_user_id is not None and notification.target_user_id == identity.user_id:
        return True
    return notification.target_role is not None and notification.target_role == identity.role.value


def ensure_notification_visible(identity: IdentityScope, notification: Notification, action: str = "read") -> None:
    """Admin reads everything; others only notifications aimed at them or their role."""
    if action == "read" and identity.is_admin:
        return
    if notification_visible_to(identity, notification):
        return
    raise _deny(identity, action, "notifications", "Access denied", resource_id=notification.id)
