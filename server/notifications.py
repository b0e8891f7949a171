# Academia - notifications (targeted at one user or at every user of a role)
from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.database import get_db
from database.models import Notification, User
from access import IdentityScope, ValidationFailed
from access.policy import audit_allowed, enforce_role, ensure_notification_visible, ensure_self
from access.resources import RESOURCE_NOTIFICATIONS
from server.data_access import get_or_404, notification_dict
from server.schemas import NotificationCreate, NotificationUpdate

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


def _addressed_to(identity: IdentityScope):
    return or_(Notification.target_user_id == identity.user_id, Notification.target_role == identity.role.value)


@router.get("")
async def list_notifications(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "list")
    r = await db.execute(select(Notification).order_by(Notification.created_at.desc(), Notification.id.desc()))
    return [notification_dict(n) for n in r.scalars().all()]


@router.get("/my-notifications")
async def my_notifications(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "read_own")
    r = await db.execute(
        select(Notification)
        .where(_addressed_to(identity))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return [notification_dict(n) for n in r.scalars().all()]


@router.get("/unread-count")
async def unread_count(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "read_own")
    r = await db.execute(
        select(func.count(Notification.id)).where(Notification.is_read.is_(False), _addressed_to(identity))
    )
    return {"unread_count": r.scalar_one()}


@router.get("/teacher-published")
async def teacher_published(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "read_published")
    r = await db.execute(
        select(Notification)
        .where(Notification.created_by == identity.user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return [notification_dict(n) for n in r.scalars().all()]


@router.get("/{notification_id}")
async def get_notification(
    notification_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "read")
    notification = await get_or_404(db, Notification, notification_id, "Notification")
    ensure_notification_visible(identity, notification, "read")
    return notification_dict(notification)


@router.post("", status_code=201)
async def create_notification(
    body: NotificationCreate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "create")
    if body.target_user_id is None and body.target_role is None:
        raise ValidationFailed("A target user or target role is required")
    target_user = None
    if body.target_user_id is not None:
        target_user = await get_or_404(db, User, body.target_user_id, "User")
    notification = Notification(
        title=body.title,
        content=body.content,
        type=body.type,
        target_user=target_user,
        target_role=body.target_role.value if body.target_role else None,
        created_by=identity.user_id,
    )
    db.add(notification)
    await db.commit()
    audit_allowed(identity, "create", RESOURCE_NOTIFICATIONS, notification.id)
    return notification_dict(notification)


@router.put("/{notification_id}", status_code=204)
async def update_notification(
    notification_id: int,
    body: NotificationUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "update")
    notification = await get_or_404(db, Notification, notification_id, "Notification")
    # A Teacher edits only what they published
    ensure_self(identity, notification.created_by, RESOURCE_NOTIFICATIONS, "update")
    data = body.model_dump(exclude_unset=True)
    if "target_user_id" in data:
        target_id = data.pop("target_user_id")
        notification.target_user = await get_or_404(db, User, target_id, "User") if target_id is not None else None
    if "target_role" in data:
        role = data.pop("target_role")
        notification.target_role = role.value if role else None
    for key, value in data.items():
        if value is not None:
            setattr(notification, key, value)
    if notification.target_user is None and notification.target_role is None:
        raise ValidationFailed("A target user or target role is required")
    await db.commit()
    audit_allowed(identity, "update", RESOURCE_NOTIFICATIONS, notification.id)


@router.put("/{notification_id}/mark-read", status_code=204)
async def mark_read(
    notification_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "mark_read")
    notification = await get_or_404(db, Notification, notification_id, "Notification")
    ensure_notification_visible(identity, notification, "mark_read")
    notification.is_read = True
    await db.commit()


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_NOTIFICATIONS, "delete")
    notification = await get_or_404(db, Notification, notification_id, "Notification")
    await db.delete(notification)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_NOTIFICATIONS, notification_id)
