# Academia - login, registration and account administration
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import create_access_token, hash_password, require_auth, verify_password
from config import Settings
from database.database import commit_or_conflict, get_db
from database.models import Role, Student, Teacher, User
from access import Conflict, IdentityScope, NotFound, StudentActor, TeacherActor, Unauthenticated, ValidationFailed
from access.policy import audit_allowed, enforce_role, resolve_actor
from access.resources import RESOURCE_USERS
from server.schemas import LoginRequest, LoginResponse, RegisterRequest, ResetPasswordRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


async def new_user(session: AsyncSession, username: str, password: str, email: str, role: Role) -> User:
    """Add a User row after checking username and email are free."""
    r = await session.execute(select(User).where(or_(User.username == username, User.email == email)))
    for existing in r.scalars().all():
        if existing.username == username:
            raise Conflict("Username already exists")
        raise Conflict("Email already exists")
    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        role=role.value,
        is_active=True,
    )
    session.add(user)
    return user


async def ensure_number_free(session: AsyncSession, model, column, value: str, label: str) -> None:
    r = await session.execute(select(model.id).where(column == value))
    if r.first() is not None:
        raise Conflict(f"{label} already exists")


async def ensure_admin(session: AsyncSession, settings: Settings) -> None:
    """Create the bootstrap Admin account when no user holds its username."""
    r = await session.execute(select(User).where(User.username == settings.admin_username))
    if r.scalar_one_or_none() is not None:
        return
    session.add(
        User(
            username=settings.admin_username,
            password_hash=hash_password(settings.admin_password),
            email=settings.admin_email,
            role=Role.admin.value,
            is_active=True,
        )
    )
    await session.commit()
    logger.info("Created bootstrap admin account %s", settings.admin_username)


def _login_response(user: User) -> LoginResponse:
    token, expire = create_access_token(user)
    return LoginResponse(
        token=token,
        username=user.username,
        role=Role(user.role),
        user_id=user.id,
        expires_at=expire,
    )


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    r = await db.execute(select(User).where(User.username == body.username))
    user = r.scalar_one_or_none()
    if not user or not user.is_active or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %s", body.username)
        raise Unauthenticated("Invalid username or password")
    return _login_response(user)


@router.post("/register", response_model=LoginResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Self-service sign-up for Students and Teachers. Admin accounts are never created here."""
    if body.role == Role.admin:
        raise ValidationFailed("Cannot register an Admin account")
    if body.role == Role.student and not body.student_number:
        raise ValidationFailed("student_number is required")
    if body.role == Role.teacher and not body.teacher_number:
        raise ValidationFailed("teacher_number is required")

    user = await new_user(db, body.username, body.password, body.email, body.role)
    if body.role == Role.student:
        await ensure_number_free(db, Student, Student.student_number, body.student_number, "Student number")
        db.add(
            Student(
                user=user,
                student_number=body.student_number,
                first_name=body.first_name,
                last_name=body.last_name,
                major=body.major,
                class_name=body.class_name,
            )
        )
    else:
        await ensure_number_free(db, Teacher, Teacher.teacher_number, body.teacher_number, "Teacher number")
        db.add(
            Teacher(
                user=user,
                teacher_number=body.teacher_number,
                first_name=body.first_name,
                last_name=body.last_name,
                department=body.department,
                title=body.title,
            )
        )
    await commit_or_conflict(db, "Username, email or number already exists")
    logger.info("Registered %s %s", body.role.value, user.username)
    return _login_response(user)


@router.post("/reset-password", status_code=204)
async def reset_password(
    body: ResetPasswordRequest,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_USERS, "reset_password")
    user = await db.get(User, body.user_id)
    if user is None:
        raise NotFound("User not found")
    user.password_hash = hash_password(body.password)
    await db.commit()
    audit_allowed(identity, "reset_password", RESOURCE_USERS, user.id)


@router.get("/me")
async def me(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    actor = await resolve_actor(db, identity)
    user = await db.get(User, identity.user_id)
    if user is None:
        raise NotFound("User not found")
    profile_id = None
    if isinstance(actor, StudentActor):
        profile_id = actor.student.id
    elif isinstance(actor, TeacherActor):
        profile_id = actor.teacher.id
    return {
        "user_id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "profile_id": profile_id,
    }
