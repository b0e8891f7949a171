# Academia - access control objects
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union
from pydantic import BaseModel, Field

from database.models import Role, Student, Teacher


# --- Identity Scope (resolved from token claims) ---
class IdentityScope(BaseModel):
    """Who is making the request: user id and role, nothing else is trusted."""
    user_id: int = Field(..., description="users.id of the caller")
    role: Role = Field(..., description="Admin | Teacher | Student")
    username: str | None = Field(default=None, description="For logs only")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


# --- Actor: identity joined with its profile row ---
@dataclass(frozen=True)
class AdminActor:
    identity: IdentityScope


@dataclass(frozen=True)
class TeacherActor:
    identity: IdentityScope
    teacher: Teacher


@dataclass(frozen=True)
class StudentActor:
    identity: IdentityScope
    student: Student


Actor = Union[AdminActor, TeacherActor, StudentActor]


# --- Resource Descriptor ---
class ResourceDescriptor(BaseModel):
    """Declares which roles may perform each action on a resource kind."""
    resource_id: str
    ownership: str = Field(..., description="role | self | relationship")
    allowed_roles: dict[str, list[Role]] = Field(default_factory=dict)


# --- Policy decision for audit ---
class PolicyDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


# --- Audit log entry ---
class AuditLogEntry(BaseModel):
    trace_id: str
    user_id: int | None = None
    role: str | None = None
    action: str
    resource: str
    resource_id: int | None = None
    policy_decision: PolicyDecision
    reason: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, Any] = Field(default_factory=dict)
