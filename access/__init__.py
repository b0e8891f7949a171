# Academia - access control and invariant kernel
from .errors import Unauthenticated, Forbidden, NotFound, Conflict, ValidationFailed
from .models import (
    IdentityScope,
    Actor,
    AdminActor,
    TeacherActor,
    StudentActor,
    ResourceDescriptor,
    PolicyDecision,
    AuditLogEntry,
)
from .identity import identity_from_claims
from .grading import score_to_letter, resolve_letter, score_band

__all__ = [
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "Conflict",
    "ValidationFailed",
    "IdentityScope",
    "Actor",
    "AdminActor",
    "TeacherActor",
    "StudentActor",
    "ResourceDescriptor",
    "PolicyDecision",
    "AuditLogEntry",
    "identity_from_claims",
    "score_to_letter",
    "resolve_letter",
    "score_band",
]
