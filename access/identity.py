# Academia - Identity resolver (token claims -> IdentityScope)
from typing import Any

from database.models import Role
from .errors import Unauthenticated
from .models import IdentityScope


def identity_from_claims(claims: dict[str, Any] | None) -> IdentityScope:
    """
    Build the caller identity from decoded token claims.

    `sub` must be the integer users.id (JWT carries it as a string) and `role`
    one of the known roles; anything else is treated as unauthenticated.
    """
    if not claims:
        raise Unauthenticated("Not authenticated")
    sub = claims.get("sub")
    role = claims.get("role")
    if sub is None or role is None:
        raise Unauthenticated("Invalid user information")
    if isinstance(sub, bool):
        raise Unauthenticated("Invalid user information")
    try:
        user_id = int(str(sub).strip())
    except ValueError:
        raise Unauthenticated("Invalid user information")
    try:
        role = Role(role)
    except ValueError:
        raise Unauthenticated("Invalid user information")
    return IdentityScope(user_id=user_id, role=role, username=claims.get("username"))
