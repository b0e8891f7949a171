# Academia - dashboard
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.database import get_db
from access import IdentityScope
from access.policy import resolve_actor
from server.data_access import dashboard_overview

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/overview")
async def overview(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    actor = await resolve_actor(db, identity)
    out = await dashboard_overview(db, actor)
    out["role"] = identity.role.value
    return out
