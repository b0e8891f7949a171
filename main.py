# Academia - academic administration API
# Every route except login/register/health resolves the caller through the access kernel.
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import require_auth
from config import get_settings
from database import database as db_module
from database.database import dispose_db, init_db
from access import IdentityScope
from access.audit import get_audit_sample, start_audit_logger, stop_audit_logger
from access.policy import enforce_role
from access.resources import RESOURCE_AUDIT
from server.accounts import ensure_admin, router as auth_router
from server.assignments import router as assignments_router
from server.attendance import router as attendance_router
from server.courses import router as courses_router
from server.dashboard import router as dashboard_router
from server.enrollments import router as enrollments_router
from server.grades import router as grades_router
from server.notifications import router as notifications_router
from server.students import router as students_router
from server.submissions import router as submissions_router
from server.teachers import router as teachers_router

logger = logging.getLogger("academia")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db(settings.database_url)
    async with db_module.async_session() as session:
        await ensure_admin(session, settings)
    start_audit_logger(settings.audit_log_path)
    logger.info("Academia API started (database %s)", settings.database_url)
    yield
    stop_audit_logger()
    await dispose_db()


app = FastAPI(
    title="Academia",
    description="Role-based academic administration API",
    lifespan=lifespan,
)

_cors_origins = get_settings().cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    # Credentials are never combined with a wildcard origin
    allow_credentials="*" not in _cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads are a plain 400, like every other rejected input."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/audit/sample")
async def audit_sample(limit: int = 50, identity: IdentityScope = Depends(require_auth)):
    """Most recent access decisions (ids, roles and actions only)."""
    enforce_role(identity, RESOURCE_AUDIT, "read")
    return {"entries": get_audit_sample(limit)}


app.include_router(auth_router)
app.include_router(courses_router)
app.include_router(students_router)
app.include_router(teachers_router)
app.include_router(enrollments_router)
app.include_router(assignments_router)
app.include_router(submissions_router)
app.include_router(grades_router)
app.include_router(notifications_router)
app.include_router(attendance_router)
app.include_router(dashboard_router)


if __name__ == "__main__":
    import os
    import uvicorn

    host = os.environ.get("UVICORN_HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run("main:app", host=host, port=port, reload=False)
