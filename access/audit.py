# Academia - Audit logging (every access decision on a mutation is logged)
import json
import logging
import logging.handlers
import queue
import uuid
from collections import deque
from pathlib import Path

from .models import AuditLogEntry, IdentityScope, PolicyDecision

MAX_MEMORY_ENTRIES = 1000

# In-memory ring for the admin sample endpoint; optional append-only file via a queue
_audit_log: deque[AuditLogEntry] = deque(maxlen=MAX_MEMORY_ENTRIES)
_audit_queue: queue.Queue = queue.Queue(-1)
_queue_listener: logging.handlers.QueueListener | None = None

_audit_logger = logging.getLogger("academia.audit")
_audit_logger.setLevel(logging.INFO)
_audit_logger.propagate = False
_audit_logger.addHandler(logging.NullHandler())
# Attached only while a listener drains the queue
_queue_handler = logging.handlers.QueueHandler(_audit_queue)


class AuditFileHandler(logging.Handler):
    def __init__(self, filepath: Path):
        super().__init__()
        self.filepath = filepath

    def emit(self, record):
        try:
            entry = getattr(record, "audit_entry", None)
            if entry is not None:
                with open(self.filepath, "a", encoding="utf-8") as f:
                    f.write(json.dumps(entry, default=str) + "\n")
        except Exception:
            self.handleError(record)


def start_audit_logger(path: Path | None = None) -> None:
    """Start draining the audit queue; with no path the queue is drained and discarded."""
    global _queue_listener
    stop_audit_logger()
    handlers: list[logging.Handler] = [logging.NullHandler()]
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers = [AuditFileHandler(path)]
    _queue_listener = logging.handlers.QueueListener(_audit_queue, *handlers, respect_handler_level=True)
    _queue_listener.start()
    _audit_logger.addHandler(_queue_handler)


def stop_audit_logger() -> None:
    global _queue_listener
    if _queue_listener is not None:
        _audit_logger.removeHandler(_queue_handler)
        _queue_listener.stop()
        _queue_listener = None


def log_audit(entry: AuditLogEntry) -> None:
    _audit_log.append(entry)
    _audit_logger.info(
        "%s %s %s/%s: %s",
        entry.policy_decision.value,
        entry.action,
        entry.resource,
        entry.resource_id,
        entry.reason,
        extra={"audit_entry": entry.model_dump(mode="json")},
    )


def audit_decision(
    identity: IdentityScope | None,
    action: str,
    resource: str,
    decision: PolicyDecision,
    resource_id: int | None = None,
    reason: str = "",
) -> AuditLogEntry:
    entry = AuditLogEntry(
        trace_id=str(uuid.uuid4()),
        user_id=identity.user_id if identity else None,
        role=identity.role.value if identity else None,
        action=action,
        resource=resource,
        resource_id=resource_id,
        policy_decision=decision,
        reason=reason,
    )
    log_audit(entry)
    return entry


def get_audit_sample(limit: int = 50) -> list[dict]:
    """Return the most recent audit entries, oldest first."""
    if limit <= 0:
        return []
    return [e.model_dump(mode="json") for e in list(_audit_log)[-limit:]]


def clear_audit_log() -> None:
    _audit_log.clear()
