from access import IdentityScope, PolicyDecision
from access import audit
from database.models import Role

TEACHER = IdentityScope(user_id=2, role=Role.teacher)


def _drain():
    while not audit._audit_queue.empty():
        audit._audit_queue.get_nowait()


def test_records_are_not_queued_without_a_listener():
    audit.stop_audit_logger()
    _drain()
    audit.audit_decision(TEACHER, "update", "courses", PolicyDecision.ALLOW, resource_id=1)
    assert audit._audit_queue.qsize() == 0
    assert audit.get_audit_sample(1)[0]["action"] == "update"


def test_listener_writes_jsonl(tmp_path):
    path = tmp_path / "audit" / "log.jsonl"
    audit.start_audit_logger(path)
    try:
        audit.audit_decision(TEACHER, "delete", "grades", PolicyDecision.DENY, resource_id=7, reason="not owner")
    finally:
        audit.stop_audit_logger()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert '"resource": "grades"' in lines[0]
    assert audit._audit_queue.qsize() == 0
