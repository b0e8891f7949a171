import pytest

from access import AdminActor, Forbidden, IdentityScope, StudentActor, TeacherActor
from access.audit import clear_audit_log, get_audit_sample
from access.policy import (
    enforce_role,
    ensure_can_view_student_record,
    ensure_notification_visible,
    ensure_self,
    ensure_teaches,
)
from access.resources import RESOURCE_COURSES, RESOURCE_ENROLLMENTS, RESOURCE_GRADES
from database.models import Course, Notification, Role, Student, Teacher

ADMIN = IdentityScope(user_id=1, role=Role.admin)
TEACHER = IdentityScope(user_id=2, role=Role.teacher)
OTHER_TEACHER = IdentityScope(user_id=3, role=Role.teacher)
STUDENT = IdentityScope(user_id=4, role=Role.student)


@pytest.fixture(autouse=True)
def fresh_audit_log():
    clear_audit_log()
    yield
    clear_audit_log()


@pytest.fixture
def actors():
    return {
        "admin": AdminActor(ADMIN),
        "teacher": TeacherActor(TEACHER, Teacher(id=10, user_id=2)),
        "other_teacher": TeacherActor(OTHER_TEACHER, Teacher(id=11, user_id=3)),
        "student": StudentActor(STUDENT, Student(id=20, user_id=4)),
    }


def test_role_gate_allows_listed_roles():
    enforce_role(ADMIN, RESOURCE_COURSES, "delete")
    enforce_role(TEACHER, RESOURCE_COURSES, "create")
    enforce_role(STUDENT, RESOURCE_ENROLLMENTS, "create")


def test_role_gate_denies_and_audits():
    with pytest.raises(Forbidden) as exc:
        enforce_role(STUDENT, RESOURCE_COURSES, "create")
    assert exc.value.status_code == 403
    entries = get_audit_sample()
    assert entries[-1]["policy_decision"] == "deny"
    assert entries[-1]["user_id"] == 4
    assert entries[-1]["resource"] == RESOURCE_COURSES


def test_unknown_action_is_denied():
    with pytest.raises(Forbidden):
        enforce_role(ADMIN, RESOURCE_COURSES, "launch")


def test_only_owning_teacher_or_admin_teaches(actors):
    course = Course(id=5, teacher_id=10)
    ensure_teaches(actors["admin"], course)
    ensure_teaches(actors["teacher"], course)
    with pytest.raises(Forbidden):
        ensure_teaches(actors["other_teacher"], course)
    with pytest.raises(Forbidden):
        ensure_teaches(actors["student"], course)


def test_unowned_course_belongs_to_no_teacher(actors):
    with pytest.raises(Forbidden):
        ensure_teaches(actors["teacher"], Course(id=6, teacher_id=None))


def test_student_record_visibility(actors):
    course = Course(id=5, teacher_id=10)
    ensure_can_view_student_record(actors["admin"], 20, course, RESOURCE_GRADES)
    ensure_can_view_student_record(actors["student"], 20, course, RESOURCE_GRADES)
    ensure_can_view_student_record(actors["teacher"], 20, course, RESOURCE_GRADES)
    with pytest.raises(Forbidden):
        ensure_can_view_student_record(actors["student"], 21, course, RESOURCE_GRADES)
    with pytest.raises(Forbidden):
        ensure_can_view_student_record(actors["other_teacher"], 20, course, RESOURCE_GRADES)


def test_ensure_self_with_admin_bypass():
    ensure_self(STUDENT, 4)
    ensure_self(ADMIN, 4)
    with pytest.raises(Forbidden):
        ensure_self(TEACHER, 4)


def test_notification_visibility():
    to_students = Notification(id=1, target_role="Student")
    to_teacher = Notification(id=2, target_user_id=2)
    ensure_notification_visible(STUDENT, to_students)
    ensure_notification_visible(TEACHER, to_teacher)
    ensure_notification_visible(ADMIN, to_students)
    with pytest.raises(Forbidden):
        ensure_notification_visible(TEACHER, to_students)
    with pytest.raises(Forbidden):
        ensure_notification_visible(ADMIN, to_teacher, "mark_read")
