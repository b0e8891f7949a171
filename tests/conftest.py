import itertools

import pytest
from fastapi.testclient import TestClient

ADMIN_PASSWORD = "admin-pass"
FUTURE = "2099-01-01T00:00:00"
PAST = "2000-01-01T00:00:00"


def login(client, username, password):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'academia-test.db'}")
    monkeypatch.setenv("SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("AUDIT_LOG_PATH", str(tmp_path / "audit.jsonl"))
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client):
    return login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def make_teacher(client, admin_headers):
    """Admin creates a teacher; returns (teacher row, auth headers)."""
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        body = {
            "username": f"teacher{n}",
            "password": "teacher-pass",
            "email": f"teacher{n}@school.edu",
            "teacher_number": f"T{n:03d}",
            "first_name": "Ada",
            "last_name": f"Teacher{n}",
            "department": "Computer Science",
        }
        body.update(overrides)
        r = client.post("/api/teachers", json=body, headers=admin_headers)
        assert r.status_code == 201, r.text
        return r.json(), login(client, body["username"], body["password"])

    return _make


@pytest.fixture
def make_student(client, admin_headers):
    """Admin creates a student; returns (student row, auth headers)."""
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        body = {
            "username": f"student{n}",
            "password": "student-pass",
            "email": f"student{n}@school.edu",
            "student_number": f"S{n:03d}",
            "first_name": "Sam",
            "last_name": f"Student{n}",
            "major": "Mathematics",
            "class_name": "M2024-1",
        }
        body.update(overrides)
        r = client.post("/api/students", json=body, headers=admin_headers)
        assert r.status_code == 201, r.text
        return r.json(), login(client, body["username"], body["password"])

    return _make


@pytest.fixture
def make_course(client):
    counter = itertools.count(1)

    def _make(headers, **overrides):
        n = next(counter)
        body = {"course_code": f"CS{100 + n}", "course_name": f"Course {n}", "credits": 3, "max_students": 30}
        body.update(overrides)
        r = client.post("/api/courses", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def make_assignment(client):
    def _make(headers, course_id, due_date=FUTURE, **overrides):
        body = {"course_id": course_id, "title": "Homework", "due_date": due_date, "max_score": 100}
        body.update(overrides)
        r = client.post("/api/assignments", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def classroom(client, make_teacher, make_student, make_course, make_assignment):
    """A teacher owning one course, one enrolled student and one open assignment."""
    teacher, teacher_headers = make_teacher()
    student, student_headers = make_student()
    course = make_course(teacher_headers)
    r = client.post("/api/enrollments", json={"course_id": course["id"]}, headers=student_headers)
    assert r.status_code == 201, r.text
    assignment = make_assignment(teacher_headers, course["id"])
    return {
        "teacher": teacher,
        "teacher_headers": teacher_headers,
        "student": student,
        "student_headers": student_headers,
        "course": course,
        "enrollment": r.json(),
        "assignment": assignment,
    }
