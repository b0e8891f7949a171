from conftest import login


def test_student_sees_only_own_profile(client, make_student):
    me, headers = make_student()
    other, _ = make_student()
    assert client.get(f"/api/students/{me['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/students/{other['id']}", headers=headers).status_code == 403
    assert client.put(f"/api/students/{other['id']}", json={"phone": "555"}, headers=headers).status_code == 403


def test_student_updates_own_profile(client, make_student):
    me, headers = make_student()
    r = client.put(f"/api/students/{me['id']}", json={"phone": "555-0100", "email": "me@school.edu"}, headers=headers)
    assert r.status_code == 204
    profile = client.get(f"/api/students/{me['id']}", headers=headers).json()
    assert profile["phone"] == "555-0100"
    assert profile["email"] == "me@school.edu"


def test_student_listing_filters(client, admin_headers, make_student):
    make_student(major="Physics", class_name="P1")
    make_student(major="History", class_name="H1", first_name="Zed")
    assert len(client.get("/api/students?major=Physics", headers=admin_headers).json()) == 1
    assert len(client.get("/api/students?search=Zed", headers=admin_headers).json()) == 1
    assert client.get("/api/students/majors", headers=admin_headers).json() == ["History", "Physics"]
    assert client.get("/api/students/classes", headers=admin_headers).json() == ["H1", "P1"]


def test_students_cannot_list_students(client, make_student):
    _, headers = make_student()
    assert client.get("/api/students", headers=headers).status_code == 403


def test_statistics_are_admin_only(client, admin_headers, make_student):
    student, headers = make_student()
    client.put(f"/api/students/{student['id']}/deactivate", headers=admin_headers)
    assert client.get("/api/students/statistics", headers=headers).status_code == 403
    stats = client.get("/api/students/statistics", headers=admin_headers).json()
    assert stats["total"] == 1
    assert stats["inactive"] == 1


def test_batch_create_reports_each_row(client, admin_headers, make_student):
    make_student(student_number="S500")
    rows = [
        {"username": "b1", "password": "pw", "email": "b1@school.edu", "student_number": "B1", "first_name": "A", "last_name": "B"},
        {"username": "b2", "password": "pw", "email": "b2@school.edu", "student_number": "S500", "first_name": "C", "last_name": "D"},
        {"username": "b3", "password": "pw", "email": "b3@school.edu", "student_number": "B3", "first_name": "E", "last_name": "F"},
    ]
    r = client.post("/api/students/batch", json=rows, headers=admin_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["created"] == 2
    assert body["failed"] == 1
    assert [row["ok"] for row in body["results"]] == [True, False, True]
    assert len(client.get("/api/students", headers=admin_headers).json()) == 3


def test_student_with_active_enrollment_cannot_be_deleted(client, admin_headers, classroom):
    student_id = classroom["student"]["id"]
    r = client.delete(f"/api/students/{student_id}", headers=admin_headers)
    assert r.status_code == 409
    client.put(
        f"/api/enrollments/{classroom['enrollment']['id']}",
        json={"status": "Completed"},
        headers=classroom["teacher_headers"],
    )
    assert client.delete(f"/api/students/{student_id}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/students/{student_id}", headers=admin_headers).status_code == 404


def test_student_courses_and_own_views(client, classroom):
    headers = classroom["student_headers"]
    courses = client.get(f"/api/students/{classroom['student']['id']}/courses", headers=headers).json()
    assert [c["id"] for c in courses] == [classroom["course"]["id"]]
    assignments = client.get("/api/students/my-assignments", headers=headers).json()
    assert assignments[0]["submission_id"] is None
    assert client.get("/api/students/my-grades", headers=headers).json() == []


def test_teacher_roster(client, classroom):
    headers = classroom["teacher_headers"]
    by_students = client.get("/api/students/my-students", headers=headers).json()
    by_teachers = client.get("/api/teachers/my-students", headers=headers).json()
    assert [s["id"] for s in by_students] == [classroom["student"]["id"]]
    assert by_students == by_teachers


def test_teacher_admin_is_admin_only(client, admin_headers, make_teacher):
    teacher, headers = make_teacher()
    assert client.get("/api/teachers", headers=headers).status_code == 403
    assert client.get(f"/api/teachers/{teacher['id']}", headers=admin_headers).json()["teacher_number"] == "T001"
    r = client.put(f"/api/teachers/{teacher['id']}", json={"title": "Professor"}, headers=admin_headers)
    assert r.status_code == 204
    assert client.get(f"/api/teachers/{teacher['id']}", headers=admin_headers).json()["title"] == "Professor"


def test_duplicate_teacher_number_conflicts(client, admin_headers, make_teacher):
    make_teacher(teacher_number="T900")
    r = client.post(
        "/api/teachers",
        json={"username": "tx", "password": "pw", "email": "tx@school.edu", "teacher_number": "T900"},
        headers=admin_headers,
    )
    assert r.status_code == 409


def test_teacher_with_active_course_cannot_be_deleted(client, admin_headers, make_teacher, make_course):
    teacher, headers = make_teacher()
    course = make_course(headers)
    assert client.delete(f"/api/teachers/{teacher['id']}", headers=admin_headers).status_code == 409
    client.put(f"/api/courses/{course['id']}", json={"status": "Completed"}, headers=admin_headers)
    assert client.delete(f"/api/teachers/{teacher['id']}", headers=admin_headers).status_code == 204
    orphan = client.get(f"/api/courses/{course['id']}", headers=admin_headers).json()
    assert orphan["teacher_id"] is None


def test_explicit_null_for_required_profile_field_is_rejected(client, admin_headers, make_student, make_teacher):
    me, headers = make_student()
    r = client.put(f"/api/students/{me['id']}", json={"first_name": None}, headers=headers)
    assert r.status_code == 400
    assert "already exists" not in r.text
    assert client.put(f"/api/students/{me['id']}", json={"phone": None}, headers=headers).status_code == 204

    teacher, _ = make_teacher()
    r = client.put(f"/api/teachers/{teacher['id']}", json={"last_name": None}, headers=admin_headers)
    assert r.status_code == 400


def test_account_lists_for_password_resets(client, admin_headers, make_student, make_teacher):
    student, student_headers = make_student()
    make_teacher()
    students = client.get("/api/students/users", headers=admin_headers).json()
    assert [(u["username"], u["role"]) for u in students] == [("student1", "Student")]
    assert students[0]["id"] == student["user_id"]
    assert set(students[0]) >= {"id", "username", "email", "role"}
    teachers = client.get("/api/teachers/users", headers=admin_headers).json()
    assert [(u["username"], u["role"]) for u in teachers] == [("teacher1", "Teacher")]

    r = client.post(
        "/api/auth/reset-password",
        json={"user_id": students[0]["id"], "password": "fresh-pass"},
        headers=admin_headers,
    )
    assert r.status_code == 204
    login(client, "student1", "fresh-pass")

    assert client.get("/api/students/users", headers=student_headers).status_code == 403
    assert client.get("/api/teachers/users", headers=student_headers).status_code == 403
