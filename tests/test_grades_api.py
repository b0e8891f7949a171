def create_grade(client, headers, student_id, course_id, **extra):
    body = {"student_id": student_id, "course_id": course_id, "score": 83}
    body.update(extra)
    return client.post("/api/grades", json=body, headers=headers)


def test_letter_is_derived_on_create(client, classroom):
    r = create_grade(client, classroom["teacher_headers"], classroom["student"]["id"], classroom["course"]["id"])
    assert r.status_code == 201
    assert r.json()["grade_letter"] == "B"
    assert r.json()["graded_by"] == classroom["teacher"]["id"]


def test_explicit_letter_overrides(client, classroom):
    r = create_grade(
        client,
        classroom["teacher_headers"],
        classroom["student"]["id"],
        classroom["course"]["id"],
        score=83,
        grade_letter="A",
    )
    assert r.json()["grade_letter"] == "A"


def test_update_rederives_letter(client, classroom):
    grade = create_grade(
        client, classroom["teacher_headers"], classroom["student"]["id"], classroom["course"]["id"]
    ).json()
    url = f"/api/grades/{grade['id']}"
    assert client.put(url, json={"score": 59}, headers=classroom["teacher_headers"]).status_code == 204
    assert client.get(url, headers=classroom["student_headers"]).json()["grade_letter"] == "F"


def test_non_owner_cannot_grade(client, classroom, make_teacher):
    _, other_teacher = make_teacher()
    r = create_grade(client, other_teacher, classroom["student"]["id"], classroom["course"]["id"])
    assert r.status_code == 403


def test_assignment_must_belong_to_course(client, classroom, make_course, make_assignment):
    other_course = make_course(classroom["teacher_headers"])
    stray = make_assignment(classroom["teacher_headers"], other_course["id"])
    r = create_grade(
        client,
        classroom["teacher_headers"],
        classroom["student"]["id"],
        classroom["course"]["id"],
        assignment_id=stray["id"],
    )
    assert r.status_code == 400


def test_grade_visibility(client, admin_headers, classroom, make_student, make_teacher):
    grade = create_grade(
        client, classroom["teacher_headers"], classroom["student"]["id"], classroom["course"]["id"]
    ).json()
    url = f"/api/grades/{grade['id']}"
    _, stranger = make_student()
    _, other_teacher = make_teacher()
    assert client.get(url, headers=classroom["student_headers"]).status_code == 200
    assert client.get(url, headers=classroom["teacher_headers"]).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 200
    assert client.get(url, headers=stranger).status_code == 403
    assert client.get(url, headers=other_teacher).status_code == 403


def test_grade_listing_is_role_scoped(client, admin_headers, classroom, make_student, make_teacher):
    create_grade(client, classroom["teacher_headers"], classroom["student"]["id"], classroom["course"]["id"])
    _, stranger = make_student()
    _, other_teacher = make_teacher()
    assert len(client.get("/api/grades", headers=admin_headers).json()) == 1
    assert len(client.get("/api/grades", headers=classroom["student_headers"]).json()) == 1
    assert len(client.get("/api/grades/my-grades", headers=classroom["teacher_headers"]).json()) == 1
    assert client.get("/api/grades", headers=stranger).json() == []
    assert client.get("/api/grades", headers=other_teacher).json() == []


def test_teacher_dropdowns(client, classroom):
    headers = classroom["teacher_headers"]
    students = client.get("/api/grades/students-dropdown", headers=headers).json()
    courses = client.get("/api/grades/courses-dropdown", headers=headers).json()
    assignments = client.get(
        f"/api/grades/assignments-dropdown?course_id={classroom['course']['id']}", headers=headers
    ).json()
    assert [s["id"] for s in students] == [classroom["student"]["id"]]
    assert [c["id"] for c in courses] == [classroom["course"]["id"]]
    assert [a["id"] for a in assignments] == [classroom["assignment"]["id"]]
    assert client.get("/api/grades/students-dropdown", headers=classroom["student_headers"]).status_code == 403


def test_delete_grade(client, classroom):
    grade = create_grade(
        client, classroom["teacher_headers"], classroom["student"]["id"], classroom["course"]["id"]
    ).json()
    url = f"/api/grades/{grade['id']}"
    assert client.delete(url, headers=classroom["student_headers"]).status_code == 403
    assert client.delete(url, headers=classroom["teacher_headers"]).status_code == 204
    assert client.get(url, headers=classroom["teacher_headers"]).status_code == 404
