PAST = "2000-01-01T00:00:00"


def submit(client, headers, assignment_id, content="my answer"):
    return client.post(
        "/api/assignment-submissions",
        json={"assignment_id": assignment_id, "content": content},
        headers=headers,
    )


def test_end_to_end_capacity_submission_and_grading(client, admin_headers, make_teacher, make_student, make_assignment):
    # Admin creates teacher T; T creates course C with a single seat
    _, teacher_headers = make_teacher()
    r = client.post(
        "/api/courses",
        json={"course_code": "E2E1", "course_name": "End to end", "max_students": 1},
        headers=teacher_headers,
    )
    assert r.status_code == 201
    course = r.json()

    _, s1 = make_student()
    _, s2 = make_student()
    assert client.post("/api/enrollments", json={"course_id": course["id"]}, headers=s1).status_code == 201
    assert client.post("/api/enrollments", json={"course_id": course["id"]}, headers=s2).status_code == 409

    assignment = make_assignment(teacher_headers, course["id"])
    first = submit(client, s1, assignment["id"])
    assert first.status_code == 201
    assert submit(client, s1, assignment["id"]).status_code == 409

    r = client.put(
        f"/api/assignment-submissions/{first.json()['id']}/grade",
        json={"score": 95, "feedback": "Great work"},
        headers=teacher_headers,
    )
    assert r.status_code == 200, r.text
    grade = r.json()
    assert grade["score"] == 95
    assert grade["grade_letter"] == "A"
    assert grade["assignment_id"] == assignment["id"]

    grades = client.get("/api/grades", headers=s1).json()
    assert [(g["score"], g["grade_letter"]) for g in grades] == [(95, "A")]


def test_regrading_updates_the_same_grade_row(client, classroom):
    sub = submit(client, classroom["student_headers"], classroom["assignment"]["id"]).json()
    url = f"/api/assignment-submissions/{sub['id']}/grade"
    client.put(url, json={"score": 72}, headers=classroom["teacher_headers"])
    r = client.put(url, json={"score": 85, "grade_letter": "A"}, headers=classroom["teacher_headers"])
    assert r.json()["grade_letter"] == "A"
    grades = client.get("/api/grades", headers=classroom["teacher_headers"]).json()
    assert len(grades) == 1
    assert grades[0]["score"] == 85
    status = client.get(f"/api/assignment-submissions/{sub['id']}", headers=classroom["student_headers"]).json()
    assert status["status"] == "Graded"


def test_grading_needs_a_score(client, classroom):
    sub = submit(client, classroom["student_headers"], classroom["assignment"]["id"]).json()
    r = client.put(
        f"/api/assignment-submissions/{sub['id']}/grade",
        json={"feedback": "no score"},
        headers=classroom["teacher_headers"],
    )
    assert r.status_code == 400


def test_only_owning_teacher_grades(client, classroom, make_teacher):
    sub = submit(client, classroom["student_headers"], classroom["assignment"]["id"]).json()
    _, other_teacher = make_teacher()
    r = client.put(f"/api/assignment-submissions/{sub['id']}/grade", json={"score": 50}, headers=other_teacher)
    assert r.status_code == 403


def test_admin_grades_without_teacher_profile(client, admin_headers, classroom):
    sub = submit(client, classroom["student_headers"], classroom["assignment"]["id"]).json()
    r = client.put(f"/api/assignment-submissions/{sub['id']}/grade", json={"score": 61}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["grade_letter"] == "D"
    assert r.json()["graded_by"] is None


def test_submission_after_due_date_conflicts(client, classroom, make_assignment):
    late = make_assignment(classroom["teacher_headers"], classroom["course"]["id"], due_date=PAST)
    r = submit(client, classroom["student_headers"], late["id"])
    assert r.status_code == 409
    assert r.json()["detail"] == "Assignment is past its due date"


def test_submission_requires_enrollment(client, classroom, make_student):
    _, stranger = make_student()
    assert submit(client, stranger, classroom["assignment"]["id"]).status_code == 409


def test_submission_for_missing_assignment_is_not_found(client, classroom):
    assert submit(client, classroom["student_headers"], 999).status_code == 404


def test_student_edits_and_withdraws_own_submission(client, classroom, make_student):
    sub = submit(client, classroom["student_headers"], classroom["assignment"]["id"]).json()
    url = f"/api/assignment-submissions/{sub['id']}"
    assert client.put(url, json={"content": "revised"}, headers=classroom["student_headers"]).status_code == 204
    mine = client.get(
        f"/api/assignment-submissions/my-submission/{classroom['assignment']['id']}",
        headers=classroom["student_headers"],
    ).json()
    assert mine["content"] == "revised"
    assert mine["is_late"] is False

    _, stranger = make_student()
    assert client.put(url, json={"content": "vandalism"}, headers=stranger).status_code == 403
    assert client.delete(url, headers=stranger).status_code == 403
    assert client.delete(url, headers=classroom["student_headers"]).status_code == 204
    assert client.get(url, headers=classroom["teacher_headers"]).status_code == 404


def test_submission_visibility(client, admin_headers, classroom, make_student, make_teacher):
    sub = submit(client, classroom["student_headers"], classroom["assignment"]["id"]).json()
    url = f"/api/assignment-submissions/{sub['id']}"
    _, stranger = make_student()
    _, other_teacher = make_teacher()
    assert client.get(url, headers=classroom["teacher_headers"]).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 200
    assert client.get(url, headers=stranger).status_code == 403
    assert client.get(url, headers=other_teacher).status_code == 403


def test_teacher_listing_is_scoped_to_own_courses(client, admin_headers, classroom, make_teacher):
    submit(client, classroom["student_headers"], classroom["assignment"]["id"])
    _, other_teacher = make_teacher()
    assert len(client.get("/api/assignment-submissions", headers=classroom["teacher_headers"]).json()) == 1
    assert client.get("/api/assignment-submissions", headers=other_teacher).json() == []
    assert len(client.get("/api/assignment-submissions", headers=admin_headers).json()) == 1
    by_assignment = client.get(
        f"/api/assignment-submissions/assignment/{classroom['assignment']['id']}",
        headers=other_teacher,
    )
    assert by_assignment.status_code == 403


def test_submission_is_locked_after_due_date_but_still_gradable(client, classroom):
    assignment_url = f"/api/assignments/{classroom['assignment']['id']}"
    sub = submit(client, classroom["student_headers"], classroom["assignment"]["id"]).json()
    url = f"/api/assignment-submissions/{sub['id']}"
    r = client.put(assignment_url, json={"due_date": PAST}, headers=classroom["teacher_headers"])
    assert r.status_code == 204

    r = client.put(url, json={"content": "too late"}, headers=classroom["student_headers"])
    assert r.status_code == 409
    assert r.json()["detail"] == "Assignment is past its due date"
    assert client.delete(url, headers=classroom["student_headers"]).status_code == 409

    r = client.put(f"{url}/grade", json={"score": 88}, headers=classroom["teacher_headers"])
    assert r.status_code == 200, r.text
    assert r.json()["grade_letter"] == "B"
    kept = client.get(url, headers=classroom["student_headers"]).json()
    assert kept["content"] == "my answer"
    assert kept["status"] == "Graded"
