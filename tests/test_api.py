from tests.factories import API, PASSWORD, SAMPLE_EXAM


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_take_exam_flow(client, signup, published_exam):
    student = signup()
    exam_id = published_exam["exam_id"]

    resp = client.get(f"{API}/exams/{exam_id}", headers=student["headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["attempt"]["status"] == "in-progress"
    assert body["exam"]["title"] == "Algebra basics"
    assert "is_correct" not in resp.text

    resumed = client.get(f"{API}/exams/{exam_id}", headers=student["headers"]).json()
    assert resumed["attempt"]["attempt_id"] == body["attempt"]["attempt_id"]

    resp = client.post(
        f"{API}/exams/{exam_id}/submit",
        json={"answers": {"q1": "o1", "q2": ["o3"]}},
        headers=student["headers"],
    )
    assert resp.status_code == 200
    assert resp.json() == {"result": {"score": 50.0, "totalQuestions": 2, "correctAnswers": 1}}

    resp = client.get(f"{API}/exams/{exam_id}", headers=student["headers"])
    assert resp.status_code == 400
    assert "already completed" in resp.json()["error"]

    resp = client.post(f"{API}/exams/{exam_id}/submit", json={"answers": {}}, headers=student["headers"])
    assert resp.status_code == 400
    assert resp.json() == {"error": "No active exam attempt found"}


def test_submit_without_starting(client, signup, published_exam):
    student = signup()
    resp = client.post(
        f"{API}/exams/{published_exam['exam_id']}/submit", json={"answers": {}}, headers=student["headers"]
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "No active exam attempt found"}


def test_unpublished_and_unknown_exams(client, signup):
    teacher = signup("teacher")
    student = signup()
    exam_id = client.post(f"{API}/exams", json=SAMPLE_EXAM, headers=teacher["headers"]).json()["exam_id"]

    resp = client.get(f"{API}/exams/{exam_id}", headers=student["headers"])
    assert resp.status_code == 404
    assert resp.json() == {"error": "Exam not found or not available"}

    resp = client.get(f"{API}/exams/does-not-exist", headers=student["headers"])
    assert resp.status_code == 404
    assert "error" in resp.json()


def test_authentication_errors(client, published_exam):
    exam_id = published_exam["exam_id"]

    resp = client.get(f"{API}/exams/{exam_id}")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"
    assert "error" in resp.json()

    resp = client.get(f"{API}/exams/{exam_id}", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid or expired token"}


def test_register_and_login_errors(client, signup):
    user = signup()["user"]
    body = {
        "name": "Someone Else",
        "email": user["email"],
        "national_id": "99999999",
        "password": PASSWORD,
    }

    resp = client.post(f"{API}/auth/register", json=body)
    assert resp.status_code == 409
    assert resp.json() == {"error": "Email already registered"}

    resp = client.post(
        f"{API}/auth/register", json={**body, "email": "else@school.edu", "national_id": user["national_id"]}
    )
    assert resp.status_code == 409

    resp = client.post(f"{API}/auth/register", json={**body, "email": "admin2@school.edu", "role": "admin"})
    assert resp.status_code == 403

    resp = client.post(f"{API}/auth/register", json={**body, "email": "short@school.edu", "national_id": "123"})
    assert resp.status_code == 400
    assert "national_id" in resp.json()["error"]

    resp = client.post(
        f"{API}/auth/login", json={"national_id": user["national_id"], "password": "wrong-password"}
    )
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials"}


def test_me_and_refresh(client, signup):
    student = signup()

    me = client.get(f"{API}/auth/me", headers=student["headers"])
    assert me.status_code == 200
    assert me.json()["user_id"] == student["user"]["user_id"]
    assert "password_hash" not in me.json()

    resp = client.post(f"{API}/auth/refresh", headers=student["headers"])
    assert resp.status_code == 200
    token = resp.json()["access_token"]
    assert client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200


def test_students_cannot_author(client, signup):
    student = signup()

    resp = client.post(f"{API}/exams", json=SAMPLE_EXAM, headers=student["headers"])
    assert resp.status_code == 403
    assert "error" in resp.json()

    assert client.get(f"{API}/exams/authored", headers=student["headers"]).status_code == 403


def test_invalid_exam_body(client, signup):
    teacher = signup("teacher")
    body = {**SAMPLE_EXAM, "questions": [{"text": "Pick", "type": "single_choice", "options": [{"text": "a"}]}]}

    resp = client.post(f"{API}/exams", json=body, headers=teacher["headers"])

    assert resp.status_code == 400
    assert "exactly one correct option" in resp.json()["error"]


def test_exam_listings(client, signup, published_exam):
    teacher = published_exam["teacher"]
    student = signup()
    exam_id = published_exam["exam_id"]

    authored = client.get(f"{API}/exams/authored", headers=teacher["headers"]).json()
    assert [e["exam_id"] for e in authored] == [exam_id]
    assert authored[0]["question_count"] == 2

    available = client.get(f"{API}/exams/available", headers=student["headers"]).json()
    assert [e["exam_id"] for e in available] == [exam_id]

    client.get(f"{API}/exams/{exam_id}", headers=student["headers"])
    client.post(f"{API}/exams/{exam_id}/submit", json={"answers": {}}, headers=student["headers"])

    assert client.get(f"{API}/exams/available", headers=student["headers"]).json() == []


def test_flags_belong_to_author(client, signup, published_exam):
    colleague = signup("teacher")
    exam_id = published_exam["exam_id"]

    resp = client.patch(f"{API}/exams/{exam_id}", json={"is_active": False}, headers=colleague["headers"])
    assert resp.status_code == 403

    resp = client.patch(f"{API}/exams/{exam_id}", json={}, headers=published_exam["teacher"]["headers"])
    assert resp.status_code == 400


def test_attempt_history_and_result(client, signup, published_exam, admin_headers):
    student = signup()
    stranger = signup()
    exam_id = published_exam["exam_id"]

    client.get(f"{API}/exams/{exam_id}", headers=student["headers"])
    client.post(
        f"{API}/exams/{exam_id}/submit",
        json={"answers": {"q1": "o1", "q2": "o3,o4"}},
        headers=student["headers"],
    )

    history = client.get(f"{API}/attempts", headers=student["headers"]).json()
    assert len(history) == 1
    assert history[0]["status"] == "completed"
    assert history[0]["score"] == 100.0
    assert history[0]["question_count"] == 2
    attempt_id = history[0]["attempt_id"]

    result = client.get(f"{API}/attempts/{attempt_id}", headers=student["headers"])
    assert result.status_code == 200
    assert [a["is_correct"] for a in result.json()["answers"]] == [True, True]

    teacher_view = client.get(f"{API}/attempts/{attempt_id}", headers=published_exam["teacher"]["headers"])
    assert teacher_view.status_code == 200
    assert client.get(f"{API}/attempts/{attempt_id}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/attempts/{attempt_id}", headers=stranger["headers"]).status_code == 403


def test_teacher_roster(client, signup):
    teacher = signup("teacher")
    student = signup()

    resp = client.post(
        f"{API}/teacher/students",
        json={"emails": [student["user"]["email"]], "national_ids": ["00000000"]},
        headers=teacher["headers"],
    )
    assert resp.status_code == 200
    assert resp.json() == {"added": 1, "skipped": 1}

    roster = client.get(f"{API}/teacher/students", headers=teacher["headers"]).json()
    assert [s["user_id"] for s in roster] == [student["user"]["user_id"]]

    assert client.get(f"{API}/teacher/students", headers=student["headers"]).status_code == 403


def test_exam_assignments(client, signup, published_exam):
    teacher = published_exam["teacher"]
    exam_id = published_exam["exam_id"]
    student = signup()
    outsider = signup()
    client.post(f"{API}/teacher/students", json={"emails": [student["user"]["email"]]}, headers=teacher["headers"])

    resp = client.post(
        f"{API}/exams/{exam_id}/assignments",
        json={
            "student_ids": [student["user"]["user_id"], outsider["user"]["user_id"]],
            "due_date": "2030-01-10T09:00:00Z",
        },
        headers=teacher["headers"],
    )
    assert resp.status_code == 200
    assert resp.json() == {"assigned": 1, "skipped": 1}

    resp = client.post(
        f"{API}/exams/{exam_id}/assignments", json={"student_ids": ["x"]}, headers=student["headers"]
    )
    assert resp.status_code == 403

    assigned = client.get(f"{API}/exams/assigned", headers=student["headers"]).json()
    assert [a["exam_id"] for a in assigned] == [exam_id]
    assert assigned[0]["due_date"].startswith("2030-01-10T09:00:00")
    assert assigned[0]["question_count"] == 2
    assert client.get(f"{API}/exams/assigned", headers=outsider["headers"]).json() == []

    client.get(f"{API}/exams/{exam_id}", headers=student["headers"])
    client.post(f"{API}/exams/{exam_id}/submit", json={"answers": {}}, headers=student["headers"])
    assert client.get(f"{API}/exams/assigned", headers=student["headers"]).json() == []

    progress = client.get(f"{API}/exams/{exam_id}/assignments", headers=teacher["headers"]).json()
    assert progress == [
        {
            "student_id": student["user"]["user_id"],
            "student_name": student["user"]["name"],
            "assigned_at": progress[0]["assigned_at"],
            "due_date": progress[0]["due_date"],
            "is_completed": True,
        }
    ]
    assert client.get(f"{API}/exams/{exam_id}/assignments", headers=student["headers"]).status_code == 403


def test_unknown_route_uses_error_body(client):
    resp = client.get(f"{API}/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}
