from app.models.learning_session import LearningSession


def test_requires_authentication(client, module_factory):
    module = module_factory(lessons=1)
    response = client.post(f"/progress/lessons/{module.lessons[0].id}", json={"progress": 0.5})
    assert response.status_code in (401, 403)


def test_rejects_invalid_token(client):
    response = client.get("/progress/summary", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_update_lesson_progress(client, auth_headers, module_factory):
    module = module_factory(lessons=2)
    lesson = module.lessons[0]

    response = client.post(
        f"/progress/lessons/{lesson.id}",
        json={"progress": 0.5, "time_spent_delta": 8, "score": 88},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["module_id"] == module.id
    assert data["state"] == "IN_PROGRESS"
    assert data["progress"]["time_spent"] == 8
    assert data["lessons"][0]["progress"] == 0.5
    assert data["lessons"][0]["score"] == 88


def test_update_with_out_of_range_progress(client, auth_headers, module_factory):
    module = module_factory(lessons=1)
    response = client.post(
        f"/progress/lessons/{module.lessons[0].id}", json={"progress": 2}, headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_update_unknown_lesson(client, auth_headers):
    response = client.post("/progress/lessons/999", json={"progress": 0.1}, headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_start_lesson_records_view(client, db_session, student, auth_headers, module_factory):
    module = module_factory(lessons=2)

    response = client.post(f"/progress/lessons/{module.lessons[0].id}/start", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["achievements"] == []
    assert data["module"]["state"] == "IN_PROGRESS"
    assert data["module"]["completed_lessons"] == 0
    session = db_session.query(LearningSession).filter(LearningSession.user_id == student.id).one()
    assert session.lessons_viewed == 1


def test_locked_lesson_cannot_be_completed(client, auth_headers, module_factory):
    basics = module_factory(lessons=1)
    advanced = module_factory(lessons=1, prerequisites=[basics])

    response = client.post(f"/progress/lessons/{advanced.lessons[0].id}/complete", headers=auth_headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_complete_lesson_without_body(client, auth_headers, module_factory):
    module = module_factory(lessons=1)

    response = client.post(f"/progress/lessons/{module.lessons[0].id}/complete", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["module"]["state"] == "COMPLETED"
    assert data["module"]["percentage"] == 100
    assert {a["type"] for a in data["achievements"]} >= {"FIRST_LESSON", "FIRST_MODULE"}


def test_get_module_progress(client, auth_headers, module_factory):
    module = module_factory(lessons=4)
    client.post(f"/progress/lessons/{module.lessons[0].id}/complete", headers=auth_headers)

    response = client.get(f"/progress/modules/{module.id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["percentage"] == 25
    assert data["total_lessons"] == 4


def test_get_unknown_module_progress(client, auth_headers):
    response = client.get("/progress/modules/31337", headers=auth_headers)
    assert response.status_code == 404


def test_progress_summary(client, auth_headers, module_factory):
    first = module_factory(lessons=1)
    module_factory(lessons=2)
    client.post(f"/progress/lessons/{first.lessons[0].id}/complete", json={"time_spent": 15}, headers=auth_headers)

    response = client.get("/progress/summary", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_modules"] == 2
    assert data["completed_modules"] == 1
    assert data["total_time_spent"] == 15


def test_streak(client, auth_headers, student, learning_session_factory, days_ago):
    learning_session_factory(student, [days_ago(0), days_ago(1), days_ago(5)])

    response = client.get("/progress/streak", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {"current_streak": 2, "longest_streak": 2, "total_sessions": 3}


def test_request_id_is_echoed(client, auth_headers):
    response = client.get("/progress/streak", headers={**auth_headers, "X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"


def test_request_id_is_generated(client):
    response = client.get("/health")
    assert response.headers["X-Request-ID"]
