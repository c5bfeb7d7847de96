from datetime import datetime

import pytest

from app.models.learning_session import LearningSession
from app.models.lesson_progress import LessonProgress
from app.models.quiz_attempt import QuizAttempt
from app.models.search_log import SearchLog
from app.services.event_dispatcher import event_dispatcher


@pytest.fixture
def dispatched(monkeypatch):
    calls = []

    def record(**kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(event_dispatcher, "dispatch_in_background", record)
    return calls


def test_login_records_session_and_dispatches(client, db_session, student, auth_headers, dispatched):
    response = client.post("/activity/login", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == f"{student.id}-{datetime.now().date().isoformat()}"
    assert db_session.query(LearningSession).filter(LearningSession.user_id == student.id).count() == 1
    assert len(dispatched) == 1
    assert dispatched[0]["user_id"] == student.id
    assert dispatched[0]["event_type"] == "DAILY_LOGIN"


def test_second_login_same_day_reuses_session(client, db_session, student, auth_headers, dispatched):
    client.post("/activity/login", headers=auth_headers)
    client.post("/activity/login", headers=auth_headers)

    assert db_session.query(LearningSession).filter(LearningSession.user_id == student.id).count() == 1
    assert len(dispatched) == 2


def test_quiz_attempt(client, db_session, student, auth_headers):
    response = client.post(
        "/activity/quizzes/7/attempts", json={"answer": "PEEP 5", "is_correct": True, "time_spent": 40},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["attempt"]["quiz_id"] == 7
    assert [a["type"] for a in data["achievements"]] == ["PERFECT_QUIZ"]
    assert db_session.query(QuizAttempt).filter(QuizAttempt.user_id == student.id).count() == 1
    session = db_session.query(LearningSession).filter(LearningSession.user_id == student.id).one()
    assert session.quizzes_taken == 1


def test_wrong_quiz_answer_unlocks_nothing(client, auth_headers):
    response = client.post("/activity/quizzes/3/attempts", json={"is_correct": False}, headers=auth_headers)
    assert response.json()["data"]["achievements"] == []


def test_quiz_attempt_validation(client, auth_headers):
    response = client.post("/activity/quizzes/3/attempts", json={"answer": "A"}, headers=auth_headers)
    assert response.status_code == 422


def test_twentieth_search_unlocks_curious_searcher(client, db_session, student, auth_headers):
    for index in range(19):
        db_session.add(SearchLog(user_id=student.id, query=f"tidal volume {index}", results_count=2, created_at=datetime.now()))
    db_session.commit()

    response = client.post("/activity/searches", json={"query": "plateau pressure", "results_count": 4}, headers=auth_headers)

    assert response.status_code == 200
    assert [a["type"] for a in response.json()["data"]["achievements"]] == ["CURIOUS_SEARCHER"]


def test_feedback(client, auth_headers):
    response = client.post("/activity/feedback", json={"message": "More clinical cases please"}, headers=auth_headers)

    assert response.status_code == 200
    assert [a["type"] for a in response.json()["data"]["achievements"]] == ["FEEDBACK_CONTRIBUTOR"]


def test_empty_feedback_is_rejected(client, auth_headers):
    response = client.post("/activity/feedback", json={"message": ""}, headers=auth_headers)
    assert response.status_code == 422


def test_review_lesson(client, db_session, auth_headers, module_factory, days_ago):
    module = module_factory(lessons=10, estimated_time=5)
    for lesson in module.lessons:
        client.post(f"/progress/lessons/{lesson.id}/complete", headers=auth_headers)
    for row in db_session.query(LessonProgress).all():
        row.completed_at = days_ago(2)
    db_session.commit()
    for lesson in module.lessons:
        client.post(f"/progress/lessons/{lesson.id}/start", headers=auth_headers)

    response = client.post(f"/activity/lessons/{module.lessons[0].id}/review", headers=auth_headers)

    assert response.status_code == 200
    assert [a["type"] for a in response.json()["data"]["achievements"]] == ["REVIEWING_PRO"]


def test_review_unknown_lesson(client, auth_headers):
    response = client.post("/activity/lessons/555/review", headers=auth_headers)
    assert response.status_code == 404


def _progress(client, headers, achievement_type):
    data = client.get("/achievements/all", headers=headers).json()["data"]
    return next(item["progress"] for item in data["achievements"] if item["type"] == achievement_type)


def test_searches_refresh_cached_achievement_progress(client, auth_headers, enabled_cache):
    assert _progress(client, auth_headers, "CURIOUS_SEARCHER")["current"] == 0

    for query in ("peep", "fio2", "tidal volume"):
        client.post("/activity/searches", json={"query": query}, headers=auth_headers)

    assert _progress(client, auth_headers, "CURIOUS_SEARCHER")["current"] == 3


def test_quiz_attempts_refresh_cached_achievement_progress(client, auth_headers, enabled_cache):
    assert _progress(client, auth_headers, "FIVE_PERFECT_QUIZZES")["current"] == 0

    for quiz_id in (1, 2):
        client.post(f"/activity/quizzes/{quiz_id}/attempts", json={"is_correct": True}, headers=auth_headers)

    assert _progress(client, auth_headers, "FIVE_PERFECT_QUIZZES")["current"] == 2


def test_login_refreshes_cached_achievement_progress(client, auth_headers, enabled_cache, dispatched):
    assert _progress(client, auth_headers, "DEDICATED_STUDENT")["current"] == 0

    client.post("/activity/login", headers=auth_headers)

    assert _progress(client, auth_headers, "DEDICATED_STUDENT")["current"] == 1
