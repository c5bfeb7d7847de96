from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.core.constants import ProgressStateEnum
from app.crud.learning_progress import learning_progress as crud_learning_progress
from app.models.learning_progress import LearningProgress
from app.models.lesson_progress import LessonProgress
from app.services.progress import (
    are_all_lessons_completed,
    calculate_average_score,
    calculate_module_progress_percentage,
    progress_service,
)


def _rows(db_session, user_id):
    return (
        db_session.query(LessonProgress)
        .join(LearningProgress, LessonProgress.progress_id == LearningProgress.id)
        .filter(LearningProgress.user_id == user_id)
        .all()
    )


def _assert_aggregate_consistent(db_session, learning_progress, module):
    rows = _rows(db_session, learning_progress.user_id)
    assert learning_progress.time_spent == sum(row.time_spent for row in rows)
    all_done = {lesson.id for lesson in module.lessons} <= {row.lesson_id for row in rows if row.completed}
    assert (learning_progress.completed_at is not None) == all_done


def test_percentage_rounds_half_up():
    assert calculate_module_progress_percentage(0, 0) == 0
    assert calculate_module_progress_percentage(1, 3) == 33
    assert calculate_module_progress_percentage(2, 3) == 67
    assert calculate_module_progress_percentage(1, 8) == 13
    assert calculate_module_progress_percentage(3, 3) == 100


def test_average_score_ignores_missing_scores():
    rows = [LessonProgress(score=80.0), LessonProgress(score=None), LessonProgress(score=91.0)]
    assert calculate_average_score(rows) == 85.5
    assert calculate_average_score([LessonProgress(score=None)]) is None


def test_module_without_lessons_is_never_complete():
    assert are_all_lessons_completed([], []) is False


def test_first_update_creates_aggregate_lazily(db_session, student, module_factory):
    module = module_factory(lessons=3)
    lesson = module.lessons[0]

    assert crud_learning_progress.get_by_user_and_module(db_session, user_id=student.id, module_id=module.id) is None

    learning_progress, rows = progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=lesson.id, delta={"progress": 0.4, "time_spent_delta": 7}
    )

    assert learning_progress.module_id == module.id
    assert learning_progress.time_spent == 7
    assert learning_progress.completed_at is None
    assert len(rows) == 1
    assert rows[0].progress == 0.4
    assert rows[0].completed is False
    assert rows[0].last_accessed is not None


def test_time_spent_is_additive(db_session, student, module_factory):
    module = module_factory(lessons=2)
    lesson = module.lessons[0]

    for minutes in (5, 3, 0, 12):
        learning_progress, _ = progress_service.update_lesson_progress(
            db_session, user_id=student.id, lesson_id=lesson.id, delta={"time_spent_delta": minutes}
        )

    assert learning_progress.time_spent == 20
    _assert_aggregate_consistent(db_session, learning_progress, module)


def test_unset_fields_are_preserved(db_session, student, module_factory):
    module = module_factory(lessons=2)
    lesson = module.lessons[0]

    progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=lesson.id, delta={"progress": 0.5, "score": 72.0}
    )
    _, rows = progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=lesson.id, delta={"time_spent_delta": 4}
    )

    assert rows[0].progress == 0.5
    assert rows[0].score == 72.0
    assert rows[0].time_spent == 4


def test_explicit_last_accessed_is_used(db_session, student, module_factory):
    module = module_factory(lessons=1)
    accessed = datetime(2026, 1, 2, 8, 30)

    _, rows = progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=module.lessons[0].id, delta={"last_accessed": accessed}
    )

    assert rows[0].last_accessed == accessed


def test_completing_every_lesson_completes_module(db_session, student, module_factory, complete_lessons):
    module = module_factory(lessons=3)
    complete_lessons(student, module.lessons[:2])

    learning_progress = crud_learning_progress.get_by_user_and_module(
        db_session, user_id=student.id, module_id=module.id
    )
    assert learning_progress.completed_at is None

    complete_lessons(student, module.lessons[2:])
    db_session.refresh(learning_progress)

    assert learning_progress.completed_at is not None
    assert learning_progress.time_spent == 30
    _assert_aggregate_consistent(db_session, learning_progress, module)


def test_first_completion_timestamp_is_kept(db_session, student, module_factory, complete_lessons):
    module = module_factory(lessons=1)
    lesson = module.lessons[0]
    complete_lessons(student, [lesson])
    learning_progress = crud_learning_progress.get_by_user_and_module(
        db_session, user_id=student.id, module_id=module.id
    )
    first_completed_at = learning_progress.completed_at
    lesson_completed_at = _rows(db_session, student.id)[0].completed_at

    complete_lessons(student, [lesson])
    db_session.refresh(learning_progress)

    assert learning_progress.completed_at == first_completed_at
    assert _rows(db_session, student.id)[0].completed_at == lesson_completed_at
    assert learning_progress.time_spent == 20


def test_reopening_a_lesson_clears_module_completion(db_session, student, module_factory, complete_lessons):
    module = module_factory(lessons=2)
    complete_lessons(student, module.lessons)

    learning_progress, _ = progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=module.lessons[1].id, delta={"completed": False, "progress": 0.5}
    )

    assert learning_progress.completed_at is None
    _assert_aggregate_consistent(db_session, learning_progress, module)


def test_aggregate_score_is_average_of_scored_lessons(db_session, student, module_factory):
    module = module_factory(lessons=3)
    progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=module.lessons[0].id, delta={"score": 90}
    )
    learning_progress, _ = progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=module.lessons[1].id, delta={"score": 75}
    )
    progress_service.update_lesson_progress(
        db_session, user_id=student.id, lesson_id=module.lessons[2].id, delta={"time_spent_delta": 2}
    )
    db_session.refresh(learning_progress)

    assert learning_progress.score == 82.5


def test_unknown_lesson_is_rejected(db_session, student):
    with pytest.raises(HTTPException) as exc_info:
        progress_service.update_lesson_progress(db_session, user_id=student.id, lesson_id=9999, delta={})
    assert exc_info.value.status_code == 404


@pytest.mark.parametrize("delta", [
    {"progress": 1.5},
    {"progress": -0.1},
    {"time_spent_delta": -3},
    {"score": 101},
    {"unexpected": True},
])
def test_invalid_delta_is_rejected_without_writes(db_session, student, module_factory, delta):
    module = module_factory(lessons=1)

    with pytest.raises(HTTPException) as exc_info:
        progress_service.update_lesson_progress(
            db_session, user_id=student.id, lesson_id=module.lessons[0].id, delta=delta
        )

    assert exc_info.value.status_code == 422
    assert _rows(db_session, student.id) == []


def test_progress_is_tracked_per_user(db_session, user_factory, module_factory, complete_lessons):
    module = module_factory(lessons=1)
    first, second = user_factory(), user_factory()
    complete_lessons(first, module.lessons)

    assert crud_learning_progress.count_completed(db_session, user_id=first.id) == 1
    assert crud_learning_progress.count_completed(db_session, user_id=second.id) == 0


def test_get_module_progress_reports_state(db_session, student, module_factory, complete_lessons):
    module = module_factory(lessons=3)

    untouched = progress_service.get_module_progress(db_session, user_id=student.id, module_id=module.id)
    assert untouched.state == ProgressStateEnum.NOT_STARTED
    assert untouched.percentage == 0
    assert untouched.total_lessons == 3

    complete_lessons(student, module.lessons[:1])
    started = progress_service.get_module_progress(db_session, user_id=student.id, module_id=module.id)
    assert started.state == ProgressStateEnum.IN_PROGRESS
    assert started.percentage == 33
    assert started.completed_lessons == 1

    complete_lessons(student, module.lessons[1:])
    done = progress_service.get_module_progress(db_session, user_id=student.id, module_id=module.id)
    assert done.state == ProgressStateEnum.COMPLETED
    assert done.percentage == 100


def test_get_module_progress_for_unknown_module(db_session, student):
    with pytest.raises(HTTPException) as exc_info:
        progress_service.get_module_progress(db_session, user_id=student.id, module_id=4242)
    assert exc_info.value.status_code == 404


def test_progress_summary_lists_active_modules(db_session, student, module_factory, complete_lessons):
    first = module_factory(lessons=2)
    second = module_factory(lessons=4)
    module_factory(lessons=1, is_active=False)
    complete_lessons(student, first.lessons)
    complete_lessons(student, second.lessons[:1], minutes=5)

    summary = progress_service.get_progress_summary(db_session, user_id=student.id)

    assert summary.total_modules == 2
    assert summary.completed_modules == 1
    assert summary.completed_lessons == 3
    assert summary.total_time_spent == 25
    by_id = {item.module_id: item for item in summary.modules}
    assert by_id[first.id].completed is True
    assert by_id[second.id].percentage == 25


def test_prerequisites_gate_lessons(db_session, student, module_factory, complete_lessons):
    basics = module_factory(lessons=1)
    advanced = module_factory(lessons=1, prerequisites=[basics])

    with pytest.raises(HTTPException) as exc_info:
        progress_service.get_available_lesson(db_session, user_id=student.id, lesson_id=advanced.lessons[0].id)
    assert exc_info.value.status_code == 403

    complete_lessons(student, basics.lessons)
    lesson = progress_service.get_available_lesson(db_session, user_id=student.id, lesson_id=advanced.lessons[0].id)
    assert lesson.id == advanced.lessons[0].id


def test_completed_at_is_not_in_the_future(db_session, student, module_factory, complete_lessons):
    module = module_factory(lessons=1)
    complete_lessons(student, module.lessons)
    learning_progress = crud_learning_progress.get_by_user_and_module(
        db_session, user_id=student.id, module_id=module.id
    )
    assert learning_progress.completed_at <= datetime.now() + timedelta(seconds=1)
