import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.cache import cache
from app.core.constants import EventTypeEnum
from app.models.user import User
from app.schemas.achievement import Achievement
from app.schemas.activity import (
    ActivityResult,
    FeedbackCreate,
    LearningSession,
    QuizAttempt,
    QuizAttemptCreate,
    QuizAttemptResult,
    SearchLogCreate,
)
from app.schemas.response import APIResponse
from app.services.activity import activity_service
from app.services.event_dispatcher import event_dispatcher
from app.services.progress import progress_service
from app.utils import deps

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=APIResponse[LearningSession])
async def record_login(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    session = activity_service.record_login(db, user_id=current_user.id)
    await cache.invalidate_user_cache(current_user.id)
    event_dispatcher.dispatch_in_background(
        user_id=current_user.id,
        event_type=EventTypeEnum.DAILY_LOGIN,
        payload={"login_time": session.start_time},
    )
    return APIResponse(message="Login recorded successfully", data=LearningSession.model_validate(session))


@router.post("/quizzes/{quiz_id}/attempts", response_model=APIResponse[QuizAttemptResult])
async def submit_quiz_attempt(
    *,
    db: Session = Depends(deps.get_db),
    quiz_id: int,
    attempt_in: QuizAttemptCreate,
    current_user: User = Depends(deps.get_current_user)
):
    attempt = activity_service.record_quiz_attempt(db, user_id=current_user.id, quiz_id=quiz_id, attempt_in=attempt_in)
    achievements = await event_dispatcher.handle_event(
        db,
        user_id=current_user.id,
        event_type=EventTypeEnum.QUIZ_COMPLETED,
        payload={"quiz_id": quiz_id, "is_correct": attempt.is_correct, "time_spent": attempt.time_spent},
    )
    return APIResponse(
        message="Quiz attempt recorded successfully",
        data=QuizAttemptResult(
            attempt=QuizAttempt.model_validate(attempt),
            achievements=[Achievement.model_validate(a) for a in achievements]
        )
    )


@router.post("/searches", response_model=APIResponse[ActivityResult])
async def record_search(
    *,
    db: Session = Depends(deps.get_db),
    search_in: SearchLogCreate,
    current_user: User = Depends(deps.get_current_user)
):
    activity_service.record_search(db, user_id=current_user.id, search_in=search_in)
    achievements = await event_dispatcher.handle_event(
        db, user_id=current_user.id, event_type=EventTypeEnum.SEARCH_USED, payload={}
    )
    return APIResponse(
        message="Search recorded successfully",
        data=ActivityResult(achievements=[Achievement.model_validate(a) for a in achievements])
    )


@router.post("/feedback", response_model=APIResponse[ActivityResult])
async def submit_feedback(
    *,
    db: Session = Depends(deps.get_db),
    feedback_in: FeedbackCreate,
    current_user: User = Depends(deps.get_current_user)
):
    logger.info(f"Feedback received from user {current_user.id} (lesson={feedback_in.lesson_id})")
    achievements = await event_dispatcher.handle_event(
        db,
        user_id=current_user.id,
        event_type=EventTypeEnum.FEEDBACK_SUBMITTED,
        payload={"feedback_submitted": True, "lesson_id": feedback_in.lesson_id},
    )
    return APIResponse(
        message="Feedback submitted successfully",
        data=ActivityResult(achievements=[Achievement.model_validate(a) for a in achievements])
    )


@router.post("/lessons/{lesson_id}/review", response_model=APIResponse[ActivityResult])
async def review_lesson(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    lesson = progress_service.get_available_lesson(db, user_id=current_user.id, lesson_id=lesson_id)
    achievements = await event_dispatcher.handle_event(
        db, user_id=current_user.id, event_type=EventTypeEnum.LESSON_REVIEWED, payload={"lesson_id": lesson.id}
    )
    return APIResponse(
        message="Lesson review recorded successfully",
        data=ActivityResult(achievements=[Achievement.model_validate(a) for a in achievements])
    )
