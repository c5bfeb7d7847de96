from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.cache import cache
from app.core.constants import EventTypeEnum
from app.core.decorators import cache_endpoint
from app.models.user import User
from app.schemas.achievement import Achievement
from app.schemas.progress import (
    LessonCompletionRequest,
    LessonEventResult,
    LessonProgressDelta,
    ModuleProgress,
    ProgressSummary,
    StreakInfo,
)
from app.schemas.response import APIResponse
from app.services.activity import activity_service
from app.services.event_dispatcher import event_dispatcher
from app.services.progress import progress_service
from app.utils import deps

router = APIRouter()


@router.post("/lessons/{lesson_id}", response_model=APIResponse[ModuleProgress])
async def update_lesson_progress(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    delta: LessonProgressDelta,
    current_user: User = Depends(deps.get_current_user)
):
    learning_progress, lessons = progress_service.update_lesson_progress(
        db, user_id=current_user.id, lesson_id=lesson_id, delta=delta
    )
    await cache.invalidate_user_cache(current_user.id)
    return APIResponse(
        message="Lesson progress updated successfully",
        data=progress_service.build_module_progress(db, learning_progress, lessons)
    )


@router.post("/lessons/{lesson_id}/start", response_model=APIResponse[LessonEventResult])
async def start_lesson(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    lesson = progress_service.get_available_lesson(db, user_id=current_user.id, lesson_id=lesson_id)
    activity_service.record_lesson_view(db, user_id=current_user.id)
    achievements = await event_dispatcher.handle_event(
        db,
        user_id=current_user.id,
        event_type=EventTypeEnum.LESSON_ACCESSED,
        payload={"lesson_id": lesson.id, "module_id": lesson.module_id},
    )
    module_progress = progress_service.get_module_progress(db, user_id=current_user.id, module_id=lesson.module_id)
    return APIResponse(
        message="Lesson started successfully",
        data=LessonEventResult(
            module=module_progress,
            achievements=[Achievement.model_validate(a) for a in achievements]
        )
    )


@router.post("/lessons/{lesson_id}/complete", response_model=APIResponse[LessonEventResult])
async def complete_lesson(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    completion: Optional[LessonCompletionRequest] = None,
    current_user: User = Depends(deps.get_current_user)
):
    lesson = progress_service.get_available_lesson(db, user_id=current_user.id, lesson_id=lesson_id)
    achievements = await event_dispatcher.handle_event(
        db,
        user_id=current_user.id,
        event_type=EventTypeEnum.LESSON_COMPLETED,
        payload={"lesson_id": lesson.id, "time_spent": completion.time_spent if completion else 0},
    )
    module_progress = progress_service.get_module_progress(db, user_id=current_user.id, module_id=lesson.module_id)
    return APIResponse(
        message="Lesson completed successfully",
        data=LessonEventResult(
            module=module_progress,
            achievements=[Achievement.model_validate(a) for a in achievements]
        )
    )


@router.get("/modules/{module_id}", response_model=APIResponse[ModuleProgress])
async def get_module_progress(
    *,
    db: Session = Depends(deps.get_db),
    module_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    module_progress = progress_service.get_module_progress(db, user_id=current_user.id, module_id=module_id)
    return APIResponse(message="Module progress retrieved successfully", data=module_progress)


@router.get("/summary", response_model=APIResponse[ProgressSummary])
@cache_endpoint(ttl=300, key_prefix="progress_summary")
async def get_progress_summary(
    *,
    request: Request,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    summary = progress_service.get_progress_summary(db, user_id=current_user.id)
    return APIResponse(message="Progress summary retrieved successfully", data=summary)


@router.get("/streak", response_model=APIResponse[StreakInfo])
async def get_streak(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    streak = activity_service.get_streak(db, user_id=current_user.id)
    return APIResponse(message="Streak retrieved successfully", data=streak)
