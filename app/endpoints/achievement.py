from typing import Dict, List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.decorators import cache_endpoint
from app.models.user import User
from app.schemas.achievement import (
    Achievement,
    AchievementCheckRequest,
    AchievementCheckResult,
    AchievementOverview,
)
from app.schemas.response import APIResponse
from app.services.achievement import achievement_service
from app.services.achievement_ledger import achievement_ledger
from app.services.event_dispatcher import event_dispatcher
from app.utils import deps

router = APIRouter()


@router.get("/", response_model=APIResponse[List[Achievement]])
async def get_user_achievements(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    achievements = achievement_ledger.get_user_achievements(db, user_id=current_user.id)
    return APIResponse(
        message="Achievements retrieved successfully",
        data=[Achievement.model_validate(a) for a in achievements]
    )


@router.get("/all", response_model=APIResponse[AchievementOverview])
@cache_endpoint(ttl=300, key_prefix="achievements_all")
async def get_all_achievements(
    *,
    request: Request,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    overview = achievement_service.get_all_with_status(db, user_id=current_user.id)
    return APIResponse(message="Achievement catalog retrieved successfully", data=overview)


@router.get("/points", response_model=APIResponse[Dict[str, int]])
async def get_total_points(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    points = achievement_ledger.get_total_points(db, user_id=current_user.id)
    return APIResponse(message="Achievement points retrieved successfully", data={"total_points": points})


@router.post("/check", response_model=APIResponse[AchievementCheckResult])
async def check_achievements(
    *,
    db: Session = Depends(deps.get_db),
    check_in: AchievementCheckRequest,
    current_user: User = Depends(deps.get_current_user)
):
    unlocked = await event_dispatcher.handle_event(
        db, user_id=current_user.id, event_type=check_in.event_type, payload=check_in.payload
    )
    return APIResponse(
        message=f"{len(unlocked)} new achievements unlocked",
        data=AchievementCheckResult(
            event_type=check_in.event_type,
            new_achievements=[Achievement.model_validate(a) for a in unlocked]
        )
    )
