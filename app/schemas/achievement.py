from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from app.core.constants import AchievementCategoryEnum, AchievementRarityEnum, EventTypeEnum


class AchievementCreate(BaseModel):
    user_id: int
    type: str
    title: str
    description: str
    icon: Optional[str] = None
    points: int
    unlocked_at: datetime


class Achievement(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    description: str
    icon: Optional[str] = None
    points: int
    unlocked_at: datetime


class AchievementProgress(BaseModel):
    current: int
    target: int
    percentage: int


class AchievementStatus(BaseModel):
    type: str
    title: str
    description: str
    icon: str
    points: int
    rarity: AchievementRarityEnum
    category: AchievementCategoryEnum
    condition: str
    unlocked: bool
    unlocked_at: Optional[datetime] = None
    progress: Optional[AchievementProgress] = None


class AchievementOverview(BaseModel):
    achievements: List[AchievementStatus]
    unlocked_count: int
    total_count: int
    total_points: int


class AchievementCheckRequest(BaseModel):
    event_type: EventTypeEnum
    payload: Dict[str, Any] = Field(default_factory=dict)


class AchievementCheckResult(BaseModel):
    event_type: EventTypeEnum
    new_achievements: List[Achievement]
