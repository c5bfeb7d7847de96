from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from app.core.constants import ProgressStateEnum, ModuleCategoryEnum, DifficultyLevelEnum
from app.schemas.achievement import Achievement


class LessonProgressDelta(BaseModel):
    """Partial update of a lesson row; unset fields keep their stored value."""
    model_config = ConfigDict(extra="forbid")

    progress: Optional[float] = Field(None, ge=0, le=1)
    completed: Optional[bool] = None
    time_spent_delta: Optional[int] = Field(None, ge=0, description="Minutes added to the stored total")
    score: Optional[float] = Field(None, ge=0, le=100)
    last_accessed: Optional[datetime] = None


class LessonProgressCreate(BaseModel):
    progress_id: int
    lesson_id: int


class LessonProgress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lesson_id: int
    completed: bool
    time_spent: int
    progress: float
    score: Optional[float] = None
    last_accessed: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class LearningProgressCreate(BaseModel):
    user_id: int
    module_id: int


class LearningProgress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    module_id: int
    time_spent: int
    score: Optional[float] = None
    completed_at: Optional[datetime] = None


class ModuleProgress(BaseModel):
    module_id: int
    state: ProgressStateEnum
    percentage: int
    completed_lessons: int
    total_lessons: int
    progress: LearningProgress
    lessons: List[LessonProgress]


class ModuleProgressSummary(BaseModel):
    module_id: int
    title: str
    category: ModuleCategoryEnum
    difficulty: DifficultyLevelEnum
    percentage: int
    time_spent: int
    score: Optional[float] = None
    completed: bool
    completed_at: Optional[datetime] = None


class ProgressSummary(BaseModel):
    modules: List[ModuleProgressSummary]
    completed_modules: int
    total_modules: int
    completed_lessons: int
    total_time_spent: int


class LessonEventResult(BaseModel):
    module: ModuleProgress
    achievements: List[Achievement] = []


class StreakInfo(BaseModel):
    current_streak: int
    longest_streak: int
    total_sessions: int


class LessonCompletionRequest(BaseModel):
    time_spent: int = Field(0, ge=0, description="Minutes spent on the lesson in this sitting")
