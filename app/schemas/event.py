from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime
from app.core.constants import ModuleCategoryEnum, DifficultyLevelEnum


class EventPayload(BaseModel):
    """Trigger context handed to the rule evaluator; unknown keys are kept."""
    model_config = ConfigDict(extra="allow")

    lesson_id: Optional[int] = None
    module_id: Optional[int] = None
    quiz_id: Optional[int] = None
    is_correct: Optional[bool] = None
    time_spent: Optional[int] = None
    login_time: Optional[datetime] = None
    feedback_submitted: bool = False

    module_completed: bool = False
    module_category: Optional[ModuleCategoryEnum] = None
    module_difficulty: Optional[DifficultyLevelEnum] = None
    total_modules_completed: Optional[int] = None
