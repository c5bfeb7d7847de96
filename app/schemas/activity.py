from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from app.schemas.achievement import Achievement


class LearningSession(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: int
    start_time: datetime
    lessons_viewed: int
    quizzes_taken: int


class QuizAttemptCreate(BaseModel):
    answer: Optional[str] = None
    is_correct: bool
    time_spent: Optional[int] = Field(None, ge=0)


class QuizAttempt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    answer: Optional[str] = None
    is_correct: bool
    time_spent: Optional[int] = None
    attempted_at: datetime


class QuizAttemptResult(BaseModel):
    attempt: QuizAttempt
    achievements: List[Achievement] = []


class SearchLogCreate(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    results_count: int = Field(0, ge=0)


class FeedbackCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    lesson_id: Optional[int] = None


class ActivityResult(BaseModel):
    achievements: List[Achievement] = []
