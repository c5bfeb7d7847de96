from pydantic import BaseModel, ConfigDict
from typing import Optional


class LessonBase(BaseModel):
    title: str
    content: Optional[str] = None
    order: int = 0
    estimated_time: int = 0
    module_id: int


class LessonCreate(LessonBase):
    pass


class LessonUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    order: Optional[int] = None
    estimated_time: Optional[int] = None


class Lesson(LessonBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
