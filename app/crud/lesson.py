from typing import Any, List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.lesson import Lesson
from app.schemas.lesson import LessonCreate, LessonUpdate

class CRUDLesson(CRUDBase[Lesson, LessonCreate, LessonUpdate]):
    def get(self, db: Session, id: Any) -> Optional[Lesson]:
        return (
            db.query(Lesson)
            .options(selectinload(Lesson.module))
            .filter(Lesson.id == id)
            .first()
        )

    def get_by_module(self, db: Session, *, module_id: int) -> List[Lesson]:
        return db.query(Lesson).filter(Lesson.module_id == module_id).order_by(Lesson.order, Lesson.id).all()

lesson = CRUDLesson(Lesson)
