from datetime import timedelta
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.lesson_progress import LessonProgress
from app.models.learning_progress import LearningProgress
from app.models.lesson import Lesson
from app.schemas.progress import LessonProgressCreate, LessonProgressDelta

class CRUDLessonProgress(CRUDBase[LessonProgress, LessonProgressCreate, LessonProgressDelta]):

    def _query_for_user(self, db: Session, user_id: int):
        return (
            db.query(LessonProgress)
            .join(LearningProgress, LessonProgress.progress_id == LearningProgress.id)
            .filter(LearningProgress.user_id == user_id)
        )

    def get_by_progress_and_lesson(self, db: Session, *, progress_id: int, lesson_id: int) -> Optional[LessonProgress]:
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.progress_id == progress_id, LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def get_all_by_progress(self, db: Session, *, progress_id: int) -> List[LessonProgress]:
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.progress_id == progress_id)
            .order_by(LessonProgress.id)
            .all()
        )

    def count_completed(self, db: Session, *, user_id: int) -> int:
        return self._query_for_user(db, user_id).filter(LessonProgress.completed == True).count()

    def count_accessed(self, db: Session, *, user_id: int) -> int:
        return (
            self._query_for_user(db, user_id)
            .with_entities(func.count(func.distinct(LessonProgress.lesson_id)))
            .scalar()
        ) or 0

    def count_completed_under_estimate(self, db: Session, *, user_id: int) -> int:
        return (
            self._query_for_user(db, user_id)
            .join(Lesson, Lesson.id == LessonProgress.lesson_id)
            .filter(
                LessonProgress.completed == True,
                LessonProgress.time_spent > 0,
                LessonProgress.time_spent < Lesson.estimated_time,
            )
            .count()
        )

    def count_reviewed(self, db: Session, *, user_id: int, min_gap: timedelta) -> int:
        rows = (
            self._query_for_user(db, user_id)
            .filter(
                LessonProgress.completed == True,
                LessonProgress.completed_at.isnot(None),
                LessonProgress.last_accessed.isnot(None),
            )
            .with_entities(LessonProgress.completed_at, LessonProgress.last_accessed)
            .all()
        )
        return sum(1 for row in rows if row.last_accessed - row.completed_at > min_gap)

lesson_progress = CRUDLessonProgress(LessonProgress)
