from typing import List, Optional, Set
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.learning_progress import LearningProgress
from app.models.module import Module
from app.core.constants import ModuleCategoryEnum
from app.schemas.progress import LearningProgressCreate

class CRUDLearningProgress(CRUDBase[LearningProgress, LearningProgressCreate, LearningProgressCreate]):

    def _query_with_lessons(self, db: Session):
        return db.query(LearningProgress).options(selectinload(LearningProgress.lessons))

    def get_by_user_and_module(
        self, db: Session, *, user_id: int, module_id: int, for_update: bool = False
    ) -> Optional[LearningProgress]:
        query = db.query(LearningProgress).filter(
            LearningProgress.user_id == user_id,
            LearningProgress.module_id == module_id,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_by_user(self, db: Session, *, user_id: int) -> List[LearningProgress]:
        return self._query_with_lessons(db).filter(LearningProgress.user_id == user_id).all()

    def count_completed(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(func.count(LearningProgress.id))
            .filter(LearningProgress.user_id == user_id, LearningProgress.completed_at.isnot(None))
            .scalar()
        ) or 0

    def get_completed_module_ids(self, db: Session, *, user_id: int) -> Set[int]:
        rows = (
            db.query(LearningProgress.module_id)
            .filter(LearningProgress.user_id == user_id, LearningProgress.completed_at.isnot(None))
            .all()
        )
        return {row.module_id for row in rows}

    def get_completed_categories(self, db: Session, *, user_id: int) -> Set[ModuleCategoryEnum]:
        rows = (
            db.query(Module.category)
            .join(LearningProgress, LearningProgress.module_id == Module.id)
            .filter(LearningProgress.user_id == user_id, LearningProgress.completed_at.isnot(None))
            .distinct()
            .all()
        )
        return {row.category for row in rows}

learning_progress = CRUDLearningProgress(LearningProgress)
