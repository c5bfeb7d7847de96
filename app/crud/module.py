from typing import Any, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.module import Module
from app.models.lesson import Lesson
from app.core.constants import DifficultyLevelEnum
from app.schemas.module import ModuleCreate, ModuleUpdate

class CRUDModule(CRUDBase[Module, ModuleCreate, ModuleUpdate]):
    def get(self, db: Session, id: Any) -> Optional[Module]:
        return (
            db.query(Module)
            .options(selectinload(Module.prerequisites))
            .filter(Module.id == id)
            .first()
        )

    def get_active(self, db: Session) -> List[Module]:
        return (
            db.query(Module)
            .filter(Module.is_active == True)
            .order_by(Module.order, Module.id)
            .all()
        )

    def get_active_ids(self, db: Session, *, difficulty: Optional[DifficultyLevelEnum] = None) -> List[int]:
        query = db.query(Module.id).filter(Module.is_active == True)
        if difficulty is not None:
            query = query.filter(Module.difficulty == difficulty)
        return [row.id for row in query.all()]

    def get_prerequisite_ids(self, db: Session, *, module_id: int) -> List[int]:
        module = self.get(db, id=module_id)
        return [prerequisite.id for prerequisite in module.prerequisites] if module else []

    def count_lessons(self, db: Session, *, module_id: int) -> int:
        return db.query(func.count(Lesson.id)).filter(Lesson.module_id == module_id).scalar() or 0

module = CRUDModule(Module)
