from typing import List, Set
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.achievement import Achievement
from app.schemas.achievement import AchievementCreate

class CRUDAchievement(CRUDBase[Achievement, AchievementCreate, AchievementCreate]):
    def get_by_user(self, db: Session, *, user_id: int) -> List[Achievement]:
        return (
            db.query(Achievement)
            .filter(Achievement.user_id == user_id)
            .order_by(Achievement.unlocked_at.desc(), Achievement.id.desc())
            .all()
        )

    def get_unlocked_types(self, db: Session, *, user_id: int) -> Set[str]:
        rows = db.query(Achievement.type).filter(Achievement.user_id == user_id).all()
        return {row.type for row in rows}

    def exists(self, db: Session, *, user_id: int, type: str) -> bool:
        return (
            db.query(Achievement.id)
            .filter(Achievement.user_id == user_id, Achievement.type == type)
            .first()
        ) is not None

    def total_points(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(func.coalesce(func.sum(Achievement.points), 0))
            .filter(Achievement.user_id == user_id)
            .scalar()
        ) or 0

achievement = CRUDAchievement(Achievement)
