import logging
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud.achievement import achievement as crud_achievement
from app.models.achievement import Achievement
from app.services.achievement_catalog import AchievementCatalog, default_catalog

logger = logging.getLogger(__name__)


class AchievementLedger:
    def __init__(self, catalog: AchievementCatalog = default_catalog):
        self.catalog = catalog

    def _insert_if_absent(self, db: Session, *, user_id: int, achievement_type: str, unlocked_at: datetime):
        if crud_achievement.exists(db, user_id=user_id, type=achievement_type):
            logger.info(f"Achievement {achievement_type} already unlocked for user {user_id}")
            return None

        definition = self.catalog.get(achievement_type)
        try:
            with db.begin_nested():
                return crud_achievement.create(
                    db,
                    obj_in={
                        "user_id": user_id,
                        "type": definition.type,
                        "title": definition.title,
                        "description": definition.description,
                        "icon": definition.icon,
                        "points": definition.points,
                        "unlocked_at": unlocked_at,
                    },
                    commit=False,
                )
        except IntegrityError:
            logger.info(f"Achievement {achievement_type} for user {user_id} was unlocked concurrently")
            return None

    def unlock_eligible(self, db: Session, *, user_id: int, candidate_ids: Iterable[str]) -> List[Achievement]:
        """Persist the candidates the user does not hold yet and return only those rows."""
        candidates = set(candidate_ids)
        unknown = candidates.difference(self.catalog.types())
        if unknown:
            logger.warning(f"Ignoring unknown achievement types for user {user_id}: {sorted(unknown)}")

        already_unlocked = crud_achievement.get_unlocked_types(db, user_id=user_id)
        to_insert = [t for t in self.catalog.types() if t in candidates and t not in already_unlocked]
        if not to_insert:
            return []

        unlocked_at = datetime.now()
        inserted: List[Achievement] = []
        try:
            for achievement_type in to_insert:
                row = self._insert_if_absent(
                    db, user_id=user_id, achievement_type=achievement_type, unlocked_at=unlocked_at
                )
                if row is not None:
                    inserted.append(row)
            db.commit()
        except Exception:
            db.rollback()
            raise

        for row in inserted:
            db.refresh(row)
        if inserted:
            logger.info(f"Unlocked {[row.type for row in inserted]} for user {user_id}")
        return inserted

    def get_user_achievements(self, db: Session, *, user_id: int) -> List[Achievement]:
        return crud_achievement.get_by_user(db, user_id=user_id)

    def get_total_points(self, db: Session, *, user_id: int) -> int:
        return crud_achievement.total_points(db, user_id=user_id)


achievement_ledger = AchievementLedger()
