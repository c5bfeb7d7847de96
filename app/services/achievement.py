from typing import List

from sqlalchemy.orm import Session

from app.schemas.achievement import AchievementOverview, AchievementStatus
from app.services.achievement_catalog import AchievementCatalog, default_catalog
from app.services.achievement_ledger import AchievementLedger, achievement_ledger
from app.services.achievement_rules import AchievementRuleEvaluator, achievement_rule_evaluator


class AchievementService:
    def __init__(
        self,
        catalog: AchievementCatalog = default_catalog,
        ledger: AchievementLedger = achievement_ledger,
        evaluator: AchievementRuleEvaluator = achievement_rule_evaluator,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.evaluator = evaluator

    def get_all_with_status(self, db: Session, *, user_id: int) -> AchievementOverview:
        unlocked = {a.type: a for a in self.ledger.get_user_achievements(db, user_id=user_id)}
        progress = self.evaluator.progress_for_user(db, user_id=user_id)

        statuses: List[AchievementStatus] = []
        for definition in self.catalog:
            row = unlocked.get(definition.type)
            statuses.append(AchievementStatus(
                type=definition.type,
                title=definition.title,
                description=definition.description,
                icon=definition.icon,
                points=definition.points,
                rarity=definition.rarity,
                category=definition.category,
                condition=definition.condition,
                unlocked=row is not None,
                unlocked_at=row.unlocked_at if row else None,
                progress=None if row else progress.get(definition.type),
            ))

        return AchievementOverview(
            achievements=statuses,
            unlocked_count=len(unlocked),
            total_count=len(self.catalog),
            total_points=sum(row.points for row in unlocked.values()),
        )


achievement_service = AchievementService()
