import logging
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple, Union

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    AchievementCategoryEnum as Category,
    DifficultyLevelEnum,
    EventTypeEnum,
    ModuleCategoryEnum,
    UserLevelEnum,
)
from app.crud.learning_progress import learning_progress as crud_learning_progress
from app.crud.learning_session import learning_session as crud_session
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.crud.module import module as crud_module
from app.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt
from app.crud.search_log import search_log as crud_search_log
from app.crud.user import user as crud_user
from app.schemas.achievement import AchievementProgress
from app.schemas.event import EventPayload
from app.services.achievement_catalog import AchievementCatalog, AchievementDefinition, default_catalog
from app.services.streak import compute_streak

logger = logging.getLogger(__name__)

MetricCollector = Callable[[Session, int, EventPayload], Dict[str, int]]

EVENT_CATEGORIES: Mapping[EventTypeEnum, Tuple[Category, ...]] = MappingProxyType({
    EventTypeEnum.LESSON_COMPLETED: (Category.INITIAL, Category.PROGRESS, Category.CONSISTENCY),
    EventTypeEnum.LESSON_ACCESSED: (Category.INITIAL,),
    EventTypeEnum.MODULE_COMPLETED: (Category.INITIAL, Category.PROGRESS, Category.EXCELLENCE),
    EventTypeEnum.QUIZ_COMPLETED: (Category.EXCELLENCE,),
    EventTypeEnum.DAILY_LOGIN: (Category.CONSISTENCY,),
    EventTypeEnum.SEARCH_USED: (Category.SPECIAL,),
    EventTypeEnum.FEEDBACK_SUBMITTED: (Category.SPECIAL,),
    EventTypeEnum.LESSON_REVIEWED: (Category.SPECIAL,),
})

MODULE_CATEGORY_METRICS: Mapping[ModuleCategoryEnum, str] = MappingProxyType({
    ModuleCategoryEnum.FUNDAMENTALS: "fundamentals_completed",
    ModuleCategoryEnum.VENTILATION_PRINCIPLES: "ventilation_completed",
    ModuleCategoryEnum.CLINICAL_APPLICATIONS: "clinical_completed",
    ModuleCategoryEnum.ADVANCED_TECHNIQUES: "advanced_techniques_completed",
})

TIER_METRICS: Mapping[DifficultyLevelEnum, str] = MappingProxyType({
    DifficultyLevelEnum.BEGINNER: "beginner_mastered",
    DifficultyLevelEnum.INTERMEDIATE: "intermediate_mastered",
    DifficultyLevelEnum.ADVANCED: "advanced_mastered",
})


def collect_initial_metrics(db: Session, user_id: int, payload: EventPayload) -> Dict[str, int]:
    return {
        "completed_lessons": crud_lesson_progress.count_completed(db, user_id=user_id),
        "completed_modules": crud_learning_progress.count_completed(db, user_id=user_id),
        "accessed_lessons": crud_lesson_progress.count_accessed(db, user_id=user_id),
    }


def collect_progress_metrics(db: Session, user_id: int, payload: EventPayload) -> Dict[str, int]:
    completed_categories = crud_learning_progress.get_completed_categories(db, user_id=user_id)
    metrics = {
        "completed_lessons": crud_lesson_progress.count_completed(db, user_id=user_id),
        "completed_modules": crud_learning_progress.count_completed(db, user_id=user_id),
    }
    for module_category, metric in MODULE_CATEGORY_METRICS.items():
        metrics[metric] = int(module_category in completed_categories)
    return metrics


def collect_consistency_metrics(db: Session, user_id: int, payload: EventPayload) -> Dict[str, int]:
    start_times = crud_session.get_start_times(db, user_id=user_id)
    return {
        "current_streak": compute_streak(start_times),
        "morning_sessions": sum(1 for ts in start_times if ts.hour < settings.MORNING_CUTOFF_HOUR),
        "night_sessions": sum(1 for ts in start_times if ts.hour >= settings.NIGHT_CUTOFF_HOUR),
        "total_sessions": len(start_times),
    }


def quiz_run_window(catalog: AchievementCatalog = default_catalog) -> int:
    """Number of recent attempts inspected for a run of correct answers."""
    return max(
        (d.threshold for d in catalog if d.metric == "consecutive_perfect_quizzes"),
        default=1,
    )


def _consecutive_correct(db: Session, user_id: int) -> int:
    window = quiz_run_window()
    run = 0
    for attempt in crud_quiz_attempt.get_recent_by_user(db, user_id=user_id, limit=window):
        if not attempt.is_correct:
            break
        run += 1
    return run


def collect_excellence_metrics(db: Session, user_id: int, payload: EventPayload) -> Dict[str, int]:
    completed_ids = crud_learning_progress.get_completed_module_ids(db, user_id=user_id)
    metrics = {
        "perfect_quizzes": crud_quiz_attempt.count_perfect_quizzes(db, user_id=user_id),
        "consecutive_perfect_quizzes": _consecutive_correct(db, user_id),
        "fast_lessons": crud_lesson_progress.count_completed_under_estimate(db, user_id=user_id),
    }

    for tier, metric in TIER_METRICS.items():
        tier_ids = set(crud_module.get_active_ids(db, difficulty=tier))
        metrics[metric] = int(bool(tier_ids) and tier_ids <= completed_ids)

    active_ids = set(crud_module.get_active_ids(db))
    complete_knowledge = bool(active_ids) and active_ids <= completed_ids
    metrics["complete_knowledge"] = int(complete_knowledge)

    user = crud_user.get(db, id=user_id)
    metrics["master_level"] = int(
        complete_knowledge and user is not None and user.level == UserLevelEnum.ADVANCED
    )
    return metrics


def collect_special_metrics(db: Session, user_id: int, payload: EventPayload) -> Dict[str, int]:
    return {
        "reviewed_lessons": crud_lesson_progress.count_reviewed(
            db, user_id=user_id, min_gap=timedelta(hours=settings.REVIEW_GAP_HOURS)
        ),
        "searches": crud_search_log.count_by_user(db, user_id=user_id),
        "feedback_submitted": int(payload.feedback_submitted),
    }


CATEGORY_COLLECTORS: Mapping[Category, MetricCollector] = MappingProxyType({
    Category.INITIAL: collect_initial_metrics,
    Category.PROGRESS: collect_progress_metrics,
    Category.CONSISTENCY: collect_consistency_metrics,
    Category.EXCELLENCE: collect_excellence_metrics,
    Category.SPECIAL: collect_special_metrics,
})


def is_satisfied(definition: AchievementDefinition, metrics: Dict[str, int]) -> bool:
    return metrics.get(definition.metric, 0) >= definition.threshold


def calculate_progress(value: int, target: int) -> AchievementProgress:
    percentage = min(100, round(value / target * 100)) if target > 0 else 100
    return AchievementProgress(current=min(value, target), target=target, percentage=percentage)


class AchievementRuleEvaluator:
    def __init__(
        self,
        catalog: AchievementCatalog = default_catalog,
        collectors: Mapping[Category, MetricCollector] = CATEGORY_COLLECTORS,
        event_categories: Mapping[EventTypeEnum, Tuple[Category, ...]] = EVENT_CATEGORIES,
    ):
        self.catalog = catalog
        self.collectors = collectors
        self.event_categories = event_categories

    def categories_for(self, event_type: EventTypeEnum, payload: EventPayload) -> List[Category]:
        categories = list(self.event_categories.get(event_type, ()))
        if payload.module_completed and event_type != EventTypeEnum.MODULE_COMPLETED:
            for category in self.event_categories.get(EventTypeEnum.MODULE_COMPLETED, ()):
                if category not in categories:
                    categories.append(category)
        return categories

    def collect(self, db: Session, *, user_id: int, category: Category, payload: EventPayload) -> Optional[Dict[str, int]]:
        collector = self.collectors.get(category)
        if collector is None:
            logger.warning(f"No metric collector registered for category {category.value}")
            return None
        try:
            with db.begin_nested():
                return collector(db, user_id, payload)
        except Exception as e:
            logger.error(
                f"Achievement category {category.value} failed for user {user_id}: {e}",
                exc_info=True,
            )
            return None

    def evaluate(
        self,
        db: Session,
        *,
        user_id: int,
        event_type: Union[EventTypeEnum, str],
        payload: Union[EventPayload, Dict[str, Any], None] = None,
    ) -> Set[str]:
        """Return every catalog id whose condition currently holds for the user.

        Previously unlocked ids are included; filtering them is the ledger's job.
        """
        event_type = EventTypeEnum(event_type)
        if not isinstance(payload, EventPayload):
            payload = EventPayload.model_validate(payload or {})

        satisfied: Set[str] = set()
        for category in self.categories_for(event_type, payload):
            metrics = self.collect(db, user_id=user_id, category=category, payload=payload)
            if metrics is None:
                continue
            logger.debug(f"Metrics for user {user_id} in {category.value}: {metrics}")
            for definition in self.catalog.by_category(category):
                if is_satisfied(definition, metrics):
                    satisfied.add(definition.type)

        logger.info(f"Event {event_type.value} for user {user_id} satisfies {sorted(satisfied)}")
        return satisfied

    def progress_for_user(self, db: Session, *, user_id: int) -> Dict[str, AchievementProgress]:
        """Progress toward every counted achievement, read only."""
        payload = EventPayload()
        progress: Dict[str, AchievementProgress] = {}
        for category in Category:
            definitions = [d for d in self.catalog.by_category(category) if d.threshold > 1]
            if not definitions:
                continue
            metrics = self.collect(db, user_id=user_id, category=category, payload=payload)
            if metrics is None:
                continue
            for definition in definitions:
                progress[definition.type] = calculate_progress(metrics.get(definition.metric, 0), definition.threshold)
        return progress


achievement_rule_evaluator = AchievementRuleEvaluator()
