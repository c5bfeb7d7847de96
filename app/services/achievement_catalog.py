from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import (
    AchievementCategoryEnum as Category,
    AchievementRarityEnum as Rarity,
    AchievementTypeEnum as Type,
)


class AchievementDefinition(BaseModel):
    """Static description of one unlockable achievement.

    ``metric`` names the counter produced by the category collector and
    ``threshold`` is the value that counter must reach.
    """
    model_config = ConfigDict(frozen=True)

    type: str
    title: str
    description: str
    icon: str
    points: int
    rarity: Rarity
    category: Category
    condition: str
    metric: str
    threshold: int = Field(1, ge=1)


class AchievementCatalog:
    def __init__(self, definitions: Iterable[AchievementDefinition]):
        by_type = {}
        for definition in definitions:
            if definition.type in by_type:
                raise ValueError(f"Duplicate achievement definition: {definition.type}")
            by_type[definition.type] = definition
        self._definitions: Mapping[str, AchievementDefinition] = MappingProxyType(by_type)

    def __contains__(self, achievement_type: str) -> bool:
        return achievement_type in self._definitions

    def __iter__(self):
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, achievement_type: str) -> Optional[AchievementDefinition]:
        return self._definitions.get(achievement_type)

    def types(self) -> List[str]:
        return list(self._definitions)

    def by_category(self, category: Category) -> List[AchievementDefinition]:
        return [d for d in self._definitions.values() if d.category == category]

    def total_points(self) -> int:
        return sum(d.points for d in self._definitions.values())


def _define(type: Type, title, description, icon, points, rarity, category, condition, metric, threshold=1):
    return AchievementDefinition(
        type=type.value,
        title=title,
        description=description,
        icon=icon,
        points=points,
        rarity=rarity,
        category=category,
        condition=condition,
        metric=metric,
        threshold=threshold,
    )


DEFAULT_DEFINITIONS = (
    # Initial
    _define(Type.FIRST_LESSON, "First Lesson", "Complete your first lesson", "school",
            10, Rarity.COMMON, Category.INITIAL, "Complete 1 lesson", "completed_lessons"),
    _define(Type.FIRST_MODULE, "First Module", "Complete your first full learning module", "library_books",
            25, Rarity.COMMON, Category.INITIAL, "Complete 1 module", "completed_modules"),
    _define(Type.EXPLORING, "Curious Explorer", "Open 5 different lessons to get to know the content", "explore",
            15, Rarity.COMMON, Category.INITIAL, "Access 5 different lessons", "accessed_lessons", 5),

    # Progress
    _define(Type.LESSONS_10, "Dedicated Apprentice", "Complete 10 lessons in total", "emoji_events",
            30, Rarity.COMMON, Category.PROGRESS, "Complete 10 lessons", "completed_lessons", 10),
    _define(Type.LESSONS_25, "Committed Student", "Complete 25 lessons in total", "workspace_premium",
            50, Rarity.RARE, Category.PROGRESS, "Complete 25 lessons", "completed_lessons", 25),
    _define(Type.LESSONS_50, "Knowledge Master", "Complete 50 lessons in total", "military_tech",
            75, Rarity.EPIC, Category.PROGRESS, "Complete 50 lessons", "completed_lessons", 50),
    _define(Type.MODULE_COMPLETE, "Module Completed", "Complete any module of the course", "check_circle",
            20, Rarity.COMMON, Category.PROGRESS, "Complete any module", "completed_modules"),
    _define(Type.MODULE_FUNDAMENTALS, "Fundamentals Mastered", "Complete the mechanical ventilation fundamentals module", "foundation",
            35, Rarity.RARE, Category.PROGRESS, "Complete the Fundamentals module", "fundamentals_completed"),
    _define(Type.MODULE_VENTILATION, "Ventilation Expert", "Complete the ventilation principles module", "air",
            40, Rarity.RARE, Category.PROGRESS, "Complete the Ventilation module", "ventilation_completed"),
    _define(Type.MODULE_CLINICAL, "Clinical Application", "Complete the clinical applications module", "local_hospital",
            45, Rarity.RARE, Category.PROGRESS, "Complete the Clinical Applications module", "clinical_completed"),
    _define(Type.MODULE_ADVANCED, "Advanced Techniques", "Complete the advanced ventilation techniques module", "biotech",
            50, Rarity.RARE, Category.PROGRESS, "Complete the Advanced Techniques module", "advanced_techniques_completed"),

    # Consistency
    _define(Type.STREAK_3_DAYS, "Streak Starter", "Study for 3 consecutive days", "local_fire_department",
            20, Rarity.COMMON, Category.CONSISTENCY, "Study 3 consecutive days", "current_streak", 3),
    _define(Type.STREAK_7_DAYS, "Weekly Streak", "Keep a 7 day study streak", "local_fire_department",
            40, Rarity.RARE, Category.CONSISTENCY, "Study 7 consecutive days", "current_streak", 7),
    _define(Type.STREAK_30_DAYS, "Unstoppable Streak", "Keep a 30 day study streak", "whatshot",
            100, Rarity.EPIC, Category.CONSISTENCY, "Study 30 consecutive days", "current_streak", 30),
    _define(Type.MORNING_LEARNER, "Early Bird", "Study before 7:00 AM", "wb_sunny",
            25, Rarity.COMMON, Category.CONSISTENCY, "Study before 7:00 AM", "morning_sessions"),
    _define(Type.NIGHT_OWL, "Night Owl", "Study after 10:00 PM", "nightlight",
            25, Rarity.COMMON, Category.CONSISTENCY, "Study after 10:00 PM", "night_sessions"),
    _define(Type.DEDICATED_STUDENT, "Dedicated Student", "Show steady dedication to your learning", "volunteer_activism",
            50, Rarity.RARE, Category.CONSISTENCY, "Log 15 study sessions", "total_sessions", 15),

    # Excellence
    _define(Type.PERFECT_QUIZ, "Perfect Quiz", "Answer a quiz with 100% accuracy", "grade",
            20, Rarity.COMMON, Category.EXCELLENCE, "Score 100% on a quiz", "perfect_quizzes"),
    _define(Type.FIVE_PERFECT_QUIZZES, "Absolute Perfection", "Score 100% on 5 quizzes in a row", "stars",
            80, Rarity.EPIC, Category.EXCELLENCE, "Score 100% on 5 consecutive quizzes", "consecutive_perfect_quizzes", 5),
    _define(Type.SPEED_LEARNER, "Speed Learner", "Finish lessons faster than their estimated time", "flash_on",
            35, Rarity.RARE, Category.EXCELLENCE, "Finish 5 lessons under their estimated time", "fast_lessons", 5),
    _define(Type.ALL_BEGINNER, "Beginner Complete", "Complete every beginner level module", "school",
            60, Rarity.RARE, Category.EXCELLENCE, "Complete all beginner modules", "beginner_mastered"),
    _define(Type.ALL_INTERMEDIATE, "Intermediate Complete", "Complete every intermediate level module", "stars",
            75, Rarity.EPIC, Category.EXCELLENCE, "Complete all intermediate modules", "intermediate_mastered"),
    _define(Type.ALL_ADVANCED, "Advanced Complete", "Complete every advanced level module", "verified",
            90, Rarity.EPIC, Category.EXCELLENCE, "Complete all advanced modules", "advanced_mastered"),
    _define(Type.COMPLETE_KNOWLEDGE, "Complete Knowledge", "Complete every available module", "emoji_objects",
            100, Rarity.EPIC, Category.EXCELLENCE, "Complete all platform modules", "complete_knowledge"),
    _define(Type.MASTER_LEVEL, "Master", "Reach mastery on your learning journey", "auto_awesome",
            100, Rarity.EPIC, Category.EXCELLENCE, "Complete all modules at the advanced level", "master_level"),

    # Special
    _define(Type.REVIEWING_PRO, "Review Master", "Revisit 10 lessons you had already completed", "refresh",
            40, Rarity.RARE, Category.SPECIAL, "Review 10 completed lessons", "reviewed_lessons", 10),
    _define(Type.CURIOUS_SEARCHER, "Curious Searcher", "Use search 20 times", "search",
            30, Rarity.RARE, Category.SPECIAL, "Search 20 times", "searches", 20),
    _define(Type.FEEDBACK_CONTRIBUTOR, "Active Contributor", "Send feedback to improve the platform", "feedback",
            45, Rarity.RARE, Category.SPECIAL, "Submit feedback", "feedback_submitted"),
)

default_catalog = AchievementCatalog(DEFAULT_DEFINITIONS)
