from enum import Enum


class UserRoleEnum(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    EXPERT = "EXPERT"
    ADMIN = "ADMIN"

class UserLevelEnum(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"

class DifficultyLevelEnum(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"

class ModuleCategoryEnum(str, Enum):
    FUNDAMENTALS = "FUNDAMENTALS"
    VENTILATION_PRINCIPLES = "VENTILATION_PRINCIPLES"
    CLINICAL_APPLICATIONS = "CLINICAL_APPLICATIONS"
    ADVANCED_TECHNIQUES = "ADVANCED_TECHNIQUES"
    TROUBLESHOOTING = "TROUBLESHOOTING"
    PATIENT_SAFETY = "PATIENT_SAFETY"

class ProgressStateEnum(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

class EventTypeEnum(str, Enum):
    LESSON_COMPLETED = "LESSON_COMPLETED"
    LESSON_ACCESSED = "LESSON_ACCESSED"
    MODULE_COMPLETED = "MODULE_COMPLETED"
    QUIZ_COMPLETED = "QUIZ_COMPLETED"
    DAILY_LOGIN = "DAILY_LOGIN"
    SEARCH_USED = "SEARCH_USED"
    FEEDBACK_SUBMITTED = "FEEDBACK_SUBMITTED"
    LESSON_REVIEWED = "LESSON_REVIEWED"

class AchievementCategoryEnum(str, Enum):
    INITIAL = "INITIAL"
    PROGRESS = "PROGRESS"
    CONSISTENCY = "CONSISTENCY"
    EXCELLENCE = "EXCELLENCE"
    SPECIAL = "SPECIAL"

class AchievementRarityEnum(str, Enum):
    COMMON = "COMMON"
    RARE = "RARE"
    EPIC = "EPIC"

class AchievementTypeEnum(str, Enum):
    FIRST_LESSON = "FIRST_LESSON"
    FIRST_MODULE = "FIRST_MODULE"
    EXPLORING = "EXPLORING"
    LESSONS_10 = "LESSONS_10"
    LESSONS_25 = "LESSONS_25"
    LESSONS_50 = "LESSONS_50"
    MODULE_COMPLETE = "MODULE_COMPLETE"
    MODULE_FUNDAMENTALS = "MODULE_FUNDAMENTALS"
    MODULE_VENTILATION = "MODULE_VENTILATION"
    MODULE_CLINICAL = "MODULE_CLINICAL"
    MODULE_ADVANCED = "MODULE_ADVANCED"
    ALL_BEGINNER = "ALL_BEGINNER"
    ALL_INTERMEDIATE = "ALL_INTERMEDIATE"
    ALL_ADVANCED = "ALL_ADVANCED"
    COMPLETE_KNOWLEDGE = "COMPLETE_KNOWLEDGE"
    MASTER_LEVEL = "MASTER_LEVEL"
    STREAK_3_DAYS = "STREAK_3_DAYS"
    STREAK_7_DAYS = "STREAK_7_DAYS"
    STREAK_30_DAYS = "STREAK_30_DAYS"
    MORNING_LEARNER = "MORNING_LEARNER"
    NIGHT_OWL = "NIGHT_OWL"
    DEDICATED_STUDENT = "DEDICATED_STUDENT"
    PERFECT_QUIZ = "PERFECT_QUIZ"
    FIVE_PERFECT_QUIZZES = "FIVE_PERFECT_QUIZZES"
    SPEED_LEARNER = "SPEED_LEARNER"
    REVIEWING_PRO = "REVIEWING_PRO"
    CURIOUS_SEARCHER = "CURIOUS_SEARCHER"
    FEEDBACK_CONTRIBUTOR = "FEEDBACK_CONTRIBUTOR"
