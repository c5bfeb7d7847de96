import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import ProgressStateEnum
from app.crud.learning_progress import learning_progress as crud_learning_progress
from app.crud.lesson import lesson as crud_lesson
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.crud.module import module as crud_module
from app.models.learning_progress import LearningProgress
from app.models.lesson import Lesson
from app.models.lesson_progress import LessonProgress
from app.schemas.progress import (
    LearningProgress as LearningProgressSchema,
    LessonProgress as LessonProgressSchema,
    LessonProgressDelta,
    ModuleProgress,
    ModuleProgressSummary,
    ProgressSummary,
)

logger = logging.getLogger(__name__)


def calculate_module_progress_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(completed * 100 / total + 0.5)


def calculate_average_score(rows: Iterable[LessonProgress]) -> Optional[float]:
    scores = [row.score for row in rows if row.score is not None]
    if not scores:
        return None
    return round(sum(scores) / len(scores), 2)


def calculate_total_time_spent(rows: Iterable[LessonProgress]) -> int:
    return sum(row.time_spent or 0 for row in rows)


def are_all_lessons_completed(lesson_ids: Sequence[int], rows: Iterable[LessonProgress]) -> bool:
    if not lesson_ids:
        return False
    completed = {row.lesson_id for row in rows if row.completed}
    return set(lesson_ids) <= completed


def progress_state(learning_progress: Optional[LearningProgress], lesson_rows: Sequence[LessonProgress] = ()) -> ProgressStateEnum:
    if learning_progress is None or not lesson_rows:
        return ProgressStateEnum.NOT_STARTED
    if learning_progress.completed_at is not None:
        return ProgressStateEnum.COMPLETED
    return ProgressStateEnum.IN_PROGRESS


class ProgressService:

    def _validate_delta(self, delta: Union[LessonProgressDelta, Dict[str, Any], None]) -> LessonProgressDelta:
        if isinstance(delta, LessonProgressDelta):
            return delta
        try:
            return LessonProgressDelta.model_validate(delta or {})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid progress delta: {problems}"
            )

    def _get_lesson_or_raise(self, db: Session, lesson_id: int) -> Lesson:
        lesson = crud_lesson.get(db, id=lesson_id)
        if not lesson or lesson.module_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found.")
        return lesson

    def _get_or_create_learning_progress(self, db: Session, *, user_id: int, module_id: int) -> LearningProgress:
        learning_progress = crud_learning_progress.get_by_user_and_module(
            db, user_id=user_id, module_id=module_id, for_update=True
        )
        if learning_progress:
            return learning_progress

        try:
            with db.begin_nested():
                return crud_learning_progress.create(
                    db, obj_in={"user_id": user_id, "module_id": module_id, "time_spent": 0}, commit=False
                )
        except IntegrityError:
            logger.info(f"Learning progress for user {user_id} module {module_id} created concurrently, reloading")
            return crud_learning_progress.get_by_user_and_module(
                db, user_id=user_id, module_id=module_id, for_update=True
            )

    def _merge_delta(self, row: LessonProgress, delta: LessonProgressDelta, *, is_new: bool, now: datetime):
        changes = delta.model_dump(exclude_unset=True, exclude_none=True)

        if "progress" in changes:
            row.progress = changes["progress"]
        if "completed" in changes:
            row.completed = changes["completed"]
            if row.completed and row.completed_at is None:
                row.completed_at = now
        if changes.get("time_spent_delta"):
            row.time_spent = (row.time_spent or 0) + changes["time_spent_delta"]
        if "score" in changes:
            row.score = changes["score"]

        if "last_accessed" in changes:
            row.last_accessed = changes["last_accessed"]
        elif changes or is_new:
            row.last_accessed = now

    def _recompute_aggregate(self, db: Session, learning_progress: LearningProgress, *, now: datetime):
        rows = crud_lesson_progress.get_all_by_progress(db, progress_id=learning_progress.id)
        lesson_ids = [lesson.id for lesson in crud_lesson.get_by_module(db, module_id=learning_progress.module_id)]

        learning_progress.time_spent = calculate_total_time_spent(rows)
        learning_progress.score = calculate_average_score(rows)
        if are_all_lessons_completed(lesson_ids, rows):
            if learning_progress.completed_at is None:
                learning_progress.completed_at = now
        else:
            learning_progress.completed_at = None

    def update_lesson_progress(
        self,
        db: Session,
        *,
        user_id: int,
        lesson_id: int,
        delta: Union[LessonProgressDelta, Dict[str, Any], None] = None,
    ) -> Tuple[LearningProgress, List[LessonProgress]]:
        delta = self._validate_delta(delta)
        lesson = self._get_lesson_or_raise(db, lesson_id)
        now = datetime.now()

        try:
            learning_progress = self._get_or_create_learning_progress(
                db, user_id=user_id, module_id=lesson.module_id
            )

            row = crud_lesson_progress.get_by_progress_and_lesson(
                db, progress_id=learning_progress.id, lesson_id=lesson.id
            )
            is_new = row is None
            if is_new:
                row = LessonProgress(
                    progress_id=learning_progress.id,
                    lesson_id=lesson.id,
                    completed=False,
                    time_spent=0,
                    progress=0.0,
                )
                db.add(row)

            self._merge_delta(row, delta, is_new=is_new, now=now)
            db.flush()

            self._recompute_aggregate(db, learning_progress, now=now)
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Lesson progress update failed for user {user_id} lesson {lesson_id}", exc_info=True)
            raise

        db.refresh(learning_progress)
        rows = crud_lesson_progress.get_all_by_progress(db, progress_id=learning_progress.id)
        logger.info(
            f"Lesson {lesson_id} progress updated for user {user_id}: "
            f"module {learning_progress.module_id} time={learning_progress.time_spent} "
            f"completed={learning_progress.completed_at is not None}"
        )
        return learning_progress, rows

    def build_module_progress(
        self, db: Session, learning_progress: LearningProgress, rows: Sequence[LessonProgress]
    ) -> ModuleProgress:
        total_lessons = crud_module.count_lessons(db, module_id=learning_progress.module_id)
        completed_lessons = sum(1 for row in rows if row.completed)
        return ModuleProgress(
            module_id=learning_progress.module_id,
            state=progress_state(learning_progress, rows),
            percentage=calculate_module_progress_percentage(completed_lessons, total_lessons),
            completed_lessons=completed_lessons,
            total_lessons=total_lessons,
            progress=LearningProgressSchema.model_validate(learning_progress),
            lessons=[LessonProgressSchema.model_validate(row) for row in rows],
        )

    def get_module_progress(self, db: Session, *, user_id: int, module_id: int) -> ModuleProgress:
        module = crud_module.get(db, id=module_id)
        if not module:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found.")

        try:
            learning_progress = self._get_or_create_learning_progress(db, user_id=user_id, module_id=module_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        rows = crud_lesson_progress.get_all_by_progress(db, progress_id=learning_progress.id)
        return self.build_module_progress(db, learning_progress, rows)

    def get_progress_summary(self, db: Session, *, user_id: int) -> ProgressSummary:
        modules = crud_module.get_active(db)
        by_module = {lp.module_id: lp for lp in crud_learning_progress.get_by_user(db, user_id=user_id)}

        items: List[ModuleProgressSummary] = []
        for module in modules:
            learning_progress = by_module.get(module.id)
            rows = learning_progress.lessons if learning_progress else []
            completed_lessons = sum(1 for row in rows if row.completed)
            items.append(ModuleProgressSummary(
                module_id=module.id,
                title=module.title,
                category=module.category,
                difficulty=module.difficulty,
                percentage=calculate_module_progress_percentage(
                    completed_lessons, crud_module.count_lessons(db, module_id=module.id)
                ),
                time_spent=learning_progress.time_spent if learning_progress else 0,
                score=learning_progress.score if learning_progress else None,
                completed=bool(learning_progress and learning_progress.completed_at),
                completed_at=learning_progress.completed_at if learning_progress else None,
            ))

        return ProgressSummary(
            modules=items,
            completed_modules=sum(1 for item in items if item.completed),
            total_modules=len(items),
            completed_lessons=sum(
                sum(1 for row in lp.lessons if row.completed) for lp in by_module.values()
            ),
            total_time_spent=sum(lp.time_spent or 0 for lp in by_module.values()),
        )

    def are_prerequisites_met(self, db: Session, *, user_id: int, module_id: int) -> bool:
        prerequisite_ids = set(crud_module.get_prerequisite_ids(db, module_id=module_id))
        if not prerequisite_ids:
            return True
        completed = crud_learning_progress.get_completed_module_ids(db, user_id=user_id)
        return prerequisite_ids <= completed

    def get_available_lesson(self, db: Session, *, user_id: int, lesson_id: int) -> Lesson:
        lesson = self._get_lesson_or_raise(db, lesson_id)
        if not self.are_prerequisites_met(db, user_id=user_id, module_id=lesson.module_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Complete the prerequisite modules before starting this lesson."
            )
        return lesson


progress_service = ProgressService()
