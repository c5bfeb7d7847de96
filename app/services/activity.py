import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.crud.learning_session import learning_session as crud_session
from app.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt
from app.crud.search_log import search_log as crud_search_log
from app.models.learning_session import LearningSession
from app.models.quiz_attempt import QuizAttempt
from app.models.search_log import SearchLog
from app.schemas.activity import QuizAttemptCreate, SearchLogCreate
from app.schemas.progress import StreakInfo
from app.services.streak import compute_streak, longest_streak

logger = logging.getLogger(__name__)


class ActivityService:

    def _touch_session(self, db: Session, *, user_id: int, at: datetime) -> LearningSession:
        session = crud_session.get_for_day(db, user_id=user_id, day=at.date())
        if session is None:
            session = crud_session.create(
                db,
                obj_in={
                    "id": crud_session.session_id(user_id, at.date()),
                    "user_id": user_id,
                    "start_time": at,
                    "lessons_viewed": 0,
                    "quizzes_taken": 0,
                },
                commit=False,
            )
        return session

    def record_login(self, db: Session, *, user_id: int, at: Optional[datetime] = None) -> LearningSession:
        at = at or datetime.now()
        try:
            session = self._touch_session(db, user_id=user_id, at=at)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(session)
        logger.info(f"Learning session {session.id} recorded for user {user_id}")
        return session

    def record_lesson_view(self, db: Session, *, user_id: int, at: Optional[datetime] = None) -> LearningSession:
        at = at or datetime.now()
        try:
            session = self._touch_session(db, user_id=user_id, at=at)
            session.lessons_viewed = (session.lessons_viewed or 0) + 1
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(session)
        return session

    def record_quiz_attempt(
        self, db: Session, *, user_id: int, quiz_id: int, attempt_in: QuizAttemptCreate, at: Optional[datetime] = None
    ) -> QuizAttempt:
        at = at or datetime.now()
        try:
            session = self._touch_session(db, user_id=user_id, at=at)
            session.quizzes_taken = (session.quizzes_taken or 0) + 1
            attempt = crud_quiz_attempt.create(
                db,
                obj_in={**attempt_in.model_dump(), "user_id": user_id, "quiz_id": quiz_id, "attempted_at": at},
                commit=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(attempt)
        logger.info(f"Quiz attempt {attempt.id} on quiz {quiz_id} recorded for user {user_id} (correct={attempt.is_correct})")
        return attempt

    def record_search(self, db: Session, *, user_id: int, search_in: SearchLogCreate) -> SearchLog:
        return crud_search_log.create(
            db, obj_in={**search_in.model_dump(), "user_id": user_id, "created_at": datetime.now()}
        )

    def get_streak(self, db: Session, *, user_id: int) -> StreakInfo:
        start_times = crud_session.get_start_times(db, user_id=user_id)
        return StreakInfo(
            current_streak=compute_streak(start_times),
            longest_streak=longest_streak(start_times),
            total_sessions=len(start_times),
        )


activity_service = ActivityService()
