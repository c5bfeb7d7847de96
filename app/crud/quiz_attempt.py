from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.quiz_attempt import QuizAttempt
from app.schemas.activity import QuizAttemptCreate

class CRUDQuizAttempt(CRUDBase[QuizAttempt, QuizAttemptCreate, QuizAttemptCreate]):
    def get_recent_by_user(self, db: Session, *, user_id: int, limit: int) -> List[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == user_id)
            .order_by(QuizAttempt.attempted_at.desc(), QuizAttempt.id.desc())
            .limit(limit)
            .all()
        )

    def count_perfect_quizzes(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(func.count(func.distinct(QuizAttempt.quiz_id)))
            .filter(QuizAttempt.user_id == user_id, QuizAttempt.is_correct == True)
            .scalar()
        ) or 0

quiz_attempt = CRUDQuizAttempt(QuizAttempt)
