from datetime import date, datetime
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.learning_session import LearningSession
from app.schemas.activity import LearningSession as LearningSessionSchema

class CRUDLearningSession(CRUDBase[LearningSession, LearningSessionSchema, LearningSessionSchema]):

    @staticmethod
    def session_id(user_id: int, day: date) -> str:
        return f"{user_id}-{day.isoformat()}"

    def get_for_day(self, db: Session, *, user_id: int, day: date) -> Optional[LearningSession]:
        return self.get(db, id=self.session_id(user_id, day))

    def get_start_times(self, db: Session, *, user_id: int) -> List[datetime]:
        rows = (
            db.query(LearningSession.start_time)
            .filter(LearningSession.user_id == user_id)
            .order_by(LearningSession.start_time.desc())
            .all()
        )
        return [row.start_time for row in rows]

    def count_by_user(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(func.count(LearningSession.id))
            .filter(LearningSession.user_id == user_id)
            .scalar()
        ) or 0

learning_session = CRUDLearningSession(LearningSession)
