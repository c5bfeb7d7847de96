from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from app.core.database import Base


class LearningSession(Base):
    __tablename__ = "learning_sessions"

    id = Column(String, primary_key=True) # "<user_id>-<YYYY-MM-DD>"
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    lessons_viewed = Column(Integer, nullable=False, default=0)
    quizzes_taken = Column(Integer, nullable=False, default=0)
