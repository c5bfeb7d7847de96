from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime
from app.core.database import Base


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    quiz_id = Column(Integer, nullable=False, index=True)
    answer = Column(String, nullable=True)
    is_correct = Column(Boolean, nullable=False)
    time_spent = Column(Integer, nullable=True) # seconds
    attempted_at = Column(DateTime, nullable=False, index=True)
