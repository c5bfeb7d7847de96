from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Boolean, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint("progress_id", "lesson_id", name="uq_lesson_progress_progress_lesson"),
        CheckConstraint("progress >= 0 AND progress <= 1", name="ck_lesson_progress_progress_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    progress_id = Column(Integer, ForeignKey("learning_progress.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    completed = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=False, default=0) # minutes
    progress = Column(Float, nullable=False, default=0.0)
    score = Column(Float, nullable=True)
    last_accessed = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    learning_progress = relationship("LearningProgress", back_populates="lessons")
    lesson = relationship("Lesson")
