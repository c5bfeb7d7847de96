from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class LearningProgress(Base):
    __tablename__ = "learning_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "module_id", name="uq_learning_progress_user_module"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    time_spent = Column(Integer, nullable=False, default=0) # minutes, sum over lessons
    score = Column(Float, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    user = relationship("User", back_populates="learning_progress")
    module = relationship("Module")
    lessons = relationship(
        "LessonProgress",
        back_populates="learning_progress",
        cascade="all, delete-orphan",
        order_by="LessonProgress.id",
    )
