from sqlalchemy import Boolean, Column, String, Integer, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import UserLevelEnum, UserRoleEnum

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    level = Column(SQLEnum(UserLevelEnum), nullable=False, default=UserLevelEnum.BEGINNER)
    role = Column(SQLEnum(UserRoleEnum), nullable=False, default=UserRoleEnum.STUDENT)
    is_active = Column(Boolean(), default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    learning_progress = relationship("LearningProgress", back_populates="user")
    achievements = relationship("Achievement", back_populates="user")
