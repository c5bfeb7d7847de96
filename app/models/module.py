from sqlalchemy import Boolean, Column, Integer, String, DateTime, ForeignKey, Table, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ModuleCategoryEnum, DifficultyLevelEnum

module_prerequisites = Table(
    "module_prerequisites",
    Base.metadata,
    Column("module_id", Integer, ForeignKey("modules.id"), primary_key=True),
    Column("prerequisite_id", Integer, ForeignKey("modules.id"), primary_key=True),
)

class Module(Base):
    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    category = Column(SQLEnum(ModuleCategoryEnum), nullable=False)
    difficulty = Column(SQLEnum(DifficultyLevelEnum), nullable=False, default=DifficultyLevelEnum.BEGINNER)
    order = Column(Integer, nullable=False, default=0)
    estimated_time = Column(Integer, nullable=False, default=0) # minutes
    is_active = Column(Boolean(), nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    lessons = relationship("Lesson", back_populates="module", order_by="Lesson.order")
    prerequisites = relationship(
        "Module",
        secondary=module_prerequisites,
        primaryjoin=id == module_prerequisites.c.module_id,
        secondaryjoin=id == module_prerequisites.c.prerequisite_id,
    )
