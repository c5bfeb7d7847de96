from pydantic import BaseModel, ConfigDict
from typing import Optional
from app.core.constants import ModuleCategoryEnum, DifficultyLevelEnum


class ModuleBase(BaseModel):
    title: str
    description: Optional[str] = None
    category: ModuleCategoryEnum
    difficulty: DifficultyLevelEnum = DifficultyLevelEnum.BEGINNER
    order: int = 0
    estimated_time: int = 0
    is_active: bool = True


class ModuleCreate(ModuleBase):
    pass


class ModuleUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


class Module(ModuleBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
