from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional
from datetime import datetime
from app.core.constants import UserLevelEnum, UserRoleEnum


class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    level: UserLevelEnum = UserLevelEnum.BEGINNER
    role: UserRoleEnum = UserRoleEnum.STUDENT


class UserCreate(UserBase):
    is_active: bool = True


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    level: Optional[UserLevelEnum] = None
    is_active: Optional[bool] = None


class User(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
    created_at: Optional[datetime] = None
