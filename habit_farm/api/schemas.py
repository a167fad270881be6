from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.models import CamelModel, CropInstance, Habit


class CredentialsRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AddHabitRequest(CamelModel):
    habit_name: Optional[str] = None


class CheckInRequest(CamelModel):
    habit_id: str


class PlantCropRequest(CamelModel):
    crop_id: str


class ResearchRequest(CamelModel):
    recipe_id: str
    used_ingredients: List[str] = Field(default_factory=list)


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    username: str
    max_habits: int


class SessionResponse(CamelModel):
    success: bool = True
    username: str
    max_habits: int


class LastLoginResponse(CamelModel):
    success: bool = True
    last_login: datetime
    created_at: datetime


class HabitResponse(CamelModel):
    success: bool = True
    habit: Habit


class CheckInResponse(CamelModel):
    success: bool = True
    habit: Habit
    habit_streak: int


class CropResponse(CamelModel):
    success: bool = True
    crop: CropInstance


class AbandonResponse(CamelModel):
    success: bool = True
    message: str = "Crop abandoned"
    abandoned_crop: CropInstance


class HarvestResponse(CamelModel):
    success: bool = True
    harvested_amount: int
    storage: Dict[str, int]
