from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from .config import BASE_HABIT_SLOTS, MAX_HABIT_SLOTS


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserDocument(SQLModel, table=True):
    """One row per user holding the whole serialized UserRecord."""
    username: str = Field(primary_key=True)
    revision: int = Field(default=0)
    data: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Habit(CamelModel):
    id: str
    name: str
    streak: int = 0
    total_completions: int = 0
    last_completed: Optional[datetime] = None
    created_at: datetime = PydanticField(default_factory=datetime.now)


class CropInstance(CamelModel):
    id: str
    planted_at: datetime = PydanticField(default_factory=datetime.now)
    current_growth: int = 0
    harvested: bool = False
    harvested_at: Optional[datetime] = None
    abandoned: bool = False
    # Storage payout granted; a crop can be harvested (matured) but not yet collected
    collected: bool = False


class ResearchAttempt(CamelModel):
    attempts: int = 0
    revealed_clues: int = 0
    success: Optional[bool] = None
    unlocked_at: Optional[datetime] = None


class UserRecord(CamelModel):
    username: str
    password_hash: str
    habits: List[Habit] = PydanticField(default_factory=list)
    crop: Optional[CropInstance] = None
    storage: Dict[str, int] = PydanticField(default_factory=dict)
    discovered_recipes: List[str] = PydanticField(default_factory=list)
    research_history: Dict[str, ResearchAttempt] = PydanticField(default_factory=dict)
    habit_streak: int = 0
    total_harvests: int = 0
    max_habits: int = BASE_HABIT_SLOTS
    created_at: datetime = PydanticField(default_factory=datetime.now)
    last_login: Optional[datetime] = None
    last_logout: Optional[datetime] = None

    # Managed by the store, compared on every write
    revision: int = 0

    @field_validator("storage")
    @classmethod
    def drop_empty_storage(cls, value: Dict[str, int]) -> Dict[str, int]:
        return {crop_id: qty for crop_id, qty in value.items() if qty > 0}

    def find_habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.habits if h.id == habit_id), None)

    def refresh_max_habits(self) -> int:
        """Recompute habit slots: one per discovered recipe on top of the base, capped."""
        self.max_habits = min(MAX_HABIT_SLOTS, BASE_HABIT_SLOTS + len(self.discovered_recipes))
        return self.max_habits

    def public_dict(self) -> dict:
        """Wire form of the record without credentials or store bookkeeping."""
        return self.model_dump(mode="json", by_alias=True, exclude={"password_hash", "revision"})
