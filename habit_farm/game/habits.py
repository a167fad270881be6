from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from ..core.config import MAX_HABIT_NAME_LENGTH
from ..core.exceptions import AlreadyDone, InvalidState, NotFound, ValidationError
from ..core.models import Habit, UserRecord
from .catalog import Catalog
from .crops import grow_active_crop


def _day(moment: Optional[datetime]) -> Optional[date]:
    return moment.date() if moment is not None else None


def new_habit_id(record: UserRecord, now: datetime) -> str:
    millis = int(now.timestamp() * 1000)
    taken = {h.id for h in record.habits}
    while f"habit_{millis}" in taken:
        millis += 1
    return f"habit_{millis}"


def add_habit(record: UserRecord, name: Optional[str], now: datetime) -> Habit:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Habit name is required")
    if len(name) > MAX_HABIT_NAME_LENGTH:
        raise ValidationError(f"Habit name can be at most {MAX_HABIT_NAME_LENGTH} characters")
    if len(record.habits) >= record.max_habits:
        raise InvalidState(f"You can have at most {record.max_habits} habits")

    habit = Habit(id=new_habit_id(record, now), name=name, created_at=now)
    record.habits.append(habit)
    return habit


def check_in(record: UserRecord, habit_id: str, now: datetime, catalog: Catalog) -> Tuple[Habit, int]:
    """
    Completes a habit for today.

    Days are calendar days in server-local time. Completing the habit on the
    day after its previous completion extends the streak; any longer gap
    starts a new streak of 1. Every check-in also grows the active crop by
    one unit, whichever habit it was for.
    """
    habit = record.find_habit(habit_id)
    if habit is None:
        raise NotFound("Habit does not exist")

    today = now.date()
    previous = _day(habit.last_completed)
    if previous == today:
        raise AlreadyDone()

    habit.total_completions += 1
    habit.last_completed = now
    if previous is not None and previous == today - timedelta(days=1):
        habit.streak += 1
    else:
        habit.streak = 1

    grow_active_crop(record, now, catalog)

    record.habit_streak = max(record.habit_streak, habit.streak)
    return habit, record.habit_streak
