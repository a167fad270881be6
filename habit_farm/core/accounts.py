import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from .exceptions import Unauthenticated, ValidationError
from .models import UserRecord
from .security import create_access_token, hash_password, idle_too_long, verify_password
from .store import UserStore

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 6

# Never taken from a client-side save. UserRecord also accepts field names
# (populate_by_name), so the snake_case spellings are blocked too.
SERVER_OWNED_FIELDS = {
    "username",
    "password",
    "passwordHash",
    "password_hash",
    "revision",
    "createdAt",
    "created_at",
    "lastLogin",
    "last_login",
    "lastLogout",
    "last_logout",
}


def _require_credentials(username: Optional[str], password: Optional[str]) -> Tuple[str, str]:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required")
    return username, password


def register_user(store: UserStore, username: Optional[str], password: Optional[str], now: datetime) -> UserRecord:
    username, password = _require_credentials(username, password)
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    record = UserRecord(
        username=username,
        password_hash=hash_password(password),
        created_at=now,
        # Registration counts as the first login
        last_login=now,
    )
    store.create(record)
    logger.info("Registered user %s", username)
    return record


def login_user(
    store: UserStore, username: Optional[str], password: Optional[str], now: datetime
) -> Tuple[str, UserRecord]:
    username, password = _require_credentials(username, password)
    record = store.load(username)
    if not verify_password(password, record.password_hash):
        logger.warning("Wrong password for %s", username)
        raise Unauthenticated("Wrong password")

    if idle_too_long(record.last_login, now):
        logger.info("User %s returns after %d days", username, (now - record.last_login).days)

    record.last_login = now
    store.save(record)
    return create_access_token(username), record


def merge_client_data(record: UserRecord, updates: Dict[str, Any]) -> UserRecord:
    """
    Applies a client-side save on top of a record.

    Server-owned fields are ignored, the result is re-validated, discovered
    recipes can only grow and habit slots are recomputed from them.
    """
    if not isinstance(updates, dict):
        raise ValidationError("Save data must be a JSON object")

    data = record.model_dump(by_alias=True)
    data.update({k: v for k, v in updates.items() if k not in SERVER_OWNED_FIELDS})
    try:
        merged = UserRecord.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid save data",
            details={"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]},
        )

    discovered = list(record.discovered_recipes)
    for recipe_id in merged.discovered_recipes:
        if recipe_id not in discovered:
            discovered.append(recipe_id)
    merged.discovered_recipes = discovered
    merged.refresh_max_habits()
    merged.revision = record.revision
    return merged

