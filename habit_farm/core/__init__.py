from .database import create_db_and_tables, engine, get_session
from .exceptions import (
    AlreadyDone,
    AlreadyUnlocked,
    Conflict,
    FarmError,
    Forbidden,
    InvalidState,
    IOFailure,
    NotFound,
    StaleRecord,
    StorageInsufficient,
    Unauthenticated,
    ValidationError,
    status_code_for,
)
from .models import CropInstance, Habit, ResearchAttempt, UserDocument, UserRecord
from .security import (
    authenticate,
    create_access_token,
    get_current_username,
    hash_password,
    verify_password,
)
from .store import UserStore, get_store

__all__ = [
    "AlreadyDone",
    "AlreadyUnlocked",
    "Conflict",
    "CropInstance",
    "FarmError",
    "Forbidden",
    "Habit",
    "InvalidState",
    "IOFailure",
    "NotFound",
    "ResearchAttempt",
    "StaleRecord",
    "StorageInsufficient",
    "Unauthenticated",
    "UserDocument",
    "UserRecord",
    "UserStore",
    "ValidationError",
    "authenticate",
    "create_access_token",
    "create_db_and_tables",
    "engine",
    "get_current_username",
    "get_session",
    "get_store",
    "hash_password",
    "status_code_for",
    "verify_password",
]
