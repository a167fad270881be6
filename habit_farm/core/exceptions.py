"""Exceptions raised by the game engine, the auth gate and the record store.

Every error carries a human-readable message and a machine-readable code. The
HTTP layer maps each class to a status code (see ``STATUS_CODES``).
"""

from typing import Any, Dict, List, Optional


class FarmError(Exception):
    """Base exception for all Habit Farm errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context merged into the response body
    """

    def __init__(
        self,
        message: str,
        code: str = "FARM_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        body = {"success": False, "error": self.message, "code": self.code}
        body.update(self.details)
        return body


class ValidationError(FarmError):
    """Raised when input is missing or malformed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class Conflict(FarmError):
    """Raised on duplicate registration or an occupied crop slot."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class StaleRecord(FarmError):
    """Raised when a record was changed by another request since it was loaded."""

    def __init__(self, username: str):
        super().__init__(
            "Your data was changed by another request, please retry",
            code="STALE_RECORD",
            details={"username": username},
        )


class NotFound(FarmError):
    """Raised for an unknown user, habit, crop or recipe."""

    def __init__(self, message: str):
        super().__init__(message, code="NOT_FOUND")


class Unauthenticated(FarmError):
    """Raised when a credential is missing or malformed."""

    def __init__(self, message: str = "Login required"):
        super().__init__(message, code="UNAUTHENTICATED")


class Forbidden(FarmError):
    """Raised when a credential is invalid, expired or its user is gone."""

    def __init__(self, message: str):
        super().__init__(message, code="FORBIDDEN")


class InvalidState(FarmError):
    """Raised when an operation is not legal in the entity's current state."""

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_STATE")


class AlreadyDone(FarmError):
    """Raised when a habit was already checked in today."""

    def __init__(self, message: str = "Already checked in today"):
        super().__init__(message, code="ALREADY_DONE")


class AlreadyUnlocked(FarmError):
    """Raised when researching a recipe that is already discovered."""

    def __init__(self, message: str = "Recipe already unlocked"):
        super().__init__(message, code="ALREADY_UNLOCKED")


class StorageInsufficient(FarmError):
    """Soft failure: the right ingredients were chosen but storage is short."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(
            "Not enough materials",
            code="STORAGE_INSUFFICIENT",
            details={"message": "Not enough materials", "missing": missing},
        )


class IOFailure(FarmError):
    """Raised when the record store cannot be read or written."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, code="IO_FAILURE")


STATUS_CODES = {
    ValidationError: 400,
    Unauthenticated: 401,
    Forbidden: 403,
    NotFound: 404,
    Conflict: 409,
    StaleRecord: 409,
    InvalidState: 400,
    AlreadyDone: 400,
    AlreadyUnlocked: 400,
    StorageInsufficient: 400,
    IOFailure: 500,
}


def status_code_for(exc: FarmError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500
