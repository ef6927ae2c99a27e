from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"


@dataclass
class AppError(Exception):
    code: str
    message: str
    status_code: int = 400
    details: dict[str, Any] | None = None


def validation_error(message: str = "Validation failed", details: dict[str, Any] | None = None) -> AppError:
    return AppError(code="VALIDATION_ERROR", message=message or "Validation failed", status_code=400, details=details or {})


def missing_fields(*names: str) -> AppError:
    return validation_error(f"Missing required fields: {', '.join(names)}", {"missing": list(names)})


def auth_required() -> AppError:
    return AppError(code="AUTH_REQUIRED", message="Login required", status_code=401)


def auth_invalid_credentials() -> AppError:
    return AppError(code="AUTH_INVALID_CREDENTIALS", message="Invalid email or password", status_code=401)


def permission_denied() -> AppError:
    return AppError(code="PERMISSION_DENIED", message="Not allowed to perform this action", status_code=403)


def not_found(what: str = "Resource") -> AppError:
    return AppError(code="RESOURCE_NOT_FOUND", message=f"{what} not found", status_code=404)


def conflict(message: str = "Resource already exists") -> AppError:
    return AppError(code="RESOURCE_CONFLICT", message=message, status_code=409)


def internal_error() -> AppError:
    return AppError(code="INTERNAL_ERROR", message="Server error", status_code=500)


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = exc.orig
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def classify_integrity_error(exc: IntegrityError, conflict_message: str | None = None) -> AppError:
    """Translate a store constraint violation into the matching AppError.

    PostgreSQL drivers report a SQLSTATE; SQLite only gives a message, so the
    message text is the fallback.
    """
    state = _sqlstate(exc)
    text = str(exc.orig).lower()
    if state == UNIQUE_VIOLATION or (state is None and ("unique constraint" in text or "primary key" in text)):
        return conflict(conflict_message or "Duplicate value violates a uniqueness constraint")
    if state == FOREIGN_KEY_VIOLATION or (state is None and "foreign key" in text):
        return validation_error("Referenced record does not exist")
    if state in (NOT_NULL_VIOLATION, CHECK_VIOLATION) or (state is None and ("not null" in text or "check constraint" in text)):
        return validation_error("Invalid or missing field value")
    return internal_error()
