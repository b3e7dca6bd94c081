"""
Error taxonomy shared by the records core and the HTTP layer.

Every expected failure is raised as an ``ATSError`` subclass carrying an
``ErrorKind``. Callers branch on ``error.kind``; the HTTP layer maps the kind
to a status code. Database constraint violations are translated into this
taxonomy by inspecting the driver error code after the transaction has
rolled back.
"""

from enum import Enum
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"


class ErrorKind(str, Enum):
    """Kinds of failure surfaced by the records core."""

    INVALID_ARGUMENT = "invalid_argument"
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    DUPLICATE_KEY = "duplicate_key"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    UNEXPECTED = "unexpected"


class ReferenceDirection(str, Enum):
    """Which side of a foreign key a violation came from."""

    # the row points at something that does not exist
    MISSING_REFERENCE = "missing_reference"
    # the row is still pointed at by other rows
    STILL_REFERENCED = "still_referenced"


class ATSError(Exception):
    """Base exception for records core failures."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class InvalidArgumentError(ATSError):
    """Raised for malformed input, failed format checks or bad enum values."""

    kind = ErrorKind.INVALID_ARGUMENT


class UnauthenticatedError(ATSError):
    """Raised when the caller could not be identified."""

    kind = ErrorKind.UNAUTHENTICATED


class PermissionDeniedError(ATSError):
    """Raised when the actor's scope does not cover the record."""

    kind = ErrorKind.PERMISSION_DENIED


class NotFoundError(ATSError):
    """Raised when a record does not exist or is outside the caller's scope."""

    kind = ErrorKind.NOT_FOUND


class DuplicateKeyError(ATSError):
    """Raised when a unique constraint is violated."""

    kind = ErrorKind.DUPLICATE_KEY


class ForeignKeyViolationError(ATSError):
    """Raised when a foreign key constraint is violated."""

    kind = ErrorKind.FOREIGN_KEY_VIOLATION

    def __init__(
        self,
        message: str,
        direction: ReferenceDirection = ReferenceDirection.MISSING_REFERENCE,
        **context: Any,
    ):
        super().__init__(message, direction=direction.value, **context)
        self.direction = direction

    @property
    def status_code(self) -> int:
        if self.direction is ReferenceDirection.STILL_REFERENCED:
            return 409
        return 400


class UnexpectedError(ATSError):
    """Raised for failures that have no more specific kind."""

    kind = ErrorKind.UNEXPECTED


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE_KEY: 409,
    ErrorKind.FOREIGN_KEY_VIOLATION: 400,
    ErrorKind.UNEXPECTED: 500,
}


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    """Extract the SQLSTATE code from a wrapped DBAPI error, if any."""
    candidates = [exc.orig, getattr(exc.orig, "__cause__", None)]
    for candidate in candidates:
        if candidate is None:
            continue
        for attribute in ("sqlstate", "pgcode"):
            code = getattr(candidate, attribute, None)
            if code:
                return str(code)
    return None


def translate_integrity_error(
    exc: IntegrityError,
    entity: str,
    deleting: bool = False,
) -> ATSError:
    """
    Translate a database integrity error into the error taxonomy.

    Args:
        exc: The IntegrityError raised by SQLAlchemy
        entity: Human readable entity name used in the message
        deleting: Whether the failing statement was a delete, which turns a
            foreign key violation into a "still referenced" conflict

    Returns:
        The matching ATSError (not raised)
    """
    code = _sqlstate(exc)
    detail = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()

    if code == UNIQUE_VIOLATION or "unique constraint" in detail:
        return DuplicateKeyError(
            f"A {entity} with the same unique value already exists",
            detail=str(exc.orig),
        )

    if code == FOREIGN_KEY_VIOLATION or "foreign key constraint" in detail:
        if deleting:
            return ForeignKeyViolationError(
                f"Cannot delete {entity} as it is referenced by other records",
                direction=ReferenceDirection.STILL_REFERENCED,
                detail=str(exc.orig),
            )
        return ForeignKeyViolationError(
            f"A record referenced by this {entity} does not exist",
            direction=ReferenceDirection.MISSING_REFERENCE,
            detail=str(exc.orig),
        )

    if code in (NOT_NULL_VIOLATION, CHECK_VIOLATION) or "not null constraint" in detail:
        return InvalidArgumentError(
            f"The {entity} is missing a required value or violates a constraint",
            detail=str(exc.orig),
        )

    return UnexpectedError(
        f"Unexpected integrity error while saving {entity}",
        detail=str(exc.orig),
    )


def validation_message(errors: list[dict[str, Any]]) -> str:
    """
    Build a single human readable message from pydantic error dictionaries.

    Args:
        errors: Output of ``ValidationError.errors()``

    Returns:
        Message naming each failing field
    """
    parts = []
    for error in errors:
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part != "body"
        )
        message = error.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid input"
