"""Error taxonomy and the structured result returned by user-facing operations."""

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

T = TypeVar("T")


class ErrorKind(StrEnum):
    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    NOT_FOUND = "not-found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class AppError(Exception):
    """Base class for errors that carry a user-safe message and a kind."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


class TenantValidationError(ValidationError):
    """Malformed or empty tenant identifier, raised before any connection is opened."""


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class AuthorizationError(AppError):
    kind = ErrorKind.UNAUTHORIZED


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class ActionResult(BaseModel, Generic[T]):
    """Success/failure value returned by invitation and settings operations."""

    success: bool
    data: T | None = None
    error: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "ActionResult[T]":
        return cls(success=False, error=kind, message=message)

    @classmethod
    def from_error(cls, exc: AppError) -> "ActionResult[T]":
        return cls.fail(exc.kind, exc.message)


def first_validation_message(exc: PydanticValidationError) -> str:
    """Human-readable message for the first failing field of a pydantic error."""
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid input")
    return f"{field}: {message}" if field else message
