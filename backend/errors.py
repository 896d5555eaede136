"""Domain errors raised by guards and access services."""

from __future__ import annotations

from pydantic import ValidationError

from shared.models import ErrorCode, ErrorPayload


class AccessError(Exception):
    """Base class for failures surfaced to the caller as-is."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(code=self.code, message=self.message, details=self.details)


class AuthenticationFailedError(AccessError):
    """Bad credentials, or a missing, invalid or expired bearer token."""

    code = ErrorCode.AUTHENTICATION_FAILED


class NotFoundError(AccessError):
    code = ErrorCode.NOT_FOUND


class ForbiddenError(AccessError):
    """The resource exists but belongs to another user."""

    code = ErrorCode.FORBIDDEN


class DuplicateNameError(AccessError):
    code = ErrorCode.DUPLICATE_NAME


class DuplicateEmailError(AccessError):
    code = ErrorCode.DUPLICATE_EMAIL


class ValidationFailedError(AccessError):
    code = ErrorCode.VALIDATION_FAILED

    @classmethod
    def from_validation_error(cls, exc: ValidationError, *, operation: str) -> ValidationFailedError:
        return cls(
            f"Invalid payload for {operation}",
            details={"validation_errors": exc.errors(include_url=False, include_context=False)},
        )
