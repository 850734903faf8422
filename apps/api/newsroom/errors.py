"""Application exception types."""

from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INVALID_TOKEN = "INVALID_TOKEN"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONFLICT = "CONFLICT"
    INTERNAL_FAILURE = "INTERNAL_FAILURE"


class ServiceError(Exception):
    """Classified failure raised by core services.

    The failure kind decides the transport status code; ``code`` is the finer
    machine-readable reason surfaced to clients and defaults to the kind itself.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.code = code or kind.value
        self.details = details
        super().__init__(message)


def not_found(message: str = "Resource not found") -> ServiceError:
    return ServiceError(FailureKind.NOT_FOUND, message, code="RESOURCE_NOT_FOUND")


def forbidden(message: str, *, code: str = "FORBIDDEN") -> ServiceError:
    return ServiceError(FailureKind.FORBIDDEN, message, code=code)


__all__ = ["FailureKind", "ServiceError", "forbidden", "not_found"]
