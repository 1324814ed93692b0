"""Error taxonomy shared by the Right Guard services, API, and client core."""

from __future__ import annotations

from typing import Optional


class RightGuardError(Exception):
    """Base error carrying a user-facing message, a code, and an HTTP status."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ValidationFailure(RightGuardError):
    """Missing or malformed input. Never retried."""

    status_code = 400
    code = "validation_error"


class NotFoundError(RightGuardError):
    """The requested entity does not exist (or is not visible to the caller)."""

    status_code = 404
    code = "not_found"


class IntegrationError(RightGuardError):
    """An upstream integration (LLM, IPFS, chain RPC, notification channel) failed."""

    status_code = 500
    code = "integration_error"


class UnauthenticatedError(RightGuardError):
    """A client action needs a current user and there is none."""

    status_code = 401
    code = "unauthenticated"


class TransportError(RightGuardError):
    """The client could not reach the API or could not parse its reply."""

    status_code = 503
    code = "transport_error"


class ApiError(RightGuardError):
    """Client-side view of a failure envelope returned by the API."""

    code = "api_error"


__all__ = [
    "ApiError",
    "IntegrationError",
    "NotFoundError",
    "RightGuardError",
    "TransportError",
    "UnauthenticatedError",
    "ValidationFailure",
]
