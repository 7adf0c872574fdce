"""
Error taxonomy shared by the client, the session store and the dashboards.

The remote client raises these exceptions; everything above it catches them
and hands an ``Outcome`` back to its caller, so nothing in the core escapes
as an uncaught exception.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

import httpx
import pydantic

T = TypeVar("T")


class PortalError(Exception):
    default_message = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        fields: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message or self.default_message)
        # Only what the server (or local validation) actually said; callers
        # fall back to their own default when this is None.
        self.message = message
        self.status_code = status_code
        self.fields = fields or {}


class AuthError(PortalError):
    default_message = "Authentication failed"


class ValidationError(PortalError):
    default_message = "Invalid input"


class ConflictError(PortalError):
    default_message = "Request conflicts with the current state"


class ForbiddenError(PortalError):
    default_message = "Not allowed"


class NotFoundError(PortalError):
    default_message = "Not found"


class NetworkError(PortalError):
    default_message = "Server unreachable"


class StorageError(PortalError):
    default_message = "Could not save session"


_STATUS_ERRORS = {
    400: ValidationError,
    401: AuthError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _message_from_body(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"] or None
    return None


def error_from_response(response: httpx.Response) -> PortalError:
    """Map a non-2xx response onto the taxonomy. 5xx counts as a network failure."""
    error_cls = _STATUS_ERRORS.get(response.status_code)
    if error_cls is None:
        error_cls = NetworkError if response.status_code >= 500 else PortalError
    return error_cls(_message_from_body(response), status_code=response.status_code)


def error_from_pydantic(exc: pydantic.ValidationError) -> ValidationError:
    fields: Dict[str, str] = {}
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        fields.setdefault(loc, err.get("msg", "Invalid value"))
    first = next(iter(fields.values()), None)
    return ValidationError(first, fields=fields)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Explicit result of a fallible operation."""

    ok: bool
    value: Optional[T] = None
    message: Optional[str] = None
    error: Optional[PortalError] = None
    fields: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Any = None) -> "Outcome[Any]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, message: str, error: Optional[PortalError] = None) -> "Outcome[Any]":
        return cls(
            ok=False,
            message=message,
            error=error,
            fields=dict(error.fields) if error is not None else {},
        )
