"""Domain errors raised by the service layer.

Routes let these propagate; ``register_error_handlers`` turns them into the
shared ``{"error", "message", "detail"}`` envelope.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status."""

    default_error = "internal_error"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error = error or self.default_error
        self.status_code = status_code or self.default_status
        self.detail = detail


class NotFoundError(ServiceError):
    """Row missing, or owned by another user."""

    default_error = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class InvalidRequestError(ServiceError):
    """Request is well-formed but violates a business rule."""

    default_error = "invalid_request"
    default_status = status.HTTP_400_BAD_REQUEST


class UpstreamError(ServiceError):
    """A third-party HTTP call failed; carries the status to report."""

    default_error = "upstream_error"
    default_status = status.HTTP_502_BAD_GATEWAY


class ConfigurationError(ServiceError):
    default_error = "not_configured"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


__all__ = [
    "ServiceError",
    "NotFoundError",
    "InvalidRequestError",
    "UpstreamError",
    "ConfigurationError",
]
