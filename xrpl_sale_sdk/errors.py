"""Structured exceptions for the XRPL.Sale SDK."""

from __future__ import annotations

from typing import Any, List, Optional

from xrpl_sale_sdk.models import ErrorDetail


class XRPLSaleError(Exception):
    """Base exception for everything raised by the SDK."""
    pass


class ApiError(XRPLSaleError):
    """Base exception for all XRPL.Sale API errors.

    Raised as-is for any non-2xx status without a dedicated subclass, and
    with ``status_code=0`` when transport retries are exhausted.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        detail: Any = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.detail = detail
        self.request_id = request_id
        super().__init__(f"[{status_code}] {message}")


class ValidationError(ApiError):
    """400 Bad Request — request failed server-side validation."""

    def __init__(
        self,
        status_code: int,
        message: str,
        detail: Any = None,
        request_id: Optional[str] = None,
        details: Optional[List[ErrorDetail]] = None,
    ) -> None:
        super().__init__(status_code, message, detail, request_id)
        self.details: List[ErrorDetail] = list(details or [])


class AuthenticationError(ApiError):
    """401 Unauthorized — missing or invalid API key or bearer token."""
    pass


class NotFoundError(ApiError):
    """404 Not Found — the requested resource does not exist."""
    pass


class RateLimitError(ApiError):
    """429 Too Many Requests — carries the Retry-After hint when sent."""

    def __init__(
        self,
        status_code: int,
        message: str,
        detail: Any = None,
        request_id: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        super().__init__(status_code, message, detail, request_id)
        self.retry_after = retry_after


class DeserializationError(ApiError):
    """A response or webhook body could not be decoded into the expected type."""
    pass


class ClientClosedError(XRPLSaleError):
    """The client was closed; no request or retry may proceed."""
    pass


class RequestCancelledError(XRPLSaleError):
    """The caller's cancel event fired or the call deadline passed."""
    pass


class WebhookSignatureError(XRPLSaleError):
    """An inbound webhook carried a missing or invalid signature."""
    pass
