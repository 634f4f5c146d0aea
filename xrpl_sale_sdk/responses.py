"""Response classification: transport outcomes to typed values or typed errors.

A finished exchange is captured as one of three outcomes (``Success``,
``TransportFailure``, ``HttpError``) and ``classify()`` turns it into the
decoded response or raises the matching ``ApiError`` subclass.
"""

from __future__ import annotations

import functools
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from xrpl_sale_sdk.errors import (
    ApiError,
    AuthenticationError,
    DeserializationError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from xrpl_sale_sdk.models import ErrorResponse
from xrpl_sale_sdk.utils import parse_retry_after

UNKNOWN_ERROR = "Unknown error occurred"


# ── Outcomes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Success:
    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TransportFailure:
    cause: BaseException


@dataclass(frozen=True)
class HttpError:
    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)


Outcome = Union[Success, TransportFailure, HttpError]


def outcome_from_response(resp: httpx.Response) -> Outcome:
    """Wrap a received response as ``Success`` (2xx) or ``HttpError``."""
    if 200 <= resp.status_code < 300:
        return Success(resp.status_code, resp.content, resp.headers)
    return HttpError(resp.status_code, resp.content, resp.headers)


# ── Error classification ─────────────────────────────────────────

# Statuses without an entry classify as a plain ApiError.
STATUS_ERRORS: Dict[int, Type[ApiError]] = {
    400: ValidationError,
    401: AuthenticationError,
    404: NotFoundError,
    429: RateLimitError,
}


def parse_error_envelope(body: bytes) -> Tuple[ErrorResponse, Any]:
    """Decode ``{message, details?}`` from an error body.

    Returns the envelope and the raw decoded body (kept on the exception as
    ``detail``). Empty or unparseable bodies yield the default message.
    """
    if not body or not body.strip():
        return ErrorResponse(), None
    try:
        raw = json.loads(body)
    except ValueError:
        return ErrorResponse(), body.decode("utf-8", errors="replace")
    if not isinstance(raw, dict):
        return ErrorResponse(), raw

    # Also accept the nested form {"error": {"message": ..., "details": ...}}
    source = raw.get("error") if isinstance(raw.get("error"), dict) else raw
    fields = {k: source[k] for k in ("message", "details") if source.get(k) is not None}
    try:
        return ErrorResponse.model_validate(fields), raw
    except PydanticValidationError:
        message = source.get("message")
        return ErrorResponse(message=str(message) if message else UNKNOWN_ERROR), raw


def error_for_status(
    status_code: int,
    body: bytes,
    headers: Optional[Mapping[str, str]] = None,
) -> ApiError:
    """Build the classified error for a non-2xx response."""
    hdrs = httpx.Headers(headers or {})
    envelope, raw = parse_error_envelope(body)
    request_id = hdrs.get("x-request-id")
    error_cls = STATUS_ERRORS.get(status_code, ApiError)

    if error_cls is ValidationError:
        return ValidationError(
            status_code, envelope.message, raw, request_id, details=envelope.details
        )
    if error_cls is RateLimitError:
        return RateLimitError(
            status_code,
            envelope.message,
            raw,
            request_id,
            retry_after=parse_retry_after(hdrs.get("retry-after")),
        )
    return error_cls(status_code, envelope.message, raw, request_id)


# ── Success decoding ─────────────────────────────────────────────

@functools.lru_cache(maxsize=128)
def _adapter(response_model: Any) -> TypeAdapter:
    return TypeAdapter(response_model)


def decode_body(
    body: bytes,
    response_model: Any = None,
    *,
    status_code: int = 200,
    request_id: Optional[str] = None,
) -> Any:
    """Decode a 2xx body into ``response_model`` (plain JSON when None).

    An empty body decodes to None. Anything that fails to parse or validate
    raises DeserializationError; no partial object is returned.
    """
    if not body or not body.strip():
        return None
    try:
        if response_model is None:
            return json.loads(body)
        return _adapter(response_model).validate_json(body)
    except (PydanticValidationError, ValueError) as exc:
        raise DeserializationError(
            status_code,
            f"Failed to decode response body: {exc}",
            None,
            request_id,
        ) from exc


def classify(outcome: Outcome, response_model: Any = None) -> Any:
    """Return the decoded value for ``Success``; raise for anything else."""
    if isinstance(outcome, TransportFailure):
        raise ApiError(0, f"Transport failure: {outcome.cause}") from outcome.cause
    if isinstance(outcome, HttpError):
        raise error_for_status(outcome.status_code, outcome.body, outcome.headers)
    return decode_body(
        outcome.body,
        response_model,
        status_code=outcome.status_code,
        request_id=httpx.Headers(outcome.headers).get("x-request-id"),
    )
