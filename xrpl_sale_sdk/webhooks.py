"""Webhook signature verification and event dispatch.

Signatures are ``"sha256=" + hex(HMAC-SHA256(secret, raw_body))`` sent in
the ``X-XRPL-Sale-Signature`` header. Payloads must be verified before they
are parsed.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Callable, Dict, List, Mapping, Optional, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from xrpl_sale_sdk.errors import DeserializationError, WebhookSignatureError
from xrpl_sale_sdk.models import WebhookEvent

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-XRPL-Sale-Signature"
SIGNATURE_PREFIX = "sha256="

Payload = Union[bytes, str]
WebhookHandler = Callable[[WebhookEvent], None]


def _as_bytes(value: Payload) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(payload: Payload, secret: str) -> str:
    """Return the expected signature header value for ``payload``."""
    digest = hmac.new(_as_bytes(secret), _as_bytes(payload), hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(
    payload: Payload,
    signature_header: Optional[str],
    secret: Optional[str],
) -> bool:
    """True iff ``signature_header`` matches the payload's HMAC.

    Case-insensitive and constant-time. Never raises: a missing secret or
    header is simply a failed verification.
    """
    if not secret or not signature_header:
        return False
    expected = compute_signature(payload, secret).encode("ascii")
    provided = signature_header.lower().encode("utf-8")
    return hmac.compare_digest(expected, provided)


def parse_webhook_event(payload: Payload) -> WebhookEvent:
    """Deserialize a verified webhook payload."""
    try:
        return WebhookEvent.model_validate_json(payload)
    except (PydanticValidationError, ValueError) as exc:
        raise DeserializationError(0, f"Failed to parse webhook event: {exc}") from exc


class WebhookReceiver:
    """Framework-agnostic webhook endpoint helper.

    Usage::

        receiver = WebhookReceiver(secret="whsec_...")

        @receiver.on("investment.created")
        def handle_investment(event):
            ...

        # inside any web framework's route:
        receiver.handle(raw_body, request.headers)
    """

    def __init__(self, secret: Optional[str], *, verify_signatures: bool = True) -> None:
        if verify_signatures and not secret:
            raise ValueError("A webhook secret is required when signatures are verified")
        self._secret = secret
        self._verify = verify_signatures
        self._handlers: Dict[str, List[WebhookHandler]] = {}

    def on(self, event_type: str) -> Callable[[WebhookHandler], WebhookHandler]:
        """Register a handler for ``event_type`` (``"*"`` matches every event)."""

        def register(fn: WebhookHandler) -> WebhookHandler:
            self._handlers.setdefault(event_type, []).append(fn)
            return fn

        return register

    def handle(self, payload: Payload, headers: Mapping[str, str]) -> WebhookEvent:
        """Verify, parse and dispatch one delivery.

        Raises:
            WebhookSignatureError: signature missing or wrong; nothing is parsed.
            DeserializationError: signature valid but the body is malformed.
        """
        if self._verify:
            signature = httpx.Headers(headers).get(SIGNATURE_HEADER)
            if not verify_signature(payload, signature, self._secret):
                logger.warning("Rejected webhook delivery: invalid or missing signature")
                raise WebhookSignatureError("Invalid webhook signature")

        event = parse_webhook_event(payload)
        handlers = self._handlers.get(event.type, []) + self._handlers.get("*", [])
        if not handlers:
            logger.debug("No handler registered for webhook event %s", event.type)
        for fn in handlers:
            fn(event)
        return event
