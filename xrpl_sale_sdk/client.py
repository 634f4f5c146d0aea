"""XRPLSaleClient — typed synchronous Python SDK for the XRPL.Sale API."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional

import httpx

from xrpl_sale_sdk.auth import AuthState
from xrpl_sale_sdk.config import ClientConfig
from xrpl_sale_sdk.errors import ApiError, ClientClosedError, RequestCancelledError
from xrpl_sale_sdk.models import WebhookEvent
from xrpl_sale_sdk.projects import ProjectsService
from xrpl_sale_sdk.request_spec import RequestSpec, build_headers, log_request_done, serialize_body
from xrpl_sale_sdk.responses import TransportFailure, classify, outcome_from_response
from xrpl_sale_sdk.retry import REQUEST_ERRORS, TRANSPORT_ERRORS, RetryPolicy
from xrpl_sale_sdk.utils import QueryParams, generate_request_id, redact_text
from xrpl_sale_sdk.webhooks import Payload, parse_webhook_event, verify_signature

logger = logging.getLogger(__name__)


class XRPLSaleClient:
    """Synchronous client for the XRPL.Sale API.

    Usage::

        from xrpl_sale_sdk import XRPLSaleClient

        with XRPLSaleClient(api_key="...") as c:
            project = c.projects.get("proj_123")
            print(project.name)

    A ``threading.Event`` passed as ``cancel_event`` stops further attempts
    and cuts any backoff wait short. An attempt already on the wire runs
    until it answers or hits the remaining deadline.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        **options: Any,
    ) -> None:
        if config is not None and options:
            raise TypeError("Pass either a ClientConfig or keyword options, not both")
        self._config = config if config is not None else ClientConfig(**options)
        self._auth = AuthState()
        self._retry = RetryPolicy.from_config(self._config)
        self._closed = False
        if self._config.debug:
            logging.getLogger("xrpl_sale_sdk").setLevel(logging.DEBUG)
        self._client = httpx.Client(
            base_url=self._config.resolved_base_url,
            timeout=self._config.timeout,
            transport=transport,
        )
        self.projects = ProjectsService(self)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def auth_token(self) -> Optional[str]:
        return self._auth.token

    @auth_token.setter
    def auth_token(self, token: Optional[str]) -> None:
        self._auth.token = token

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Internal helpers ─────────────────────────────────────────

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientClosedError("Client is closed")

    @staticmethod
    def _check_cancelled(
        cancel_event: Optional[threading.Event], deadline: Optional[float]
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelledError("Request cancelled by caller")
        if deadline is not None and time.monotonic() >= deadline:
            raise RequestCancelledError("Request deadline exceeded")

    def _attempt_timeout(self, deadline: Optional[float]) -> float:
        if deadline is None:
            return self._config.timeout
        return max(0.0, min(self._config.timeout, deadline - time.monotonic()))

    def _backoff(
        self,
        delay: float,
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> None:
        if deadline is not None:
            delay = min(delay, max(0.0, deadline - time.monotonic()))
        if cancel_event is not None:
            if cancel_event.wait(delay):
                raise RequestCancelledError("Request cancelled by caller")
        else:
            time.sleep(delay)
        self._check_cancelled(cancel_event, deadline)

    # ── Request executor ─────────────────────────────────────────

    def execute(
        self,
        spec: RequestSpec,
        *,
        response_model: Any = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Run one API call and return the decoded response.

        Same contract as ``AsyncXRPLSaleClient.execute``, except that
        ``cancel_event`` is only checked between attempts and during backoff.
        An attempt already on the wire runs until it answers or the deadline
        expires; use the async client when in-flight cancellation must be
        prompt.
        """
        self._ensure_open()
        deadline = None if timeout is None else time.monotonic() + timeout
        request_id = generate_request_id()
        url = spec.url
        body = serialize_body(spec.body) if spec.body is not None else None
        t0 = time.monotonic()
        attempt = 0

        while True:
            self._ensure_open()
            self._check_cancelled(cancel_event, deadline)
            headers = build_headers(self._config, self._auth, request_id)
            logger.debug("%s %s", spec.method, redact_text(url))

            try:
                resp = self._client.request(
                    spec.method,
                    url,
                    headers=headers,
                    json=body,
                    timeout=self._attempt_timeout(deadline),
                )
            except TRANSPORT_ERRORS as exc:
                if self._closed:
                    raise ClientClosedError("Client closed during request") from exc
                if deadline is not None and time.monotonic() >= deadline:
                    raise RequestCancelledError("Request deadline exceeded") from exc
                decision = self._retry.should_retry(attempt, TransportFailure(exc))
                if not decision.retry:
                    raise ApiError(
                        0,
                        f"Network error after {attempt} retries: {exc}",
                        None,
                        request_id,
                    ) from exc
                attempt += 1
                logger.warning(
                    "Retry %d after %dms (%s)",
                    attempt,
                    int(decision.delay * 1000),
                    type(exc).__name__,
                )
                self._backoff(decision.delay, cancel_event, deadline)
                continue
            except REQUEST_ERRORS as exc:
                raise ApiError(0, f"Request failed: {exc}", None, request_id) from exc
            except RuntimeError as exc:
                if self._closed:
                    raise ClientClosedError("Client closed during request") from exc
                raise

            log_request_done(
                logger,
                self._config,
                request_id=request_id,
                method=spec.method,
                url=url,
                status=resp.status_code,
                elapsed_ms=int((time.monotonic() - t0) * 1000),
                attempts=attempt + 1,
            )
            return classify(outcome_from_response(resp), response_model)

    def get(
        self,
        endpoint: str,
        params: Optional[QueryParams] = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """GET ``endpoint`` with ordered query ``params``."""
        return self.execute(
            RequestSpec("GET", endpoint, params),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    def post(
        self,
        endpoint: str,
        data: Any = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return self.execute(
            RequestSpec("POST", endpoint, body=data),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    def put(
        self,
        endpoint: str,
        data: Any = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return self.execute(
            RequestSpec("PUT", endpoint, body=data),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    def patch(
        self,
        endpoint: str,
        data: Any = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return self.execute(
            RequestSpec("PATCH", endpoint, body=data),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    def delete(
        self,
        endpoint: str,
        *,
        response_model: Any = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return self.execute(
            RequestSpec("DELETE", endpoint),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    # ── Webhooks ─────────────────────────────────────────────────

    def verify_webhook_signature(
        self, payload: Payload, signature: Optional[str], secret: Optional[str] = None
    ) -> bool:
        return verify_signature(
            payload, signature, secret if secret is not None else self._config.webhook_secret
        )

    def parse_webhook_event(self, payload: Payload) -> WebhookEvent:
        return parse_webhook_event(payload)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._closed:
            return
        self._closed = True
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
