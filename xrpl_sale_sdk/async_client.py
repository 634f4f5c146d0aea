"""AsyncXRPLSaleClient — asynchronous Python SDK for the XRPL.Sale API.

Every endpoint call goes through ``execute()``: build the URL and headers,
send under the retry policy, classify the final outcome.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Optional, TypeVar

import httpx

from xrpl_sale_sdk.auth import AuthState
from xrpl_sale_sdk.config import ClientConfig
from xrpl_sale_sdk.errors import ApiError, ClientClosedError, RequestCancelledError
from xrpl_sale_sdk.models import WebhookEvent
from xrpl_sale_sdk.projects import AsyncProjectsService
from xrpl_sale_sdk.request_spec import RequestSpec, build_headers, log_request_done, serialize_body
from xrpl_sale_sdk.responses import TransportFailure, classify, outcome_from_response
from xrpl_sale_sdk.retry import REQUEST_ERRORS, TRANSPORT_ERRORS, RetryPolicy
from xrpl_sale_sdk.utils import QueryParams, generate_request_id, redact_text
from xrpl_sale_sdk.webhooks import Payload, parse_webhook_event, verify_signature

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncXRPLSaleClient:
    """Asynchronous client for the XRPL.Sale API.

    Usage::

        import asyncio
        from xrpl_sale_sdk import AsyncXRPLSaleClient

        async def main():
            async with AsyncXRPLSaleClient(api_key="...", environment="testnet") as c:
                page = await c.projects.active()
                print([p.id for p in page.data])

        asyncio.run(main())

    Safe for concurrent use from many tasks. Each ``execute()`` call is
    independent; retries of one call run strictly one after another.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **options: Any,
    ) -> None:
        """Initialize async client.

        Args:
            config: Complete client configuration. Mutually exclusive with
                ``options``.
            transport: httpx transport to send requests through (tests use
                ``httpx.MockTransport``).
            **options: ClientConfig fields, e.g. ``api_key="..."``.
        """
        if config is not None and options:
            raise TypeError("Pass either a ClientConfig or keyword options, not both")
        self._config = config if config is not None else ClientConfig(**options)
        self._auth = AuthState()
        self._retry = RetryPolicy.from_config(self._config)
        self._closed = False
        if self._config.debug:
            logging.getLogger("xrpl_sale_sdk").setLevel(logging.DEBUG)
        self._client = httpx.AsyncClient(
            base_url=self._config.resolved_base_url,
            timeout=self._config.timeout,
            transport=transport,
        )
        self.projects = AsyncProjectsService(self)

    # ── Properties ───────────────────────────────────────────────

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def auth_token(self) -> Optional[str]:
        """Bearer token; when set it replaces X-API-Key on later requests."""
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
    def _remaining(deadline: Optional[float]) -> Optional[float]:
        if deadline is None:
            return None
        return max(0.0, deadline - asyncio.get_running_loop().time())

    async def _race(
        self,
        aw: Awaitable[T],
        cancel_event: Optional[asyncio.Event],
        deadline: Optional[float],
    ) -> T:
        """Await ``aw`` unless the cancel event fires or the deadline passes first.

        The loser is cancelled, so an aborted transport call releases its
        connection and an aborted backoff sleep ends immediately.
        """
        if cancel_event is None and deadline is None:
            return await aw

        task = asyncio.ensure_future(aw)
        waiters = {task}
        cancel_waiter: Optional[asyncio.Future] = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)
        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self._remaining(deadline),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if task in done:
            return task.result()
        if cancel_waiter is not None and cancel_waiter in done:
            raise RequestCancelledError("Request cancelled by caller")
        raise RequestCancelledError("Request deadline exceeded")

    def _check_cancelled(
        self, cancel_event: Optional[asyncio.Event], deadline: Optional[float]
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelledError("Request cancelled by caller")
        if deadline is not None and self._remaining(deadline) == 0.0:
            raise RequestCancelledError("Request deadline exceeded")

    # ── Request executor ─────────────────────────────────────────

    async def execute(
        self,
        spec: RequestSpec,
        *,
        response_model: Any = None,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Run one API call and return the decoded response.

        Args:
            spec: method, endpoint, ordered query pairs and optional body.
            response_model: type to validate the JSON body into (pydantic
                model, ``List[Model]``, ...). None returns plain JSON.
            cancel_event: setting it aborts the in-flight wait and any
                pending retry.
            timeout: deadline in seconds for the whole call, retries included.

        Raises:
            ApiError: classified HTTP failure (see STATUS_ERRORS), or
                ``status_code=0`` once transport retries are exhausted or
                httpx fails the request without a response (decoding,
                redirect loop).
            DeserializationError: the success body did not match ``response_model``.
            RequestCancelledError: cancel event fired or deadline passed.
            ClientClosedError: the client was closed before or during the call.
        """
        self._ensure_open()
        deadline = None
        if timeout is not None:
            deadline = asyncio.get_running_loop().time() + timeout

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
                resp = await self._race(
                    self._client.request(spec.method, url, headers=headers, json=body),
                    cancel_event,
                    deadline,
                )
            except TRANSPORT_ERRORS as exc:
                if self._closed:
                    raise ClientClosedError("Client closed during request") from exc
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
                await self._race(asyncio.sleep(decision.delay), cancel_event, deadline)
                continue
            except REQUEST_ERRORS as exc:
                raise ApiError(0, f"Request failed: {exc}", None, request_id) from exc
            except RuntimeError as exc:
                # httpx refuses to send on a closed pool.
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

    async def get(
        self,
        endpoint: str,
        params: Optional[QueryParams] = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.execute(
            RequestSpec("GET", endpoint, params),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    async def post(
        self,
        endpoint: str,
        data: Any = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.execute(
            RequestSpec("POST", endpoint, body=data),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    async def put(
        self,
        endpoint: str,
        data: Any = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.execute(
            RequestSpec("PUT", endpoint, body=data),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    async def patch(
        self,
        endpoint: str,
        data: Any = None,
        *,
        response_model: Any = None,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.execute(
            RequestSpec("PATCH", endpoint, body=data),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    async def delete(
        self,
        endpoint: str,
        *,
        response_model: Any = None,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.execute(
            RequestSpec("DELETE", endpoint),
            response_model=response_model,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    # ── Webhooks ─────────────────────────────────────────────────

    def verify_webhook_signature(
        self, payload: Payload, signature: Optional[str], secret: Optional[str] = None
    ) -> bool:
        """Check an X-XRPL-Sale-Signature value; defaults to the configured secret."""
        return verify_signature(
            payload, signature, secret if secret is not None else self._config.webhook_secret
        )

    def parse_webhook_event(self, payload: Payload) -> WebhookEvent:
        """Parse a payload that already passed ``verify_webhook_signature``."""
        return parse_webhook_event(payload)

    # ── Context Manager ─────────────────────────────────────────

    async def __aenter__(self) -> "AsyncXRPLSaleClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Later calls raise ClientClosedError."""
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()
