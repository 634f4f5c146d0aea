"""Tests for AsyncXRPLSaleClient: headers, executor pipeline, cancellation, shutdown.

Target: ~16 tests, runtime <0.5s
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import List

import httpx
import pytest

from xrpl_sale_sdk import AsyncXRPLSaleClient, RequestSpec
from xrpl_sale_sdk.errors import (
    ClientClosedError,
    RateLimitError,
    RequestCancelledError,
    ValidationError,
)
from xrpl_sale_sdk.models import Project
from xrpl_sale_sdk.request_spec import USER_AGENT


def run_async(coro):
    """Helper to run async coroutine in sync test."""
    return asyncio.run(coro)


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"id": "proj_1"})


@pytest.fixture()
def async_sleeps(monkeypatch) -> List[float]:
    delays: List[float] = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay, result=None):
        if delay:
            delays.append(delay)
        await real_sleep(0)
        return result

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return delays


class TestHeaders:
    """Credential and identity headers."""

    def test_api_key_header_by_default(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers)
            return _ok(request)

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="test-key", transport=httpx.MockTransport(handler)
            ) as client:
                await client.get("/projects/proj_1")

        run_async(scenario())
        headers = seen[0]
        assert headers["X-API-Key"] == "test-key"
        assert "Authorization" not in headers
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"] == USER_AGENT
        assert len(headers["X-Request-ID"]) == 12

    def test_bearer_token_supersedes_api_key(self) -> None:
        """Once a token is set, Authorization replaces X-API-Key."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers)
            return _ok(request)

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="test-key", transport=httpx.MockTransport(handler)
            ) as client:
                await client.get("/projects/proj_1")
                client.auth_token = "jwt-token"
                await client.get("/projects/proj_1")
                assert client.config.api_key == "test-key"
                client.auth_token = None
                await client.get("/projects/proj_1")

        run_async(scenario())
        assert "Authorization" not in seen[0]
        assert seen[1]["Authorization"] == "Bearer jwt-token"
        assert "X-API-Key" not in seen[1]
        assert seen[2]["X-API-Key"] == "test-key"


class TestExecutor:
    """URL, body and classification through execute()."""

    def test_url_combines_base_and_query(self) -> None:
        urls = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200, json={"data": []})

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", environment="testnet", transport=httpx.MockTransport(handler)
            ) as client:
                await client.get("/projects/search", [("q", "xrp token"), ("page", 2)])

        run_async(scenario())
        assert urls == ["https://api-testnet.xrpl.sale/v1/projects/search?q=xrp%20token&page=2"]

    def test_body_serialized_as_json(self) -> None:
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append((request.method, request.headers["Content-Type"], json.loads(request.content)))
            return httpx.Response(201, json={"id": "inv_1"})

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                return await client.post(
                    "/investments", {"project_id": "proj_1", "amount_xrp": "250"}
                )

        result = run_async(scenario())
        assert result == {"id": "inv_1"}
        assert bodies == [
            ("POST", "application/json", {"project_id": "proj_1", "amount_xrp": "250"})
        ]

    def test_validation_error_surfaces(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={
                    "message": "invalid amount",
                    "details": [{"field": "amount_xrp", "message": "must be positive"}],
                },
            )

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                await client.post("/investments", {"amount_xrp": "-1"})

        with pytest.raises(ValidationError) as exc_info:
            run_async(scenario())
        assert exc_info.value.message == "invalid amount"
        assert exc_info.value.details[0].field == "amount_xrp"

    def test_rate_limit_surfaces_retry_after(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                429, json={"message": "Too many requests"}, headers={"Retry-After": "30"}
            )

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                await client.get("/projects")

        with pytest.raises(RateLimitError) as exc_info:
            run_async(scenario())
        assert exc_info.value.retry_after == 30

    def test_two_failures_then_success(self, async_sleeps) -> None:
        """maxRetries=2, baseDelay=1s: fail, fail, succeed after waits of 1s and 2s."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) <= 2:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, json={"id": "proj_1"})

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k",
                max_retries=2,
                retry_delay=1.0,
                transport=httpx.MockTransport(handler),
            ) as client:
                return await client.execute(
                    RequestSpec("GET", "/projects/proj_1"), response_model=Project
                )

        project = run_async(scenario())
        assert isinstance(project, Project)
        assert project.id == "proj_1"
        assert len(calls) == 3
        assert async_sleeps == [1.0, 2.0]

    def test_concurrent_calls_are_independent(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1]})

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                return await asyncio.gather(
                    *(client.get(f"/projects/p{i}", response_model=Project) for i in range(5))
                )

        projects = run_async(scenario())
        assert [p.id for p in projects] == ["p0", "p1", "p2", "p3", "p4"]


class TestCancellation:
    """Caller cancel events and deadlines."""

    def test_cancel_event_aborts_in_flight_request(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200, json={"id": "late"})

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                cancel = asyncio.Event()
                loop = asyncio.get_running_loop()
                loop.call_later(0.05, cancel.set)
                t0 = loop.time()
                with pytest.raises(RequestCancelledError, match="cancelled"):
                    await client.get("/projects", cancel_event=cancel)
                return loop.time() - t0

        assert run_async(scenario()) < 2.0

    def test_cancel_event_skips_pending_retry(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("down", request=request)

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k",
                max_retries=5,
                retry_delay=30.0,
                transport=httpx.MockTransport(handler),
            ) as client:
                cancel = asyncio.Event()
                loop = asyncio.get_running_loop()
                loop.call_later(0.05, cancel.set)
                t0 = loop.time()
                with pytest.raises(RequestCancelledError):
                    await client.get("/projects", cancel_event=cancel)
                return loop.time() - t0

        assert run_async(scenario()) < 2.0
        assert len(calls) == 1

    def test_already_set_event_sends_nothing(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return _ok(request)

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                cancel = asyncio.Event()
                cancel.set()
                with pytest.raises(RequestCancelledError):
                    await client.get("/projects", cancel_event=cancel)

        run_async(scenario())
        assert calls == []

    def test_deadline_exceeded(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return _ok(request)

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                with pytest.raises(RequestCancelledError, match="deadline"):
                    await client.get("/projects", timeout=0.05)

        run_async(scenario())

    def test_task_cancellation_propagates(self) -> None:
        """asyncio task cancellation is not converted into an SDK error."""
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return _ok(request)

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                task = asyncio.ensure_future(client.get("/projects"))
                await asyncio.sleep(0.05)
                task.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await task

        run_async(scenario())


class TestShutdown:
    """Scoped ownership of the connection pool."""

    def test_call_after_close_fails_fast(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return _ok(request)

        async def scenario():
            client = AsyncXRPLSaleClient(api_key="k", transport=httpx.MockTransport(handler))
            await client.close()
            assert client.closed is True
            with pytest.raises(ClientClosedError):
                await client.get("/projects")
            await client.close()  # idempotent

        run_async(scenario())
        assert calls == []

    def test_close_stops_pending_retry(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("down", request=request)

        async def scenario():
            client = AsyncXRPLSaleClient(
                api_key="k",
                max_retries=5,
                retry_delay=0.05,
                transport=httpx.MockTransport(handler),
            )
            call = asyncio.ensure_future(client.get("/projects"))
            await asyncio.sleep(0.01)
            await client.close()
            with pytest.raises(ClientClosedError):
                await call

        run_async(scenario())
        assert len(calls) == 1

    def test_context_manager_closes(self) -> None:
        async def scenario():
            async with AsyncXRPLSaleClient(api_key="k") as client:
                assert isinstance(client, AsyncXRPLSaleClient)
            return client

        assert run_async(scenario()).closed is True


class TestLogging:
    """Request and retry log lines never carry credentials."""

    def test_json_log_line(self, caplog) -> None:
        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="secret-api-key",
                log_format="json",
                transport=httpx.MockTransport(_ok),
            ) as client:
                client.auth_token = "secret-token"
                await client.get("/projects/proj_1")

        with caplog.at_level(logging.DEBUG, logger="xrpl_sale_sdk"):
            run_async(scenario())

        records = [r for r in caplog.records if r.name == "xrpl_sale_sdk.async_client"]
        events = []
        for record in records:
            try:
                events.append(json.loads(record.getMessage()))
            except ValueError:
                pass
        assert len(events) == 1
        event = events[0]
        assert {"ts", "level", "request_id", "method", "path", "status", "elapsed_ms", "attempts"} <= event.keys()
        assert event["status"] == 200
        assert event["attempts"] == 1
        for record in caplog.records:
            assert "secret-api-key" not in record.getMessage()
            assert "secret-token" not in record.getMessage()

    def test_retry_warning(self, caplog, async_sleeps) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("down", request=request)
            return _ok(request)

        async def scenario():
            async with AsyncXRPLSaleClient(
                api_key="k", transport=httpx.MockTransport(handler)
            ) as client:
                await client.get("/projects/proj_1")

        with caplog.at_level(logging.WARNING, logger="xrpl_sale_sdk"):
            run_async(scenario())
        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert "Retry 1 after 1000ms (ConnectError)" in messages


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
