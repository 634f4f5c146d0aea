"""Retry policy: which failures are re-attempted, and after how long.

Only transport failures (connection, proxy and protocol errors, timeouts)
are retried. HTTP error responses are application-level answers and go
straight to classification.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from xrpl_sale_sdk.config import ClientConfig
from xrpl_sale_sdk.responses import HttpError, Outcome, TransportFailure

# httpx exceptions that mean the exchange never completed.
TRANSPORT_ERRORS = (httpx.TransportError,)

# Everything else httpx raises while sending (decoding, redirects); not retried.
REQUEST_ERRORS = (httpx.RequestError,)


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay: float = 0.0


NO_RETRY = RetryDecision(retry=False)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff over transport failures.

    Attempt 0 is the initial try, so a request is tried at most
    ``max_retries + 1`` times. The wait before attempt N (N >= 1) is
    ``base_delay * 2 ** (N - 1)``. With ``jitter`` the wait is drawn
    uniformly from ``[0, that delay]``.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    jitter: bool = False
    rand: Optional[Callable[[float, float], float]] = None

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries,
            base_delay=config.retry_delay,
            jitter=config.retry_jitter,
        )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def backoff(self, attempt: int) -> float:
        """Delay before ``attempt`` (1-based retry number)."""
        delay = self.base_delay * (2 ** (attempt - 1))
        if self.jitter:
            draw = self.rand or random.uniform
            return draw(0.0, delay)
        return delay

    def should_retry(self, attempt: int, outcome: Outcome) -> RetryDecision:
        """Decide what follows the failed ``attempt`` (0 = initial try)."""
        if isinstance(outcome, HttpError):
            return NO_RETRY
        if not isinstance(outcome, TransportFailure):
            return NO_RETRY
        if attempt >= self.max_retries:
            return NO_RETRY
        return RetryDecision(retry=True, delay=self.backoff(attempt + 1))
