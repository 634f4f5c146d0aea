"""Repo-wide test fixtures.

Snapshots and restores XRPL_SALE_* environment variables between tests
so config-loading tests cannot leak into each other.
"""

from __future__ import annotations

import os

import pytest

_SENSITIVE_ENV_VARS = [
    "XRPL_SALE_API_KEY",
    "XRPL_SALE_ENVIRONMENT",
    "XRPL_SALE_BASE_URL",
    "XRPL_SALE_TIMEOUT",
    "XRPL_SALE_MAX_RETRIES",
    "XRPL_SALE_RETRY_DELAY",
    "XRPL_SALE_WEBHOOK_SECRET",
    "XRPL_SALE_DEBUG",
    "XRPL_SALE_LOG_FORMAT",
    "XRPL_SALE_RETRY_JITTER",
]


@pytest.fixture(autouse=True)
def _restore_env():
    """Snapshot sensitive env vars before each test and restore after."""
    snapshot = {}
    for var in _SENSITIVE_ENV_VARS:
        val = os.environ.get(var)
        if val is not None:
            snapshot[var] = val

    yield

    # Restore: remove any that were added, reset any that changed
    for var in _SENSITIVE_ENV_VARS:
        if var in snapshot:
            os.environ[var] = snapshot[var]
        else:
            os.environ.pop(var, None)
