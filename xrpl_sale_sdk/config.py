"""Client configuration for the XRPL.Sale SDK.

Reads environment variables with sensible defaults. Immutable once built.
Never exposes secrets in repr or serialization.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

PRODUCTION_URL = "https://api.xrpl.sale/v1"
TESTNET_URL = "https://api-testnet.xrpl.sale/v1"

LOG_FORMATS = ("text", "json")


class Environment(str, Enum):
    PRODUCTION = "production"
    TESTNET = "testnet"


def _bool_env(key: str, default: bool) -> bool:
    """Parse a 0/1 env var to bool."""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.strip() in ("1", "true", "yes", "True", "TRUE")


def _int_env(key: str, default: int) -> int:
    """Parse an int env var with fallback."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _float_env(key: str, default: float) -> float:
    """Parse a float env var with fallback."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration. Safe to log — secrets are masked."""

    api_key: str
    environment: Environment = Environment.PRODUCTION
    base_url: Optional[str] = None
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    webhook_secret: Optional[str] = None
    debug: bool = False
    log_format: str = "text"
    retry_jitter: bool = False

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key is required")
        # Accept plain strings such as "testnet" for the environment.
        object.__setattr__(self, "environment", Environment(self.environment))
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")
        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}"
            )

    @property
    def resolved_base_url(self) -> str:
        """Explicit override if set, else the default host for the environment."""
        if self.base_url:
            return self.base_url.rstrip("/")
        if self.environment is Environment.TESTNET:
            return TESTNET_URL
        return PRODUCTION_URL

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key={'***' if self.api_key else ''!r}, "
            f"environment={self.environment.value!r}, base_url={self.base_url!r}, "
            f"timeout={self.timeout}, max_retries={self.max_retries}, "
            f"retry_delay={self.retry_delay}, "
            f"webhook_secret={'***' if self.webhook_secret else None!r}, "
            f"debug={self.debug}, log_format={self.log_format!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict with secrets masked."""
        return {
            "api_key": "configured" if self.api_key else "not set",
            "environment": self.environment.value,
            "base_url": self.resolved_base_url,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "retry_delay": self.retry_delay,
            "webhook_secret": "configured" if self.webhook_secret else "not set",
            "debug": self.debug,
            "log_format": self.log_format,
            "retry_jitter": self.retry_jitter,
        }


def load_config(**overrides: Any) -> ClientConfig:
    """Load client configuration from environment with optional overrides.

    Args:
        **overrides: ClientConfig field values that take precedence over
            the XRPL_SALE_* environment variables.

    Returns:
        ClientConfig instance

    Raises:
        ValueError: if no API key is configured or a value is out of range.
    """
    values: Dict[str, Any] = {
        "api_key": os.environ.get("XRPL_SALE_API_KEY", ""),
        "environment": os.environ.get("XRPL_SALE_ENVIRONMENT", "production").strip().lower(),
        "base_url": os.environ.get("XRPL_SALE_BASE_URL") or None,
        "timeout": _float_env("XRPL_SALE_TIMEOUT", 30.0),
        "max_retries": _int_env("XRPL_SALE_MAX_RETRIES", 3),
        "retry_delay": _float_env("XRPL_SALE_RETRY_DELAY", 1.0),
        "webhook_secret": os.environ.get("XRPL_SALE_WEBHOOK_SECRET") or None,
        "debug": _bool_env("XRPL_SALE_DEBUG", False),
        "log_format": os.environ.get("XRPL_SALE_LOG_FORMAT", "text"),
        "retry_jitter": _bool_env("XRPL_SALE_RETRY_JITTER", False),
    }
    values.update(overrides)
    return ClientConfig(**values)
