"""XRPL.Sale Python SDK — typed client for the XRPL.Sale token sale API."""

from xrpl_sale_sdk.client import XRPLSaleClient
from xrpl_sale_sdk.async_client import AsyncXRPLSaleClient
from xrpl_sale_sdk.config import ClientConfig, Environment, load_config
from xrpl_sale_sdk.errors import (
    ApiError,
    AuthenticationError,
    ClientClosedError,
    DeserializationError,
    NotFoundError,
    RateLimitError,
    RequestCancelledError,
    ValidationError,
    WebhookSignatureError,
    XRPLSaleError,
)
from xrpl_sale_sdk.models import ProjectStatus, SortOrder, TrendingPeriod, WebhookEvent
from xrpl_sale_sdk.request_spec import RequestSpec
from xrpl_sale_sdk.webhooks import WebhookReceiver, verify_signature

__version__ = "1.0.0"

__all__ = [
    "XRPLSaleClient",
    "AsyncXRPLSaleClient",
    "ClientConfig",
    "Environment",
    "load_config",
    "RequestSpec",
    "ApiError",
    "AuthenticationError",
    "ClientClosedError",
    "DeserializationError",
    "NotFoundError",
    "RateLimitError",
    "RequestCancelledError",
    "ValidationError",
    "WebhookSignatureError",
    "XRPLSaleError",
    "ProjectStatus",
    "SortOrder",
    "TrendingPeriod",
    "WebhookEvent",
    "WebhookReceiver",
    "verify_signature",
]
