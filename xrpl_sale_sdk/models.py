"""Pydantic models for the XRPL.Sale SDK.

Field names are the snake_case names used on the wire, so models validate
response bodies directly and dump request bodies without renaming.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# ── Enumerations ─────────────────────────────────────────────────

class ProjectStatus(str, Enum):
    DRAFT = "draft"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TrendingPeriod(str, Enum):
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"


# ── Errors ───────────────────────────────────────────────────────

class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned with non-2xx responses."""

    message: str = "Unknown error occurred"
    details: List[ErrorDetail] = Field(default_factory=list)


# ── Webhooks ─────────────────────────────────────────────────────

class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None
    created_at: Optional[str] = None


# ── Pagination ───────────────────────────────────────────────────

class Pagination(BaseModel):
    model_config = ConfigDict(extra="allow")

    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 0


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T] = Field(default_factory=list)
    pagination: Optional[Pagination] = None


# ── Projects ─────────────────────────────────────────────────────

class ProjectTier(BaseModel):
    model_config = ConfigDict(extra="allow")

    tier: int
    price_per_token: str
    total_tokens: str
    min_investment: Optional[str] = None
    max_investment: Optional[str] = None


class Project(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    token_symbol: Optional[str] = None
    total_supply: Optional[str] = None
    status: Optional[str] = None
    sale_start_date: Optional[str] = None
    sale_end_date: Optional[str] = None
    tiers: List[ProjectTier] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProjectStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    project_id: str
    total_raised_xrp: str = "0"
    total_investors: int = 0
    tokens_sold: str = "0"
    progress_percentage: float = 0.0


class CreateProjectRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: str
    token_symbol: str
    total_supply: str
    tiers: List[ProjectTier] = Field(default_factory=list)
    sale_start_date: Optional[str] = None
    sale_end_date: Optional[str] = None


class UpdateProjectRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    sale_start_date: Optional[str] = None
    sale_end_date: Optional[str] = None


# ── Investments ──────────────────────────────────────────────────

class Investment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    project_id: Optional[str] = None
    investor_account: Optional[str] = None
    amount_xrp: Optional[str] = None
    token_amount: Optional[str] = None
    status: Optional[str] = None
    transaction_hash: Optional[str] = None
    created_at: Optional[str] = None
