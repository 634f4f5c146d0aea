"""Projects resource: token sale project endpoints.

Each method is a thin wrapper that builds a RequestSpec and hands it to the
owning client's executor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from xrpl_sale_sdk.models import (
    CreateProjectRequest,
    Investment,
    PaginatedResponse,
    Project,
    ProjectStats,
    ProjectStatus,
    ProjectTier,
    SortOrder,
    TrendingPeriod,
    UpdateProjectRequest,
)
from xrpl_sale_sdk.request_spec import RequestSpec

if TYPE_CHECKING:
    from xrpl_sale_sdk.async_client import AsyncXRPLSaleClient
    from xrpl_sale_sdk.client import XRPLSaleClient

Pairs = List[Tuple[str, Any]]


def _page_params(page: int, limit: int) -> Pairs:
    return [("page", page), ("limit", limit)]


def _list_spec(
    status: Optional[ProjectStatus],
    page: int,
    limit: int,
    sort_by: Optional[str],
    sort_order: Optional[SortOrder],
) -> RequestSpec:
    params = _page_params(page, limit)
    if status is not None:
        params.append(("status", ProjectStatus(status)))
    if sort_by:
        params.append(("sort_by", sort_by))
    if sort_order is not None:
        params.append(("sort_order", SortOrder(sort_order)))
    return RequestSpec("GET", "/projects", params)


def _search_spec(query: str, status: Optional[ProjectStatus], page: int, limit: int) -> RequestSpec:
    params: Pairs = [("q", query)] + _page_params(page, limit)
    if status is not None:
        params.append(("status", ProjectStatus(status)))
    return RequestSpec("GET", "/projects/search", params)


def _trending_spec(period: TrendingPeriod, limit: int) -> RequestSpec:
    return RequestSpec(
        "GET", "/projects/trending", [("period", TrendingPeriod(period)), ("limit", limit)]
    )


def _action_spec(project_id: str, action: str) -> RequestSpec:
    return RequestSpec("POST", f"/projects/{project_id}/{action}")


def _items(page: Optional[PaginatedResponse[Project]]) -> List[Project]:
    return list(page.data) if page is not None else []


class ProjectsService:
    """Synchronous projects endpoints, reached as ``client.projects``."""

    def __init__(self, client: "XRPLSaleClient") -> None:
        self._client = client

    def list(
        self,
        *,
        status: Optional[ProjectStatus] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> PaginatedResponse[Project]:
        """GET /projects"""
        return self._client.execute(
            _list_spec(status, page, limit, sort_by, sort_order),
            response_model=PaginatedResponse[Project],
        )

    def active(self, *, page: int = 1, limit: int = 10) -> PaginatedResponse[Project]:
        return self.list(status=ProjectStatus.ACTIVE, page=page, limit=limit)

    def upcoming(self, *, page: int = 1, limit: int = 10) -> PaginatedResponse[Project]:
        return self.list(status=ProjectStatus.UPCOMING, page=page, limit=limit)

    def completed(self, *, page: int = 1, limit: int = 10) -> PaginatedResponse[Project]:
        return self.list(status=ProjectStatus.COMPLETED, page=page, limit=limit)

    def get(self, project_id: str) -> Project:
        """GET /projects/{id}"""
        return self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}"), response_model=Project
        )

    def create(self, request: CreateProjectRequest) -> Project:
        """POST /projects"""
        return self._client.execute(
            RequestSpec("POST", "/projects", body=request), response_model=Project
        )

    def update(self, project_id: str, request: UpdateProjectRequest) -> Project:
        """PATCH /projects/{id}"""
        return self._client.execute(
            RequestSpec("PATCH", f"/projects/{project_id}", body=request),
            response_model=Project,
        )

    def launch(self, project_id: str) -> Project:
        return self._client.execute(_action_spec(project_id, "launch"), response_model=Project)

    def pause(self, project_id: str) -> Project:
        return self._client.execute(_action_spec(project_id, "pause"), response_model=Project)

    def resume(self, project_id: str) -> Project:
        return self._client.execute(_action_spec(project_id, "resume"), response_model=Project)

    def cancel(self, project_id: str) -> Project:
        return self._client.execute(_action_spec(project_id, "cancel"), response_model=Project)

    def stats(self, project_id: str) -> ProjectStats:
        """GET /projects/{id}/stats"""
        return self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}/stats"), response_model=ProjectStats
        )

    def investors(
        self, project_id: str, *, page: int = 1, limit: int = 10
    ) -> PaginatedResponse[Investment]:
        """GET /projects/{id}/investors"""
        return self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}/investors", _page_params(page, limit)),
            response_model=PaginatedResponse[Investment],
        )

    def tiers(self, project_id: str) -> List[ProjectTier]:
        """GET /projects/{id}/tiers"""
        return self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}/tiers"),
            response_model=List[ProjectTier],
        )

    def update_tiers(self, project_id: str, tiers: List[ProjectTier]) -> List[ProjectTier]:
        """PUT /projects/{id}/tiers"""
        return self._client.execute(
            RequestSpec("PUT", f"/projects/{project_id}/tiers", body={"tiers": tiers}),
            response_model=List[ProjectTier],
        )

    def search(
        self,
        query: str,
        *,
        status: Optional[ProjectStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> PaginatedResponse[Project]:
        """GET /projects/search"""
        return self._client.execute(
            _search_spec(query, status, page, limit),
            response_model=PaginatedResponse[Project],
        )

    def featured(self, *, limit: int = 5) -> List[Project]:
        """GET /projects/featured — unwrapped to the list of projects."""
        page = self._client.execute(
            RequestSpec("GET", "/projects/featured", [("limit", limit)]),
            response_model=PaginatedResponse[Project],
        )
        return _items(page)

    def trending(
        self, *, period: TrendingPeriod = TrendingPeriod.DAY, limit: int = 10
    ) -> List[Project]:
        """GET /projects/trending — unwrapped to the list of projects."""
        page = self._client.execute(
            _trending_spec(period, limit), response_model=PaginatedResponse[Project]
        )
        return _items(page)


class AsyncProjectsService:
    """Asynchronous projects endpoints, reached as ``client.projects``."""

    def __init__(self, client: "AsyncXRPLSaleClient") -> None:
        self._client = client

    async def list(
        self,
        *,
        status: Optional[ProjectStatus] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> PaginatedResponse[Project]:
        """GET /projects"""
        return await self._client.execute(
            _list_spec(status, page, limit, sort_by, sort_order),
            response_model=PaginatedResponse[Project],
        )

    async def active(self, *, page: int = 1, limit: int = 10) -> PaginatedResponse[Project]:
        return await self.list(status=ProjectStatus.ACTIVE, page=page, limit=limit)

    async def upcoming(self, *, page: int = 1, limit: int = 10) -> PaginatedResponse[Project]:
        return await self.list(status=ProjectStatus.UPCOMING, page=page, limit=limit)

    async def completed(self, *, page: int = 1, limit: int = 10) -> PaginatedResponse[Project]:
        return await self.list(status=ProjectStatus.COMPLETED, page=page, limit=limit)

    async def get(self, project_id: str) -> Project:
        """GET /projects/{id}"""
        return await self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}"), response_model=Project
        )

    async def create(self, request: CreateProjectRequest) -> Project:
        """POST /projects"""
        return await self._client.execute(
            RequestSpec("POST", "/projects", body=request), response_model=Project
        )

    async def update(self, project_id: str, request: UpdateProjectRequest) -> Project:
        """PATCH /projects/{id}"""
        return await self._client.execute(
            RequestSpec("PATCH", f"/projects/{project_id}", body=request),
            response_model=Project,
        )

    async def launch(self, project_id: str) -> Project:
        return await self._client.execute(_action_spec(project_id, "launch"), response_model=Project)

    async def pause(self, project_id: str) -> Project:
        return await self._client.execute(_action_spec(project_id, "pause"), response_model=Project)

    async def resume(self, project_id: str) -> Project:
        return await self._client.execute(_action_spec(project_id, "resume"), response_model=Project)

    async def cancel(self, project_id: str) -> Project:
        return await self._client.execute(_action_spec(project_id, "cancel"), response_model=Project)

    async def stats(self, project_id: str) -> ProjectStats:
        """GET /projects/{id}/stats"""
        return await self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}/stats"), response_model=ProjectStats
        )

    async def investors(
        self, project_id: str, *, page: int = 1, limit: int = 10
    ) -> PaginatedResponse[Investment]:
        """GET /projects/{id}/investors"""
        return await self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}/investors", _page_params(page, limit)),
            response_model=PaginatedResponse[Investment],
        )

    async def tiers(self, project_id: str) -> List[ProjectTier]:
        """GET /projects/{id}/tiers"""
        return await self._client.execute(
            RequestSpec("GET", f"/projects/{project_id}/tiers"),
            response_model=List[ProjectTier],
        )

    async def update_tiers(self, project_id: str, tiers: List[ProjectTier]) -> List[ProjectTier]:
        """PUT /projects/{id}/tiers"""
        return await self._client.execute(
            RequestSpec("PUT", f"/projects/{project_id}/tiers", body={"tiers": tiers}),
            response_model=List[ProjectTier],
        )

    async def search(
        self,
        query: str,
        *,
        status: Optional[ProjectStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> PaginatedResponse[Project]:
        """GET /projects/search"""
        return await self._client.execute(
            _search_spec(query, status, page, limit),
            response_model=PaginatedResponse[Project],
        )

    async def featured(self, *, limit: int = 5) -> List[Project]:
        """GET /projects/featured — unwrapped to the list of projects."""
        page = await self._client.execute(
            RequestSpec("GET", "/projects/featured", [("limit", limit)]),
            response_model=PaginatedResponse[Project],
        )
        return _items(page)

    async def trending(
        self, *, period: TrendingPeriod = TrendingPeriod.DAY, limit: int = 10
    ) -> List[Project]:
        """GET /projects/trending — unwrapped to the list of projects."""
        page = await self._client.execute(
            _trending_spec(period, limit), response_model=PaginatedResponse[Project]
        )
        return _items(page)
