"""Shared query parameters for list endpoints."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Query

from storefront.core.config import get_settings


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int


def page_params(
    page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
    limit: Annotated[int | None, Query(ge=1, description="Items per page")] = None,
) -> PageParams:
    """Dependency: page/limit with the configured default and cap."""
    settings = get_settings()
    size = limit or settings.DEFAULT_PAGE_SIZE
    return PageParams(page=page, limit=min(size, settings.MAX_PAGE_SIZE))
