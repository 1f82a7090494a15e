"""Pydantic schemas for API request/response models."""

from src.web.schemas.common import Pagination
from src.web.schemas.search import (
    SearchRequest,
    PoolResult,
    Group,
    Record,
    ResourceResponse,
    FacetsResponse,
)
from src.web.schemas.pool import (
    PoolIdentity,
    PoolAttribute,
    ProvidersResponse,
    VersionResponse,
    HealthStatus,
)

__all__ = [
    "Pagination",
    "SearchRequest",
    "PoolResult",
    "Group",
    "Record",
    "ResourceResponse",
    "FacetsResponse",
    "PoolIdentity",
    "PoolAttribute",
    "ProvidersResponse",
    "VersionResponse",
    "HealthStatus",
]
