"""Schemas describing the pool itself."""

from typing import List, Optional

from pydantic import BaseModel


class PoolAttribute(BaseModel):
    """A capability the pool does or does not support."""

    name: str
    supported: bool
    value: Optional[str] = None


class PoolIdentity(BaseModel):
    """Response from the identify endpoint."""

    name: str
    description: str
    mode: str = "record"
    attributes: List[PoolAttribute] = []


class ProviderDetails(BaseModel):
    """An online access provider referenced by access_url fields."""

    provider: str
    label: Optional[str] = None
    homepage_url: Optional[str] = None
    logo_url: Optional[str] = None


class ProvidersResponse(BaseModel):
    """Response from the providers endpoint."""

    providers: List[ProviderDetails]


class VersionResponse(BaseModel):
    """Response from the version endpoint."""

    version: str
    build: str


class HealthStatus(BaseModel):
    """Health of a single dependency."""

    healthy: bool
    message: Optional[str] = None
