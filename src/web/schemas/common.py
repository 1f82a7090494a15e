"""Common schemas for API requests and responses."""

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Paging window of a search request, and of its results."""

    start: int = Field(default=0, ge=0)
    rows: int = Field(default=0, ge=0)
    total: int = 0
