"""Search-related schemas for the pool search API."""

from typing import List, Optional

from pydantic import BaseModel

from src.core.models import RecordField
from src.web.schemas.common import Pagination


class FilterFacet(BaseModel):
    """A selected facet value."""

    facet_id: str = ""
    value: str = ""


class Filter(BaseModel):
    """Facet selections for one pool."""

    pool_id: str = ""
    facets: List[FilterFacet] = []


class SearchRequest(BaseModel):
    """Request body for the search endpoint."""

    query: str
    pagination: Pagination = Pagination()
    filters: List[Filter] = []

    def filters_specified(self) -> bool:
        """True when the request selects facets.

        A next-page request carries a single filter with no facets,
        e.g. [{pool_id: jmrl, facets: []}]; that is not a filter.
        """
        if len(self.filters) > 1:
            return True
        if len(self.filters) == 1:
            return len(self.filters[0].facets) > 0
        return False


class Record(BaseModel):
    """A single record in a search result group."""

    fields: List[RecordField]


class Group(BaseModel):
    """Records sharing a group value; JMRL records are always alone in their group."""

    value: str
    count: int
    record_list: List[Record] = []


class PoolResult(BaseModel):
    """Response from the search endpoint."""

    pagination: Pagination = Pagination()
    group_list: List[Group] = []
    confidence: str = "low"
    elapsed_ms: int = 0
    status_code: int = 200
    status_msg: Optional[str] = None


class ResourceResponse(BaseModel):
    """Response from the resource endpoint."""

    fields: List[RecordField]


class FacetsResponse(BaseModel):
    """Response from the facets endpoint."""

    facets: List[dict] = []
