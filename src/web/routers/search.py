"""Search API router."""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from src.core.config import settings
from src.core.jmrl_client import JMRLClient, UpstreamError
from src.core.marc import MissingRequiredFieldError
from src.core.normalizer import normalize
from src.core.query_translator import MalformedQueryError, UnsupportedQueryError, translate
from src.web.dependencies import get_jmrl_client
from src.web.schemas.common import Pagination
from src.web.schemas.search import FacetsResponse, Group, PoolResult, Record, SearchRequest

logger = logging.getLogger(__name__)

router = APIRouter()

CONTENT_LANGUAGE = "en-US"


def _pool_response(result: PoolResult, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        content=result.model_dump(exclude_none=True),
        status_code=status_code,
        headers={"Content-Language": CONTENT_LANGUAGE},
    )


def _confidence(result_total: int, rows_requested: int) -> str:
    if result_total > 0 and rows_requested > 0:
        return "medium"
    return "low"


@router.post("")
def search(
    request: SearchRequest,
    client: JMRLClient = Depends(get_jmrl_client),
):
    """Translate a pool search into a JMRL search and return the hits as pool records."""
    logger.info("JMRL search requested. Raw query: %s, %s", request.query, request.pagination)

    try:
        translated = translate(request.query, identifier_policy=settings.identifier_policy)
    except UnsupportedQueryError as e:
        # expected for this pool, so not an error
        logger.warning("%s", e.message)
        return PlainTextResponse(e.message, status_code=501)
    except MalformedQueryError as e:
        logger.info("Query [%s] is not valid: %s", request.query, e.message)
        return PlainTextResponse("Malformed search", status_code=400)

    # JMRL does not support filtering, so a filtered search can never match
    if request.filters_specified() or translated.filtered:
        logger.info("Filters specified in search, return no matches")
        return _pool_response(PoolResult())

    logger.info("Parsed query: %s", translated.text)
    start = time.perf_counter()
    try:
        jmrl_result = client.search(translated, offset=request.pagination.start)
    except UpstreamError as e:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        result = PoolResult(elapsed_ms=elapsed_ms, status_code=e.status_code, status_msg=e.message)
        return _pool_response(result, e.status_code)
    elapsed_ms = int((time.perf_counter() - start) * 1000)

    groups = []
    for entry in jmrl_result.entries:
        bib = entry.bib
        try:
            fields = normalize(bib, library_name=settings.library_name)
        except MissingRequiredFieldError as e:
            logger.warning("Skipping bib %s: %s", bib.id, e)
            continue
        groups.append(Group(value=bib.id, count=1, record_list=[Record(fields=fields)]))

    result = PoolResult(
        pagination=Pagination(start=jmrl_result.start, rows=jmrl_result.count, total=jmrl_result.total),
        group_list=groups,
        confidence=_confidence(jmrl_result.total, request.pagination.rows),
        elapsed_ms=elapsed_ms,
        status_code=200,
    )
    return _pool_response(result)


@router.post("/facets", response_model=FacetsResponse)
def facets():
    """JMRL has no facets; always answer with an empty list."""
    logger.info("JMRL facets requested, but JMRL does not support this. Returning empty list")
    return FacetsResponse()
