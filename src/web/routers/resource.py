"""Resource (single record) API router."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.jmrl_client import JMRLClient, UpstreamError
from src.core.marc import MissingRequiredFieldError
from src.core.normalizer import normalize
from src.web.dependencies import get_jmrl_client
from src.web.schemas.search import ResourceResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{bib_id}", response_model=ResourceResponse, response_model_exclude_none=True)
def get_resource(
    bib_id: str,
    client: JMRLClient = Depends(get_jmrl_client),
):
    """Get the full record for a JMRL bib ID."""
    logger.info("Resource %s details requested", bib_id)
    try:
        bib = client.get_bib(bib_id)
    except UpstreamError as e:
        return JSONResponse(content=e.message, status_code=e.status_code)

    try:
        fields = normalize(bib, library_name=settings.library_name)
    except MissingRequiredFieldError as e:
        logger.error("Unable to build record for bib %s: %s", bib_id, e)
        return JSONResponse(content=str(e), status_code=500)

    return ResourceResponse(fields=fields)
