"""Pool identity, version, health and provider endpoints."""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Header, Response
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.i18n import MessageBundle, preferred_language
from src.core.jmrl_client import JMRLClient, UpstreamError
from src.web.dependencies import get_jmrl_client, get_message_bundle
from src.web.schemas.pool import (
    HealthStatus,
    PoolAttribute,
    PoolIdentity,
    ProviderDetails,
    ProvidersResponse,
    VersionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PROVIDERS = [
    ProviderDetails(
        provider="freading",
        label="Freading",
        logo_url="/assets/freading.png",
        homepage_url="https://freading.com/index",
    ),
    ProviderDetails(
        provider="overdrive",
        label="Overdrive",
        logo_url="/assets/overdrive.png",
        homepage_url="https://www.overdrive.com",
    ),
]


def _build_tag(search_dir: Path) -> str:
    """Build tag from a `buildtag.<tag>` file, or "unknown"."""
    files = list(search_dir.glob("buildtag.*"))
    if len(files) == 1:
        return files[0].name[len("buildtag."):]
    return "unknown"


@router.get("/favicon.ico", include_in_schema=False)
def ignore_favicon():
    # no-op; keeps browser requests from logging 404s
    return Response(status_code=204)


@router.get("/version", response_model=VersionResponse)
def get_version():
    """Report the version of the service."""
    # working directory is the bin directory, and the build tag is in the root
    return VersionResponse(version=settings.version, build=_build_tag(Path.cwd().parent))


@router.get("/healthcheck")
def health_check(client: JMRLClient = Depends(get_jmrl_client)):
    """Report the health of JMRL; always answers 200."""
    try:
        client.about()
        status = HealthStatus(healthy=True)
    except UpstreamError as e:
        status = HealthStatus(healthy=False, message=e.message)
    return {"jmrl": status.model_dump(exclude_none=True)}


@router.get("/identify", response_model=PoolIdentity)
def identify(
    accept_language: Optional[str] = Header(default=None),
    bundle: MessageBundle = Depends(get_message_bundle),
):
    """Return localized identity information for this pool."""
    lang = preferred_language(accept_language)
    logger.info("Identify request Accept-Language %s", lang)

    identity = PoolIdentity(
        name=bundle.localize("PoolName", lang),
        description=bundle.localize("PoolDescription", lang),
        mode="record",
        attributes=[
            PoolAttribute(name="logo_url", supported=True, value="/assets/jmrl_logo.svg"),
            PoolAttribute(name="external_url", supported=True, value="https://jmrl.org"),
            PoolAttribute(name="external_hold", supported=True, value="https://jmrl.org"),
            PoolAttribute(name="uva_ils", supported=False),
            PoolAttribute(name="facets", supported=False),
            PoolAttribute(name="cover_images", supported=False),
            PoolAttribute(name="course_reserves", supported=False),
            PoolAttribute(name="sorting", supported=False),
        ],
    )
    return JSONResponse(
        content=identity.model_dump(exclude_none=True),
        headers={"Content-Language": bundle.resolve_language(lang)},
    )


@router.get("/api/providers", response_model=ProvidersResponse, response_model_exclude_none=True)
def get_providers():
    """List the online access providers that appear in access_url fields."""
    return ProvidersResponse(providers=PROVIDERS)
