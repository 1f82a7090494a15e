"""FastAPI application for the JMRL pool service."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from src.core.config import settings
from src.web.dependencies import require_auth
from src.web.metrics import metrics_endpoint, metrics_middleware
from src.web.routers import pool, resource, search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.auth_enabled:
        logger.warning("JWT_KEY is not set; pool API requests are not authenticated")
    logger.info("JMRL pool %s ready, using JMRL API %s", settings.version, settings.jmrl_api)
    yield
    logger.info("JMRL pool shutting down")


app = FastAPI(
    lifespan=lifespan,
    title="JMRL Pool API",
    description="Virgo search pool for the Jefferson-Madison Regional Library catalog",
    version=settings.version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware)
app.middleware("http")(metrics_middleware)


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    logger.error("Unable to parse %s request: %s", request.url.path, exc.errors())
    return PlainTextResponse("invalid request", status_code=400)


# Mount routers
app.include_router(pool.router, tags=["Pool"])
app.include_router(
    search.router,
    prefix="/api/search",
    tags=["Search"],
    dependencies=[Depends(require_auth)],
)
app.include_router(
    resource.router,
    prefix="/api/resource",
    tags=["Resource"],
    dependencies=[Depends(require_auth)],
)
app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


@app.get("/")
async def root():
    """Root endpoint - API info."""
    return {
        "name": "JMRL Pool API",
        "version": settings.version,
        "docs": "/docs",
        "health": "/healthcheck",
    }
