"""
Entry point for the JMRL pool server.

Command line flags override the matching environment settings; the JMRL API
URL, key and secret are required.
"""

import argparse
import logging
import signal
import sys

import uvicorn

from src.core.config import settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_file: str = "", level: int = logging.INFO):
    """Configure the root logger to write to stderr, or to a file when given."""
    if log_file:
        logging.basicConfig(filename=log_file, level=level, format=LOG_FORMAT, force=True)
    else:
        logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT, force=True)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="JMRL Virgo pool service")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="JMRL pool service port (default 8080)")
    parser.add_argument("--api", default=settings.jmrl_api, help="JMRL API URL")
    parser.add_argument("--apikey", default=settings.jmrl_api_key, help="Key to access the JMRL API")
    parser.add_argument("--apisecret", default=settings.jmrl_api_secret, help="Secret to access the JMRL API")
    parser.add_argument("--jwtkey", default=settings.jwt_key, help="JWT signature key")
    parser.add_argument("--logfile", default=settings.log_file, help="Write logs to this file")
    return parser.parse_args(argv)


def apply_args(args: argparse.Namespace) -> None:
    """Copy command line values onto the global settings."""
    settings.host = args.host
    settings.port = args.port
    settings.jmrl_api = args.api
    settings.jmrl_api_key = args.apikey
    settings.jmrl_api_secret = args.apisecret
    settings.jwt_key = args.jwtkey
    settings.log_file = args.logfile


def authenticate_upstream() -> None:
    """Fetch the first JMRL access token so bad credentials show up at startup."""
    from src.core.jmrl_client import UpstreamError
    from src.web.dependencies import get_jmrl_client

    logger.info("Authenticate with JMRL API")
    try:
        get_jmrl_client().tokens.get_valid_token()
    except UpstreamError as e:
        # not fatal; the next pool request fetches a token again
        logger.error("Initial JMRL authentication failed: %s", e.message)


def main(argv=None):
    args = parse_args(argv)
    apply_args(args)
    setup_logging(settings.log_file)

    logger.info("Loading configuration...")
    missing = settings.missing_required()
    if missing:
        for name in missing:
            logger.error("Parameter -%s is required", name)
        sys.exit(1)

    authenticate_upstream()

    # Import the FastAPI app
    from src.web.main import app

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="info",
        access_log=True,
    )
    server = uvicorn.Server(config)

    def handle_sigterm(signum, frame):
        logger.info("Received SIGTERM, shutting down...")
        server.should_exit = True

    signal.signal(signal.SIGTERM, handle_sigterm)

    logger.info("Start JMRL pool v%s on %s:%d", settings.version, settings.host, settings.port)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
