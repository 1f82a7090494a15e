"""JMRL (Sierra ILS) API client."""

import base64
import logging
import threading
import time
from typing import Callable, Optional
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter

from src.core.config import Settings
from src.core.models import JMRLBib, JMRLResult
from src.core.query_translator import TranslatedQuery

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """A failed call to the JMRL API, with the HTTP status to report."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class UpstreamTransportError(UpstreamError):
    """The request never got a response (timeout, refused connection, ...)."""


class UpstreamHTTPError(UpstreamError):
    """JMRL answered with a non-200 status."""


class UpstreamAuthError(UpstreamError):
    """An access token could not be obtained."""

    def __init__(self, message: str):
        super().__init__(401, message)


class ResponseParseError(UpstreamError):
    """JMRL answered with a body that does not match the expected shape."""

    def __init__(self, message: str):
        super().__init__(500, message)


class AccessToken(BaseModel):
    """Response of POST /token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = 0


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def send(session: requests.Session, method: str, url: str, **kwargs) -> requests.Response:
    """Send a request and classify any failure as an UpstreamError.

    Timeouts map to 408, refused connections to 503, other transport
    failures to 400. Non-200 responses keep their status with the body
    as the message.
    """
    try:
        resp = session.request(method, url, **kwargs)
    except requests.Timeout:
        raise UpstreamTransportError(408, f"{url} timed out")
    except requests.ConnectionError as e:
        if "refused" in str(e).lower():
            raise UpstreamTransportError(503, f"{url} refused connection")
        raise UpstreamTransportError(400, str(e))
    except requests.RequestException as e:
        raise UpstreamTransportError(400, str(e))

    if resp.status_code != 200:
        raise UpstreamHTTPError(resp.status_code, resp.text)
    return resp


class TokenCache:
    """Holds the JMRL access token and refreshes it once it expires.

    The token is shared by all request threads; the lock makes concurrent
    callers that find it expired wait for a single refresh.
    """

    def __init__(
        self,
        session: requests.Session,
        api: str,
        key: str,
        secret: str,
        timeout=None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.token_url = f"{api}/token"
        # Basic credentials are base64(key:secret), per the Sierra API docs
        self.basic_auth = base64.b64encode(f"{key}:{secret}".encode()).decode()
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._token = ""
        self._expires_at = 0.0

    @property
    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def get_valid_token(self) -> str:
        """Return a current access token, fetching a new one if needed.

        Raises:
            UpstreamAuthError: The token request failed
        """
        with self._lock:
            if self.expired:
                logger.info("Access token has expired; requesting a new one")
                self._refresh()
            return self._token

    def invalidate(self) -> None:
        with self._lock:
            self._token = ""
            self._expires_at = 0.0

    def _refresh(self) -> None:
        start = time.perf_counter()
        try:
            resp = send(
                self.session,
                "POST",
                self.token_url,
                headers={"Authorization": f"Basic {self.basic_auth}"},
                timeout=self.timeout,
            )
        except UpstreamError as e:
            self._token = ""
            self._expires_at = 0.0
            logger.error(
                "Failed response from POST %s %d. Elapsed Time: %d (ms). %s",
                self.token_url, e.status_code, _elapsed_ms(start), e.message,
            )
            raise UpstreamAuthError(e.message)
        logger.info("Successful response from POST %s. Elapsed Time: %d (ms)", self.token_url, _elapsed_ms(start))

        try:
            auth = AccessToken.model_validate_json(resp.content)
        except ValidationError as e:
            self._token = ""
            self._expires_at = 0.0
            logger.error("Unable to parse auth response: %s", e)
            raise UpstreamAuthError(f"Unable to parse auth response: {e}")

        logger.info("Authentication successful, expires in %d seconds", auth.expires_in)
        self._token = auth.access_token
        self._expires_at = self._clock() + auth.expires_in


class JMRLClient:
    """Client for the JMRL bib search and retrieval APIs."""

    # JMRL bib fields to request
    FIELDS = "default,varFields,locations,available"

    def __init__(
        self,
        api: str,
        key: str,
        secret: str,
        connect_timeout: float = 2.0,
        read_timeout: float = 5.0,
        pool_size: int = 100,
        page_size: int = 20,
        session: Optional[requests.Session] = None,
    ):
        self.api = api.rstrip("/")
        self.page_size = page_size
        self.timeout = (connect_timeout, read_timeout)

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session
        self.tokens = TokenCache(session, self.api, key, secret, timeout=self.timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "JMRLClient":
        return cls(
            api=settings.jmrl_api,
            key=settings.jmrl_api_key,
            secret=settings.jmrl_api_secret,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
            pool_size=settings.pool_size,
            page_size=settings.page_size,
        )

    @property
    def base_url(self) -> str:
        """The API URL without its version segment."""
        idx = self.api.rfind("/")
        if idx <= len("https://"):
            return self.api
        return self.api[:idx]

    def get(self, url: str) -> requests.Response:
        """GET an authenticated JMRL API URL.

        Raises:
            UpstreamError: The token refresh or the request failed
        """
        logger.info("JMRL API GET request: %s", url)
        start = time.perf_counter()
        token = self.tokens.get_valid_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "deleted": "false",
            "suppressed": "false",
        }
        try:
            resp = send(self.session, "GET", url, headers=headers, timeout=self.timeout)
        except UpstreamError as e:
            logger.error(
                "Failed response from GET %s %d. Elapsed Time: %d (ms). %s",
                url, e.status_code, _elapsed_ms(start), e.message,
            )
            raise
        logger.info("Successful response from GET %s. Elapsed Time: %d (ms)", url, _elapsed_ms(start))
        return resp

    def search_url(self, query: TranslatedQuery, offset: int = 0) -> str:
        paging = f"offset={offset}&limit={self.page_size}"
        return f"{self.api}/bibs/search?text={query.encoded}&{paging}&fields={self.FIELDS}"

    def search(self, query: TranslatedQuery, offset: int = 0) -> JMRLResult:
        """Run a bib search.

        Args:
            query: Query already translated to JMRL syntax
            offset: Index of the first hit to return

        Returns:
            One page of hits

        Raises:
            UpstreamError: The request failed or the response did not parse
        """
        resp = self.get(self.search_url(query, offset))
        try:
            return JMRLResult.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error("Invalid response from JMRL API: %s", e)
            raise ResponseParseError(str(e))

    def get_bib(self, bib_id: str) -> JMRLBib:
        """Fetch a single bib by ID.

        Raises:
            UpstreamError: The request failed or the response did not parse
        """
        url = f"{self.api}/bibs/{quote(bib_id, safe='')}?fields={self.FIELDS}"
        resp = self.get(url)
        try:
            return JMRLBib.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error("Invalid response from JMRL API: %s", e)
            raise ResponseParseError(str(e))

    def about(self) -> None:
        """Ping the unauthenticated /about endpoint.

        Raises:
            UpstreamError: JMRL is unreachable or unhealthy
        """
        send(
            self.session,
            "GET",
            f"{self.base_url}/about",
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
