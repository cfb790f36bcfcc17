"""httpx-backed client for the Gsoc2 server.

All :class:`Api` instances share one :class:`httpx.Client`, so
connections are pooled across every request a command makes.  The pool
is created lazily on first use and closed by :meth:`Api.dispose_pool`
during shutdown; leaving it open keeps background threads alive on some
platforms and delays process exit.

All httpx exceptions are caught here and re-raised as
:class:`~gsoc2_cli.exceptions.ApiError`.
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar
from urllib.parse import urljoin, urlsplit

import httpx

from gsoc2_cli.core.config import Config
from gsoc2_cli.core.models import KeyAuth, TokenAuth
from gsoc2_cli.exceptions import ApiError, ConfigError
from gsoc2_cli.version import __version__

logger = logging.getLogger(__name__)

PYPI_URL: str = "https://pypi.org/pypi/gsoc2-cli/json"
USER_AGENT: str = f"gsoc2-cli/{__version__}"
DEFAULT_TIMEOUT: float = 30.0


def parse_header(raw: str) -> tuple[str, str]:
    """Split a ``key:value`` header string.

    Raises
    ------
    ConfigError
        When *raw* has no colon or an empty key.
    """
    key, sep, value = raw.partition(":")
    if not sep or not key.strip():
        raise ConfigError(
            f"Invalid header: {raw!r}",
            hint="Headers must use the KEY:VALUE format.",
        )
    return key.strip(), value.strip()


@dataclass(frozen=True, slots=True)
class Dsn:
    """Parsed event-ingestion DSN (``https://<key>@host/<project_id>``)."""

    scheme: str
    public_key: str
    host: str
    project_id: str

    @classmethod
    def parse(cls, value: str) -> Dsn:
        parts = urlsplit(value)
        project_id = parts.path.strip("/").rsplit("/", 1)[-1]
        if not parts.scheme or not parts.username or not parts.hostname or not project_id:
            raise ConfigError(f"Invalid DSN: {value!r}")
        host = parts.hostname if parts.port is None else f"{parts.hostname}:{parts.port}"
        return cls(parts.scheme, parts.username, host, project_id)

    @property
    def store_url(self) -> str:
        return f"{self.scheme}://{self.host}/api/{self.project_id}/store/"

    @property
    def auth_header(self) -> str:
        return (
            f"Gsoc2 gsoc2_version=7, gsoc2_client={USER_AGENT}, "
            f"gsoc2_key={self.public_key}, gsoc2_timestamp={int(time.time())}"
        )


class Api:
    """Thin request helper bound to one resolved :class:`Config`.

    Usage::

        api = Api(config.current())
        info = api.get_auth_info()
    """

    _pool: ClassVar[httpx.Client | None] = None
    _pool_lock: ClassVar[threading.Lock] = threading.Lock()
    _transport: ClassVar[httpx.BaseTransport | None] = None

    def __init__(self, config: Config) -> None:
        self._config: Config = config

    # ------------------------------------------------------------------
    # Pool management
    # ------------------------------------------------------------------

    @classmethod
    def client(cls) -> httpx.Client:
        """Return the shared client, creating it on first use."""
        with cls._pool_lock:
            if cls._pool is None:
                cls._pool = httpx.Client(
                    timeout=httpx.Timeout(DEFAULT_TIMEOUT),
                    follow_redirects=True,
                    headers={"User-Agent": USER_AGENT},
                    transport=cls._transport,
                )
            return cls._pool

    @classmethod
    def dispose_pool(cls) -> None:
        """Close the shared client.  Safe to call when it was never created."""
        with cls._pool_lock:
            pool, cls._pool = cls._pool, None
        if pool is not None:
            logger.debug("Closing HTTP connection pool")
            pool.close()

    @classmethod
    def use_transport(cls, transport: httpx.BaseTransport | None) -> None:
        """Route future pooled requests through *transport* (tests, proxies)."""
        cls.dispose_pool()
        cls._transport = transport

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = dict(parse_header(raw) for raw in self._config.headers)
        if isinstance(self._config.auth, TokenAuth):
            headers["Authorization"] = f"Bearer {self._config.auth.token}"
        return headers

    def _auth(self) -> httpx.BasicAuth | None:
        if isinstance(self._config.auth, KeyAuth):
            return httpx.BasicAuth(self._config.auth.key, "")
        return None

    def absolute_url(self, path: str) -> str:
        base = self._config.base_url
        if not base.endswith("/"):
            base += "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        url: str,
        *,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request through the pool and return the successful response.

        *url* may be absolute or relative to the configured server URL.

        Raises
        ------
        ApiError
            On transport errors and non-2xx responses.
        """
        if "://" not in url:
            url = self.absolute_url(url)
        headers = kwargs.pop("headers", {})
        if authenticated:
            headers = {**self._headers(), **headers}
            kwargs.setdefault("auth", self._auth())

        logger.debug("request %s %s", method, url)
        try:
            response = self.client().request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(
                f"Request to {url} failed",
                hint="Check your network connection and the configured server URL.",
            ) from exc
        logger.debug("response %s for %s %s", response.status_code, method, url)

        if response.is_error:
            raise ApiError(
                f"{method} {url} returned {response.status_code}: {_error_detail(response)}",
                status_code=response.status_code,
            )
        return response

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def get_auth_info(self) -> dict[str, Any]:
        """Return the server's view of the current credentials."""
        return self.request("GET", "api/0/").json()

    def get_latest_version(self) -> str:
        """Return the newest released gsoc2-cli version on PyPI."""
        response = self.request("GET", PYPI_URL, authenticated=False, timeout=5.0)
        try:
            return str(response.json()["info"]["version"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiError("Unexpected response from the package index") from exc

    def send_event(self, dsn: Dsn, event: dict[str, Any]) -> str:
        """Submit *event* to the store endpoint of *dsn* and return its id."""
        event.setdefault("event_id", uuid.uuid4().hex)
        response = self.request(
            "POST",
            dsn.store_url,
            authenticated=False,
            headers={
                "X-Gsoc2-Auth": dsn.auth_header,
                "Content-Type": "application/json",
            },
            content=json.dumps(event).encode("utf-8"),
        )
        try:
            return str(response.json().get("id") or event["event_id"])
        except ValueError:
            return str(event["event_id"])


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase or "unknown error"
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return response.reason_phrase or "unknown error"
