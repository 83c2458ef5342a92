"""HTTP transport for the panel REST API."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Final

import aiohttp

from .. import __version__
from ..errors import (
    PteroAPIError,
    PteroConnectionError,
    PteroTimeout,
    RequestError,
    ValidationError,
)

_LOGGER = logging.getLogger(__name__)

_EMPTY_STATUSES: Final = frozenset({202, 204})
_DOMAIN_RE: Final = re.compile(r"https?://(?:localhost:\d{4}|[\w.\-]{3,256})")


def validate_domain(domain: str) -> str:
    """Return ``domain`` without a trailing slash.

    Raises:
        ValidationError: If it is not an http(s) panel URL.
    """
    if not isinstance(domain, str) or not _DOMAIN_RE.match(domain):
        raise ValidationError(f"Invalid panel domain {domain!r}")
    return domain.rstrip("/")


class RequestManager:
    """aiohttp wrapper issuing authenticated requests against ``/api/<type>``.

    Usage:
        requests = RequestManager("client", "https://panel.example.com", "ptlc_...")
        servers = await requests.get("/", params={"page": "1"})
        await requests.close()
    """

    def __init__(
        self,
        api_type: str,
        domain: str,
        auth: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_type = api_type.lower()
        self.domain = domain.rstrip("/")
        self._auth = auth
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self.ping: int = -1

    @property
    def base_url(self) -> str:
        return f"{self.domain}/api/{self.api_type}"

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def get_headers(self) -> dict[str, str]:
        return {
            "User-Agent": f"pterolink {self.api_type} v{__version__}",
            "Content-Type": "application/json",
            "Accept": "application/json, text/plain",
            "Authorization": f"Bearer {self._auth}",
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the underlying session if this manager created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def _make(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        body: Any = None,
        raw: bool = False,
    ) -> Any:
        headers = self.get_headers()
        kwargs: dict[str, Any] = {}
        if body is not None:
            if isinstance(body, str):
                headers["Content-Type"] = "text/plain"
                kwargs["data"] = body
            else:
                kwargs["json"] = body
        if params:
            kwargs["params"] = params

        _LOGGER.debug(
            "[HTTP] requesting: %s %s (payload: %s)",
            method,
            url,
            headers["Content-Type"] if body is not None else "none",
        )
        start = time.monotonic()
        try:
            async with self._get_session().request(
                method,
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                **kwargs,
            ) as resp:
                self.ping = int((time.monotonic() - start) * 1000)
                _LOGGER.debug("[HTTP] received status: %s (%sms)", resp.status, self.ping)
                return await self._handle_response(resp, raw=raw)
        except TimeoutError as err:
            raise PteroTimeout(f"{method} {url} timed out") from err
        except aiohttp.ClientError as err:
            raise PteroConnectionError(f"{method} {url} failed: {err}") from err

    async def _handle_response(self, resp: aiohttp.ClientResponse, *, raw: bool) -> Any:
        if resp.status >= 500:
            raise RequestError(
                f"Received an unexpected response from the API (code {resp.status})"
            )

        if resp.status >= 400:
            try:
                data = await resp.json(content_type=None)
            except ValueError:
                data = await resp.text()
            raise PteroAPIError.from_response(resp.status, data)

        if resp.status in _EMPTY_STATUSES:
            return None

        if raw:
            return await resp.read()

        try:
            data = await resp.json(content_type=None)
        except ValueError as err:
            raise RequestError("Received a malformed JSON response") from err

        if isinstance(data, dict) and data.get("object") == "null_resource":
            raise RequestError("Request returned a null resource object")
        return data

    async def get(self, path: str, *, params: dict[str, str] | None = None) -> Any:
        return await self._make("GET", self._url(path), params=params)

    async def get_text(self, path: str, *, params: dict[str, str] | None = None) -> str:
        """GET a plain-text body, e.g. file contents."""
        data = await self._make("GET", self._url(path), params=params, raw=True)
        return (data or b"").decode("utf-8", errors="replace")

    async def post(
        self, path: str, body: Any = None, *, params: dict[str, str] | None = None
    ) -> Any:
        return await self._make("POST", self._url(path), params=params, body=body)

    async def patch(self, path: str, body: Any = None) -> Any:
        return await self._make("PATCH", self._url(path), body=body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self._make("PUT", self._url(path), body=body)

    async def delete(self, path: str, body: Any = None) -> None:
        await self._make("DELETE", self._url(path), body=body)

    async def raw(self, method: str, url: str, body: Any = None) -> bytes | None:
        """Request an absolute URL (e.g. a signed download link) as bytes."""
        return await self._make(method, url, body=body, raw=True)
