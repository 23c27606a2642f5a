"""Authenticated HTTP client for the Jamf Pro Classic and Pro APIs.

TLS certificate verification is turned off on purpose: on-premises Jamf
servers are routinely deployed with self-signed certificates, and the
connection details come from the operator's own manifest. Do not reuse this
client for anything that is not a Jamf server the operator controls.

Authentication follows the session:

- ``Authorization: Bearer <token>`` whenever the session carries a token
- ``Cookie: APBALANCEID=...`` on cloud sessions that carry an affinity cookie
- HTTP basic auth only while no token exists (bootstrap and health calls)
"""
import json
import logging
from typing import TYPE_CHECKING, Any, Optional

import httpx

from ..errors import APIError
from ..utils.connection import with_retry

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

XML_CONTENT = "application/xml"
JSON_CONTENT = "application/json"


class JamfClient:
    """Thin async wrapper around ``httpx.AsyncClient``.

    Usage:
        async with JamfClient(session) as client:
            data = await client.get(kind.collection_url(session.api_url))
    """

    def __init__(
        self,
        session: "Session",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "JamfClient":
        self._ensure_http()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                verify=False,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def bind(self, session: "Session") -> "JamfClient":
        """Switch to another session (after a token or cookie was fetched)."""
        self.session = session
        return self

    def _headers(self, content_type: Optional[str] = None, extra: Optional[dict] = None) -> dict:
        headers = {"Accept": JSON_CONTENT}
        if content_type:
            headers["Content-Type"] = content_type
        if self.session.auth_token:
            headers["Authorization"] = f"Bearer {self.session.auth_token}"
        if self.session.is_cloud and self.session.cookie:
            headers["Cookie"] = self.session.cookie
        if extra:
            headers.update(extra)
        return headers

    def _auth(self, auth: Optional[tuple[str, str]]) -> Optional[httpx.BasicAuth]:
        if auth is not None:
            return httpx.BasicAuth(*auth)
        if self.session.auth_token:
            return None
        if self.session.username:
            return httpx.BasicAuth(self.session.username, self.session.password)
        return None

    async def send(
        self,
        method: str,
        url: str,
        body: Any = None,
        content_type: Optional[str] = None,
        headers: Optional[dict] = None,
        auth: Optional[tuple[str, str]] = None,
    ) -> httpx.Response:
        """Send one request and return the raw response, whatever its status.

        ``auth`` forces basic auth with the given credentials and drops the
        bearer token, as the token endpoint and the password probe need.
        """
        http = self._ensure_http()
        request_headers = self._headers(content_type, headers)
        if auth is not None:
            request_headers.pop("Authorization", None)

        if body is not None and not isinstance(body, (str, bytes)):
            body = json.dumps(body)
            if content_type is None:
                request_headers["Content-Type"] = JSON_CONTENT

        logger.debug(f"{method} {url}")
        return await http.request(
            method,
            url,
            content=body,
            headers=request_headers,
            auth=self._auth(auth),
        )

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Like ``send`` but raise ``APIError`` for any non-2xx answer."""
        response = await self.send(method, url, **kwargs)
        if not response.is_success:
            raise APIError(response.status_code, response.text, method, url)
        return response

    @with_retry(max_attempts=3, min_wait=1, max_wait=10)
    async def get(self, url: str, headers: Optional[dict] = None) -> Any:
        """GET a JSON document. Transport failures are retried."""
        response = await self.request("GET", url, headers=headers)
        if not response.content:
            return None
        return response.json()

    async def post(self, url: str, body: Any = None, content_type: Optional[str] = None) -> httpx.Response:
        return await self.request("POST", url, body=body, content_type=content_type)

    async def put(self, url: str, body: Any = None, content_type: Optional[str] = None) -> httpx.Response:
        return await self.request("PUT", url, body=body, content_type=content_type)

    async def delete(self, url: str) -> httpx.Response:
        return await self.request("DELETE", url)
