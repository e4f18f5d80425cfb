"""httpx-backed Transport.

HttpTransport receives an httpx.AsyncClient via constructor injection; the
caller owns the client lifecycle. HTTP status codes never raise here: a
non-2xx response is returned with ``ok=False`` and the controller decides
what it means. Only network-level failures raise, as FetchError.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from fetchstate import __version__
from fetchstate.errors import ErrorCode, FetchError

if TYPE_CHECKING:
    from fetchstate.config import TransportSettings
    from fetchstate.models.request import RequestOptions

log = structlog.get_logger()


def build_http_client(settings: TransportSettings) -> httpx.AsyncClient:
    """Create the shared httpx client from transport settings."""
    return httpx.AsyncClient(
        base_url=settings.base_url,
        follow_redirects=settings.follow_redirects,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent or f"fetchstate/{__version__}"},
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
        ),
    )


@dataclass(frozen=True)
class TransportResponse:
    """Fully-read response returned by HttpTransport."""

    status_code: int
    reason: str = ""
    content: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body. Raises ValueError when it is not valid JSON."""
        return json.loads(self.content)


class HttpTransport:
    """Transport implementation over httpx."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def perform(
        self, target: str, options: RequestOptions | None = None
    ) -> TransportResponse:
        """Send one request and read the whole body.

        Raises FetchError(TRANSPORT_ERROR) on connection failures, timeouts,
        malformed URLs and other transport errors. Never raises for HTTP status codes.
        """
        method = "GET"
        kwargs: dict[str, Any] = {}
        if options is not None:
            method = options.method
            if options.headers:
                kwargs["headers"] = options.headers
            if options.params:
                kwargs["params"] = options.params
            if options.json_body is not None:
                kwargs["json"] = options.json_body
            if options.timeout_seconds is not None:
                kwargs["timeout"] = options.timeout_seconds

        try:
            response = await self._client.request(method, target, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning("transport_error", url=target, method=method, error=str(exc))
            raise FetchError(
                code=ErrorCode.TRANSPORT_ERROR,
                message=f"Network error fetching {target}: {exc}",
                recoverable=True,
            ) from exc

        log.info(
            "transport_complete",
            url=target,
            method=method,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return TransportResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            content=response.content,
            headers=dict(response.headers),
        )
