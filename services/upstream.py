"""HTTP proxying utilities for upstream requests."""

from collections.abc import AsyncIterator, Mapping

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.config import UpstreamSettings
from core.exceptions import RequestConstructionError, UpstreamUnreachable
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest


def build_http_client(
    settings: UpstreamSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the pooled client shared by all proxied requests."""
    limits = httpx.Limits(
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_keepalive_connections,
    )
    timeout = httpx.Timeout(
        connect=settings.connect_timeout,
        read=settings.read_timeout,
        write=settings.write_timeout,
        pool=settings.pool_timeout,
    )
    client = httpx.AsyncClient(
        timeout=timeout,
        limits=limits,
        follow_redirects=settings.follow_redirects,
        transport=transport,
    )
    # Connection reuse is the pool's business, never a header on the proxied request
    del client.headers["Connection"]
    return client


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


class UpstreamClient:
    """Send prepared requests upstream and stream the answers back."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
    ) -> None:
        self._client = client
        self._logger = logger
        self._headers = header_builder

    async def send(
        self,
        prepared: PreparedRequest,
        body: AsyncIterator[bytes] | None = None,
    ) -> httpx.Response:
        """Dispatch once; any upstream status counts as success.

        Raises:
            RequestConstructionError: the request could not be built
            UpstreamUnreachable: no response was received
        """
        try:
            request = self._client.build_request(
                prepared.method,
                prepared.url,
                headers=prepared.headers,
                content=body if prepared.has_body else None,
            )
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            self._logger.log_error(prepared.url, 500, _describe(e))
            raise RequestConstructionError("Error creating proxy request") from e

        try:
            return await self._client.send(request, stream=True)
        except (httpx.RequestError, httpx.StreamError) as e:
            self._logger.log_error(prepared.url, 502, _describe(e))
            raise UpstreamUnreachable(prepared.url, _describe(e)) from e

    def relay(
        self,
        prepared: PreparedRequest,
        response: httpx.Response,
        cors_headers: Mapping[str, str],
    ) -> StreamingResponse:
        """Stream the upstream response to the client with our CORS headers."""
        relayed = StreamingResponse(
            self._stream_body(prepared, response),
            status_code=response.status_code,
            background=BackgroundTask(self._cleanup_streaming, response),
        )
        for key, value in cors_headers.items():
            relayed.headers[key] = value
        for key, value in self._headers.filter_response_headers(response.headers.multi_items()):
            relayed.headers.append(key, value)

        self._logger.log_proxy(
            prepared.method,
            prepared.url,
            response.status_code,
            prepared.client_ip,
            prepared.headers,
        )
        return relayed

    async def _stream_body(
        self,
        prepared: PreparedRequest,
        response: httpx.Response,
    ) -> AsyncIterator[bytes]:
        """Yield raw upstream bytes; status and headers are already committed."""
        finished = False
        try:
            async for chunk in response.aiter_raw():
                yield chunk
            finished = True
        except httpx.HTTPError as e:
            finished = True
            self._logger.log_error(prepared.url, response.status_code, f"Error copying response: {_describe(e)}")
            raise
        finally:
            if not finished:
                self._logger.log_error(
                    prepared.url,
                    response.status_code,
                    "Error copying response: client went away",
                )
            await response.aclose()

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()
