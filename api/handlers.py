"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, StreamingResponse

from api.usage import Section, usage_text
from core.cors import CorsAnnotator
from core.exceptions import MissingTarget
from core.protocols import RequestLogger
from services.forwarding import ForwardingService
from services.sample_configs import SampleConfigStore
from services.upstream import UpstreamClient

CONFIG_PREFIX = "/getconfig/"


def _cors(request: Request) -> CorsAnnotator:
    return request.app.state.cors


def usage_response(request: Request, section: Section) -> Response:
    return PlainTextResponse(
        usage_text(section),
        headers=_cors(request).headers(request.headers),
    )


async def handle_proxy(request: Request) -> Response | StreamingResponse:
    """Handle /proxy and /proxy/{target} for any method."""
    cors = _cors(request)
    logger: RequestLogger = request.app.state.logger

    if request.method == "OPTIONS":
        logger.log_preflight(request.scope["path"], request.headers.get("origin"))
        return Response(status_code=204, headers=cors.preflight_headers(request.headers))

    forwarding: ForwardingService = request.app.state.forwarding_service
    headers = [(key.decode("latin-1"), value.decode("latin-1")) for key, value in request.headers.raw]
    try:
        prepared = forwarding.prepare(
            request.method,
            request.scope["path"],
            request.scope.get("query_string", b"").decode("latin-1"),
            headers,
            request.client.host if request.client else "",
        )
    except MissingTarget:
        return usage_response(request, "proxy")

    upstream: UpstreamClient = request.app.state.upstream_client
    body = request.stream() if prepared.has_body else None
    response = await upstream.send(prepared, body)
    return upstream.relay(prepared, response, cors.headers(request.headers))


async def handle_config_files(request: Request) -> Response:
    """Serve /getconfig/{name}, or the file listing when no name is given."""
    store: SampleConfigStore = request.app.state.sample_configs
    cors_headers = _cors(request).headers(request.headers)
    logger: RequestLogger = request.app.state.logger

    name = request.scope["path"].removeprefix(CONFIG_PREFIX).removeprefix("/getconfig")
    if not name:
        return PlainTextResponse(store.listing(), headers=cors_headers)

    logger.log_debug(f"Attempting to serve config file: {name}")
    content = store.get(name)
    logger.log_debug(f"Successfully served config file: {name}")
    return Response(
        content=content,
        media_type=store.content_type(name),
        headers=cors_headers,
    )


async def handle_root(request: Request) -> Response:
    """Usage help at /, 404 for every other unmatched path."""
    if request.scope["path"] != "/":
        return PlainTextResponse(
            "404 page not found\n",
            status_code=404,
            headers=_cors(request).headers(request.headers),
        )
    return usage_response(request, "all")
