"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from api.handlers import handle_config_files, handle_proxy, handle_root
from core.config import Config
from core.cors import CorsAnnotator
from core.exceptions import ProxyError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.forwarding import ForwardingService
from services.sample_configs import SampleConfigStore
from services.upstream import UpstreamClient, build_http_client

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
    sample_configs: SampleConfigStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    header_builder = HeaderBuilder()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = build_http_client(config.upstream, transport=transport)
        app.state.upstream_client = UpstreamClient(client, logger, header_builder)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Argon Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.logger = logger
    app.state.cors = CorsAnnotator(config.proxy.allow_origin)
    app.state.forwarding_service = ForwardingService(config, logger, header_builder)
    app.state.sample_configs = sample_configs or SampleConfigStore.from_directory()

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        return PlainTextResponse(
            str(exc),
            status_code=exc.status_code,
            headers=app.state.cors.headers(request.headers),
        )

    @app.api_route("/proxy", methods=METHODS, include_in_schema=False)
    @app.api_route("/proxy/{target:path}", methods=METHODS, include_in_schema=False)
    async def proxy(request: Request):
        return await handle_proxy(request)

    @app.api_route("/getconfig", methods=METHODS, include_in_schema=False)
    @app.api_route("/getconfig/{name:path}", methods=METHODS, include_in_schema=False)
    async def config_files(request: Request):
        return await handle_config_files(request)

    @app.api_route("/{path:path}", methods=METHODS, include_in_schema=False)
    async def root(request: Request):
        return await handle_root(request)

    return app
