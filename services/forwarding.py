"""Forwarding orchestration: inbound request to prepared upstream request."""

from core.config import Config
from core.exceptions import MissingTarget
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest
from core.target import build_final_url, decode_target, ensure_scheme, resolve_target


def has_body(headers: list[tuple[str, str]]) -> bool:
    """True when the inbound request carries a body."""
    for key, value in headers:
        lower = key.lower()
        if lower == "transfer-encoding":
            return True
        if lower == "content-length":
            return value.strip() not in ("", "0")
    return False


class ForwardingService:
    """Resolve the target of a proxy request and prepare the upstream call."""

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
    ) -> None:
        self._config = config
        self._logger = logger
        self._headers = header_builder

    def prepare(
        self,
        method: str,
        path: str,
        raw_query: str,
        headers: list[tuple[str, str]],
        peer: str,
    ) -> PreparedRequest:
        """Build the single upstream request for this inbound request.

        Raises:
            MissingTarget: neither the query nor the path names a target
            InvalidEncoding: the target is not valid percent-encoding
        """
        verbose = self._config.proxy.verbose
        trust_proxy = self._config.proxy.trust_proxy

        raw_target = resolve_target(path, raw_query)
        if not raw_target:
            if verbose:
                self._logger.log_debug(f"Original request: {raw_query}")
            raise MissingTarget("No target URL in request")

        if verbose:
            self._logger.log_debug(f"Processing raw target URL: {raw_target}")

        decoded = ensure_scheme(decode_target(raw_target))
        if verbose:
            self._logger.log_debug(f"Decoded target URL: {decoded}")

        final_url = build_final_url(decoded, raw_query)
        if verbose:
            self._logger.log_debug(f"Final URL to proxy: {final_url}")

        client_ip = self._headers.client_ip(headers, peer, trust_proxy)
        upstream_headers = self._headers.build_upstream_headers(
            headers, final_url, client_ip, trust_proxy
        )
        return PreparedRequest(
            method=method,
            url=final_url,
            headers=upstream_headers,
            client_ip=client_ip,
            has_body=has_body(headers),
        )
