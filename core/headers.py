"""Header filtering for upstream requests and relayed responses."""

from collections.abc import Iterable

from core.target import extract_host

# Hop-by-hop headers are never forwarded in either direction (RFC 7230 6.1)
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

SKIPPED_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | {
    "host",
    "x-forwarded-host",
    "x-forwarded-proto",
    "content-length",
}

# Headers private to the fronting web server
PRIVATE_HEADER_PREFIXES = ("x-nginx",)

CORS_HEADER_PREFIX = "access-control-"


def should_skip_header(name: str) -> bool:
    """Return True if an inbound header must not reach the upstream."""
    lower = name.lower()
    return lower in SKIPPED_REQUEST_HEADERS or lower.startswith(PRIVATE_HEADER_PREFIXES)


def _first(headers: Iterable[tuple[str, str]], name: str) -> str:
    for key, value in headers:
        if key.lower() == name:
            return value
    return ""


class HeaderBuilder:
    """Build upstream request headers and filter upstream response headers."""

    def client_ip(
        self,
        headers: list[tuple[str, str]],
        peer: str,
        trust_proxy: bool,
    ) -> str:
        """Originating client address.

        Forwarded headers are only believed in trust-proxy mode; otherwise the
        socket peer is the answer.
        """
        if trust_proxy:
            forwarded_for = _first(headers, "x-forwarded-for")
            if forwarded_for:
                return forwarded_for.split(",")[0].strip()
            real_ip = _first(headers, "x-real-ip")
            if real_ip:
                return real_ip
        return peer

    def build_upstream_headers(
        self,
        headers: list[tuple[str, str]],
        final_url: str,
        client_ip: str,
        trust_proxy: bool,
    ) -> list[tuple[str, str]]:
        """Copy every inbound header except the deny-set, then set Host."""
        upstream = [(key, value) for key, value in headers if not should_skip_header(key)]

        # The body is relayed byte for byte, so only ask for what the client accepts
        if not _first(headers, "accept-encoding"):
            upstream.append(("Accept-Encoding", "identity"))

        if trust_proxy and _first(headers, "x-forwarded-for"):
            upstream = [(key, value) for key, value in upstream if key.lower() != "x-real-ip"]
            upstream.append(("X-Real-IP", client_ip))

        host = extract_host(final_url)
        if host:
            upstream.append(("Host", host))
        return upstream

    def filter_response_headers(
        self,
        headers: Iterable[tuple[str, str]],
    ) -> list[tuple[str, str]]:
        """Drop upstream CORS headers (ours win) and hop-by-hop headers."""
        return [
            (key, value)
            for key, value in headers
            if not key.lower().startswith(CORS_HEADER_PREFIX)
            and key.lower() not in HOP_BY_HOP_HEADERS
        ]
