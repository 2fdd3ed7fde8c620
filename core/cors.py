"""CORS response headers for proxied, preflight and local responses."""

from collections.abc import Mapping

ALLOWED_METHODS = ("GET", "POST", "OPTIONS", "PUT", "DELETE", "HEAD", "PATCH")
DEFAULT_PREFLIGHT_HEADERS = "Content-Type, Authorization, X-Requested-With"
PREFLIGHT_MAX_AGE = 86400  # 24 hours


class CorsAnnotator:
    """Compute Access-Control-* headers for one configured allowed origin."""

    def __init__(self, allowed_origin: str) -> None:
        self.allowed_origin = allowed_origin

    def allow_origin(self, origin: str | None) -> str:
        """Echo the caller's Origin when it is allowed, else the configured value."""
        if origin and self.allowed_origin in ("*", origin):
            return origin
        return self.allowed_origin

    def headers(self, request_headers: Mapping[str, str]) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin(request_headers.get("origin")),
            "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
            "Access-Control-Allow-Headers": "*",
            "Access-Control-Allow-Credentials": "true",
            "Vary": "Origin",
        }

    def preflight_headers(self, request_headers: Mapping[str, str]) -> dict[str, str]:
        """Headers for a 204 preflight reply.

        The requested method and headers are always granted.
        """
        headers = self.headers(request_headers)

        methods = list(ALLOWED_METHODS)
        requested_method = request_headers.get("access-control-request-method", "").strip().upper()
        if requested_method and requested_method not in methods:
            methods.append(requested_method)
        headers["Access-Control-Allow-Methods"] = ", ".join(methods)

        requested_headers = request_headers.get("access-control-request-headers")
        headers["Access-Control-Allow-Headers"] = requested_headers or DEFAULT_PREFLIGHT_HEADERS

        headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE)
        return headers
