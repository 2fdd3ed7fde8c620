"""Custom exception hierarchy for the CORS proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        status_code: HTTP status the error is reported to the client with
    """

    status_code = 500


class MissingTarget(ProxyError):
    """No target URL could be resolved; the client gets usage text."""

    status_code = 200


class InvalidEncoding(ProxyError):
    """The target URL is not valid percent-encoding."""

    status_code = 400


class RequestConstructionError(ProxyError):
    """The outbound request could not be built."""

    status_code = 500


class UpstreamUnreachable(ProxyError):
    """Raised when the target server could not be reached.

    Attributes:
        url: The final URL the proxy tried to reach
        cause: Human-readable description of the transport failure
    """

    status_code = 502

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"Error proxying request: {cause}")
        self.url = url
        self.cause = cause


class ConfigNotFound(ProxyError):
    """Requested sample configuration file does not exist."""

    status_code = 404

    def __init__(self, name: str) -> None:
        super().__init__("Configuration file not found")
        self.name = name
