"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (console or Dashboard)."""

    def log_proxy(
        self,
        method: str,
        url: str,
        status: int,
        client_ip: str,
        headers: list[tuple[str, str]] | None = None,
    ) -> None: ...
    def log_preflight(self, path: str, origin: str | None) -> None: ...
    def log_debug(self, message: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
