"""Line-oriented console logger (default when the dashboard is off)."""

from datetime import datetime

from rich.console import Console
from rich.markup import escape

from core.config import Config
from ui.log_utils import write_cli_log, write_request_log

console = Console()


class ConsoleLogger:
    """Print one timestamped line per event; debug lines only when verbose."""

    def __init__(self, config: Config, output: Console | None = None):
        self.config = config
        self._console = output or console

    def log_proxy(
        self,
        method: str,
        url: str,
        status: int,
        client_ip: str,
        headers: list[tuple[str, str]] | None = None,
    ) -> None:
        style = "green" if status < 400 else "yellow"
        self._print(f"[{style}]{status}[/{style}] {escape(method)} {escape(url)} [dim]from {escape(client_ip)}[/dim]")
        write_cli_log("PROXY", f"{method} {url}", status=status, client=client_ip)
        if self.config.proxy.verbose:
            write_request_log(method, url, status, client_ip, headers)

    def log_preflight(self, path: str, origin: str | None) -> None:
        if self.config.proxy.verbose:
            self._print(f"[cyan]204[/cyan] OPTIONS {escape(path)} [dim]origin={escape(origin or '-')}[/dim]")

    def log_debug(self, message: str) -> None:
        if self.config.proxy.verbose:
            self._print(f"[dim]{escape(message)}[/dim]")

    def log_error(self, route: str, status: int, message: str) -> None:
        self._print(f"[red][ERROR][/red] {escape(route)} {status}: {escape(message)}")
        write_cli_log("ERROR", message[:200], route=route, status=status)

    def _print(self, line: str) -> None:
        timestamp = datetime.now().strftime("%Y/%m/%d %H:%M:%S")
        self._console.print(f"[dim]{timestamp}[/dim] {line}", highlight=False)
