"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_request_log

console = Console()


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, method: str, url: str, status: int, client_ip: str, timestamp: datetime):
        self.method = method
        self.url = url[:80] + "..." if len(url) > 80 else url
        self.status = status
        self.client_ip = client_ip
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent proxied requests and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[RequestInfo] = []
        self._max_recent = 12
        self._request_count = {"proxied": 0, "preflight": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_proxy(
        self,
        method: str,
        url: str,
        status: int,
        client_ip: str,
        headers: list[tuple[str, str]] | None = None,
    ) -> None:
        """Log a request relayed to its target."""
        with self._lock:
            self._request_count["proxied"] += 1
            info = RequestInfo(method, url, status, client_ip, datetime.now())
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()

        write_cli_log("PROXY", f"{method} {url}", status=status, client=client_ip)
        if self.config.proxy.verbose:
            write_request_log(method, url, status, client_ip, headers)

    def log_preflight(self, path: str, origin: str | None) -> None:
        """Count an answered preflight."""
        with self._lock:
            self._request_count["preflight"] += 1
            self._refresh()

    def log_debug(self, message: str) -> None:
        """Debug lines go to the log file only; the live view has no room for them."""
        if self.config.proxy.verbose:
            write_cli_log("DEBUG", message)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._request_count["errors"] += 1
            truncated = message[:60] + "..." if len(message) > 60 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
        write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Argon Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Proxied: {self._request_count['proxied']}", style="green")
        stats.append("  |  ")
        stats.append(f"Preflight: {self._request_count['preflight']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Errors: {self._request_count['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"{self.config.proxy.address}:{self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Status", width=6)
            table.add_column("Method", width=7)
            table.add_column("Target", ratio=3)
            table.add_column("Client", ratio=1)

            for req in self._recent:
                status_style = "green" if req.status < 400 else "yellow"
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    Text(str(req.status), style=status_style),
                    req.method,
                    req.url,
                    req.client_ip,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[green]Recent requests[/green]", border_style="green")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            base = f"http://{self.config.proxy.address}:{self.config.proxy.port}"
            content = Text(
                f"{base}/proxy/{{target-url}}  or  {base}/proxy/?target={{target-url}}\n"
                f"Allow-Origin: {self.config.proxy.allow_origin}  "
                f"Trust X-Forwarded-*: {self.config.proxy.trust_proxy}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
