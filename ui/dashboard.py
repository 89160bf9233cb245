"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from pathlib import Path
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Settings
from ui.console import status_style
from ui.log_utils import write_cli_log

console = Console()


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, method: str, path: str, timestamp: datetime):
        self.method = method
        self.url = path
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.status: int | None = None
        self.token: str | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent proxied requests and errors."""

    def __init__(self, config: Settings):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._counts = {"proxied": 0, "not_found": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None
        self._log_root = Path(config.log_dir)

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

    @property
    def counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    @property
    def recent(self) -> list[RequestInfo]:
        with self._lock:
            return list(self._requests)

    def log_request(self, method: str, path: str) -> None:
        """Record a request about to be forwarded."""
        with self._lock:
            self._counts["proxied"] += 1
            self._requests.insert(0, RequestInfo(method, path, datetime.now()))
            self._requests = self._requests[: self._max_requests]
            self._refresh()
        write_cli_log("PROXY", f"{method} {path}", log_root=self._log_root)

    def log_token(self, preview: str) -> None:
        with self._lock:
            if self._requests:
                self._requests[0].token = preview
            self._refresh()
        write_cli_log("TOKEN", preview, log_root=self._log_root)

    def log_response(self, method: str, path: str, status: int) -> None:
        """Attach the upstream status to the newest matching pending request."""
        with self._lock:
            for info in self._requests:
                if info.status is None and info.method == method and info.url == path:
                    info.status = status
                    break
            self._refresh()
        write_cli_log("RESPONSE", path, log_root=self._log_root, method=method, status=status)

    def log_not_found(self, method: str, path: str) -> None:
        with self._lock:
            self._counts["not_found"] += 1
            self._refresh()
        write_cli_log("NOT_FOUND", path, log_root=self._log_root, method=method)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._counts["errors"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
        write_cli_log("ERROR", message[:200], log_root=self._log_root, route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="requests"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["requests"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Apify Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Proxied: {self._counts['proxied']}", style="blue")
        stats.append("  |  ")
        stats.append(f"404: {self._counts['not_found']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=3)
            table.add_column("Status", width=6)
            table.add_column("Token", ratio=1)

            for info in self._requests:
                if info.status is None:
                    status = Text("...", style="dim")
                else:
                    status = Text(str(info.status), style=status_style(info.status))
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    escape(info.path),
                    status,
                    escape(info.token or "-"),
                )
            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Target: {self.config.upstream_base_url}\n"
                f"Proxy:  http://localhost:{self.config.port}{self.config.mount_path}/*",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
