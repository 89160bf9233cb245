"""Line-oriented console logger for proxied traffic."""

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from core.config import Settings
from ui.log_utils import write_cli_log


def status_style(status: int) -> str:
    if status >= 500:
        return "red"
    if status >= 400:
        return "yellow"
    if status >= 300:
        return "cyan"
    return "green"


class ConsoleLogger:
    """Print one rich line per event and mirror it to the CLI log file."""

    def __init__(self, config: Settings, console: Console | None = None):
        self.config = config
        self.console = console or Console()
        self._level = getattr(logging, config.log_level)
        self._log_root = Path(config.log_dir)

    def log_request(self, method: str, path: str) -> None:
        self._print(logging.INFO, f"[bold]>[/bold] Proxying: {method} {escape(path)}")
        write_cli_log("PROXY", f"{method} {path}", log_root=self._log_root)

    def log_token(self, preview: str) -> None:
        self._print(logging.DEBUG, f"[dim]  Using token: {escape(preview)}[/dim]")
        write_cli_log("TOKEN", preview, log_root=self._log_root)

    def log_response(self, method: str, path: str, status: int) -> None:
        style = status_style(status)
        self._print(
            logging.INFO,
            f"[{style}]<[/{style}] Response: [{style}]{status}[/{style}] from {method} {escape(path)}",
        )
        write_cli_log("RESPONSE", path, log_root=self._log_root, method=method, status=status)

    def log_not_found(self, method: str, path: str) -> None:
        self._print(logging.INFO, f"[yellow]?[/yellow] No route: {method} {escape(path)}")
        write_cli_log("NOT_FOUND", path, log_root=self._log_root, method=method)

    def log_error(self, route: str, status: int, message: str) -> None:
        self._print(logging.ERROR, f"[red bold]![/red bold] [red]{route} {status}: {escape(message)}[/red]")
        write_cli_log("ERROR", message[:200], log_root=self._log_root, route=route, status=status)

    def _print(self, level: int, markup: str) -> None:
        if level < self._level:
            return
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.console.print(f"[dim]{timestamp}[/dim] {markup}", highlight=False)
