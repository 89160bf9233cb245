"""CLI entry point for apify-proxy."""

import sys
from datetime import datetime
from pathlib import Path

import uvicorn
from rich.console import Console
from rich.markup import escape

from app import create_app
from core.config import Settings, load_settings
from core.exceptions import ConfigurationError
from ui.console import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


class FatalState:
    """Records the first unrecoverable fault and asks the server to stop."""

    def __init__(self) -> None:
        self.error: BaseException | None = None
        self.server: uvicorn.Server | None = None

    def __call__(self, error: BaseException) -> None:
        if self.error is None:
            self.error = error
        if self.server is not None:
            self.server.should_exit = True


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = sys.argv[1:] if argv is None else argv

    if "--help" in args or "-h" in args:
        _print_help()
        return 0

    try:
        config = load_settings()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] Invalid configuration:\n{escape(str(e))}")
        return 1

    if "--config" in args:
        _print_config(config)
        return 0

    use_dashboard = "--dashboard" in args
    log_root = Path(config.log_dir)
    clear_logs(log_root)

    if use_dashboard:
        logger = Dashboard(config)
    else:
        logger = ConsoleLogger(config, console)
        _print_banner(config)

    fatal = FatalState()
    app = create_app(config, logger, on_fatal=fatal)
    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)
    fatal.server = server

    if use_dashboard:
        logger.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", log_root=log_root, port=config.port)
    try:
        server.run()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        fatal(e)
    finally:
        if use_dashboard:
            logger.stop()
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", log_root=log_root, duration=str(duration))

    if fatal.error is not None:
        name = type(fatal.error).__name__
        console.print(f"[red][FATAL][/red] {name}: {escape(str(fatal.error))}")
        return 1

    console.print("\n[bold]Shutting down proxy server gracefully...[/bold]")
    return 0


def _print_banner(config: Settings) -> None:
    base = f"http://localhost:{config.port}"
    mount = f"{base}{config.mount_path}"
    console.print("[bold cyan]Starting Apify Proxy Server...[/bold cyan]")
    console.print(f"[bold]Target API:[/bold] {config.upstream_base_url}")
    console.print(f"[bold]Local:[/bold]        {base}")
    console.print(f"[bold]Health Check:[/bold] {base}{config.health_path}")
    console.print(f"[bold]API Proxy:[/bold]    {mount}/*")
    console.print("\n[bold]Usage Examples:[/bold]")
    console.print(f"   GET  {mount}/users/me?token=YOUR_TOKEN", highlight=False)
    console.print(f"   GET  {mount}/acts?token=YOUR_TOKEN", highlight=False)
    console.print(f"   POST {mount}/acts/ACTOR_ID/runs?token=YOUR_TOKEN", highlight=False)
    console.print("\n[dim]To stop: Ctrl+C[/dim]\n")


def _print_config(config: Settings) -> None:
    for name, value in config.model_dump().items():
        console.print(f"[bold]{name}:[/bold] {escape(str(value))}", highlight=False)


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Apify Proxy[/bold cyan]

Forwards /api/apify/* to the Apify API with permissive CORS headers.

[bold]Usage:[/bold]
    apify-proxy                Start with line logging
    apify-proxy --dashboard    Start with live dashboard
    apify-proxy --config       Show effective configuration
    apify-proxy --help         Show this help

[bold]Environment:[/bold]
    PORT                 Listen port (default 3001)
    APIFY_API_BASE_URL   Upstream base URL (default https://api.apify.com/v2)
    ALLOWED_ORIGINS      JSON list of CORS origins
    MAX_BODY_SIZE        Inbound body cap in bytes (default 10 MB)
"""
    console.print(help_text)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
