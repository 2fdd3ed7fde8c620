"""CLI entry point for argon-proxy."""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, apply_overrides, load_config
from ui.console import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="argon-proxy",
        description="CORS proxy that relays browser requests to third-party APIs.",
    )
    parser.add_argument("--address", help="Address to listen on (default 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Port to listen on (default 8080)")
    parser.add_argument("--allow-origin", help="CORS Allow-Origin header value (default *)")
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--trust-proxy",
        action="store_true",
        default=None,
        help="Trust X-Forwarded-* headers from a fronting reverse proxy",
    )
    parser.add_argument("--dashboard", action="store_true", help="Show the live dashboard")
    parser.add_argument("--config", type=Path, default=CONFIG_FILE, help="Path to config.json")
    parser.add_argument("--show-config", action="store_true", help="Print config location and exit")
    return parser


def resolve_config(args: argparse.Namespace) -> Config:
    """Merge the config file with command-line flags (flags win)."""
    return apply_overrides(
        load_config(args.config),
        address=args.address,
        port=args.port,
        allow_origin=args.allow_origin,
        verbose=args.verbose,
        trust_proxy=args.trust_proxy,
    )


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.show_config:
        console.print(f"[bold]Config:[/bold] {args.config}")
        return

    try:
        config = resolve_config(args)
    except ValidationError as e:
        console.print(f"[red][ERROR][/red] Invalid settings: {e}")
        sys.exit(1)

    clear_logs()
    if args.dashboard:
        logger = Dashboard(config)
    else:
        logger = ConsoleLogger(config)

    import uvicorn

    app = create_app(config, logger)
    listen_addr = f"{config.proxy.address}:{config.proxy.port}"

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.address,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.proxy.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    _print_startup_info(config, listen_addr)
    if isinstance(logger, Dashboard):
        logger.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", address=listen_addr)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if isinstance(logger, Dashboard):
            logger.stop()

    # A failed startup can leave the serve loop without raising
    if not server.started:
        console.print(f"[red][ERROR][/red] Failed to start server on {listen_addr}")
        write_cli_log("FATAL", "Failed to start server", address=listen_addr)
        sys.exit(1)


def _print_startup_info(config: Config, listen_addr: str):
    """Print supported URL forms and the security-relevant settings."""
    console.print(f"[bold cyan]Starting CORS proxy server on {listen_addr}[/bold cyan]")
    console.print("CORS proxy supports:")
    console.print(f"  - http://{listen_addr}/proxy/{{target-url}}", highlight=False)
    console.print(f"  - http://{listen_addr}/proxy/?target={{target-url}}", highlight=False)
    console.print(f"  - http://{listen_addr}/getconfig/{{filename}}", highlight=False)
    console.print(f"CORS Allow-Origin: [bold]{config.proxy.allow_origin}[/bold]", highlight=False)
    console.print(f"Trust X-Forwarded-* headers: [bold]{config.proxy.trust_proxy}[/bold]")


if __name__ == "__main__":
    main()
