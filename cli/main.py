"""CLI entry point and argument parsing"""

import argparse
import logging
import sys

from rich.console import Console

import settings
from cli.auth_handlers import browser_login, device_login, logout
from cli.status_display import show_token_status


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Codex OAuth bridge for ChatGPT subscriptions")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Authenticate with your ChatGPT subscription")
    login.add_argument("--device", action="store_true", help="Use device authorization flow (headless)")
    login.add_argument(
        "--port",
        type=int,
        default=settings.CODEX_OAUTH_PORT,
        help=f"Local callback port for the browser flow (default: {settings.CODEX_OAUTH_PORT})",
    )

    sub.add_parser("logout", help="Remove stored Codex tokens")
    sub.add_parser("status", help="Show Codex authentication status")

    serve = sub.add_parser("serve", help="Run the web login routes")
    serve.add_argument("--bind", "-b", default=None, help="Override bind address (default: from config)")
    serve.add_argument("--port", type=int, default=None, help="Override port (default: from config)")

    return parser


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs full request URLs at INFO
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def run(args: argparse.Namespace) -> int:
    from codex_oauth import CodexOAuthManager

    if args.command == "serve":
        import uvicorn
        from proxy import app

        uvicorn.run(
            app,
            host=args.bind or settings.BIND_ADDRESS,
            port=args.port or settings.PORT,
            log_level="debug" if args.debug else str(settings.LOG_LEVEL).lower(),
        )
        return 0

    manager = CodexOAuthManager()

    if args.command == "login":
        if args.device:
            return device_login(manager, console)
        return browser_login(manager, args.port, console)

    if args.command == "logout":
        return logout(manager, console)

    return show_token_status(manager.storage, console)


def main(argv=None):
    """Entry point for the CLI"""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    try:
        exit_code = run(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
