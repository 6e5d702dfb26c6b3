"""jiraproxy entry point."""

import argparse
import logging

from jiraproxy import __version__
from jiraproxy.config import get_settings
from jiraproxy.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="REST proxy between the board front-end and Jira Cloud",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jiraproxy                          Start the API server (default)
  jiraproxy serve --port 9000        Start on a different port
  jiraproxy serve --dev              Start with auto-reload (dev mode)
""",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=["serve"],
        help="Subcommand: 'serve' starts the API server",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind (default: WEB_HOST or 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Port to bind (default: WEB_PORT or 8888)",
    )
    parser.add_argument("--dev", action="store_true", help="Development mode with auto-reload")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    setup_logging(level=args.log_level or settings.log_level)

    host = args.host if args.host is not None else settings.web_host
    port = args.port if args.port is not None else settings.web_port

    from jiraproxy.api.serve import run_api_server

    try:
        run_api_server(host=host, port=port, dev=args.dev)
    except KeyboardInterrupt:
        logger.info("jiraproxy stopped.")


if __name__ == "__main__":
    main()
