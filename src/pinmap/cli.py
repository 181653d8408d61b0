"""Command line client for the bookmarking backend. Use --help for usage."""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from config.config import ClientConfig, load_config
from core.errors.exceptions import ApiError, RefreshFailedError
from core.logging.setup import setup_logging
from pinmap.api_client import PinmapApiClient
from pinmap.auth_service import AuthService

# Project root directory (where .env file is located)
# cli.py is at src/pinmap/cli.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

ACCESS_TOKEN_ENV = "PINMAP_ACCESS_TOKEN"

EXIT_OK = 0
EXIT_API_ERROR = 1
EXIT_SESSION_ENDED = 2
EXIT_USAGE = 64

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pinmap",
        description="Call the bookmarking backend with automatic credential refresh",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # List saved locations
    pinmap request GET /api/v1/locations

    # Create a location
    pinmap request POST /api/v1/locations --data '{"name": "Cafe", "latitude": 37.5, "longitude": 127.0}'

    # Show the signed-in user
    pinmap whoami

    # Sign out
    pinmap logout

The initial access credential is read from PINMAP_ACCESS_TOKEN (or .env).
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml file (default: src/config/config.yaml)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Backend base URL (overrides config and PINMAP_API_BASE_URL)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines instead of console format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    request_parser = subparsers.add_parser("request", help="Send one API request")
    request_parser.add_argument(
        "method",
        type=str.upper,
        choices=["GET", "POST", "PUT", "DELETE"],
        help="HTTP method",
    )
    request_parser.add_argument("path", help="Path relative to the base URL")
    request_parser.add_argument(
        "--data",
        default=None,
        help="JSON request body",
    )

    subparsers.add_parser("whoami", help="Show the signed-in user's profile")
    subparsers.add_parser("logout", help="Sign out on the server and locally")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ClientConfig:
    overrides = {}
    if args.base_url:
        overrides["api_base_url"] = args.base_url
    if args.log_level:
        overrides["log_level"] = args.log_level
    return load_config(config_path=args.config, overrides=overrides or None)


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


async def run_command(args: argparse.Namespace, config: ClientConfig, token: Optional[str]) -> int:
    async with PinmapApiClient(config) as client:
        auth = AuthService(client)
        if token:
            try:
                auth.login_with_token(token)
            except ValueError:
                # Opaque tokens are still valid bearer credentials
                client.credentials.set(token)

        try:
            if args.command == "request":
                body = json.loads(args.data) if args.data else None
                response = await client.request(args.method, args.path, data=body)
                _print_json(response.data)
            elif args.command == "whoami":
                user = await auth.get_user_profile()
                _print_json(user.model_dump(by_alias=True))
            elif args.command == "logout":
                await auth.logout()
                print("Signed out")
        except RefreshFailedError as e:
            logger.error("Session ended", extra={"reason": e.reason})
            print(f"Session ended ({e.reason}); sign in again", file=sys.stderr)
            return EXIT_SESSION_ENDED
        except ApiError as e:
            logger.error(
                "Request failed",
                extra={"http_status": e.status_code, "error_category": e.category.value},
            )
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_API_ERROR

    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")

    args = parse_args(argv)

    try:
        config = build_config(args)
    except (ValueError, OSError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(
        name="pinmap",
        log_file=Path(config.log_file) if config.log_file else None,
        json_format=args.json_logs or config.log_json,
        console_level=config.log_level_value,
        component="cli",
    )

    if args.command == "request" and args.data:
        try:
            json.loads(args.data)
        except ValueError as e:
            print(f"--data is not valid JSON: {e}", file=sys.stderr)
            return EXIT_USAGE

    token = os.getenv(ACCESS_TOKEN_ENV)

    try:
        return asyncio.run(run_command(args, config, token))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_API_ERROR


if __name__ == "__main__":
    sys.exit(main())
