"""CLI commands for serving the API and manual scraping."""

import argparse
import json
import sys
from dataclasses import asdict

from gamestats.config.logging import setup_logging
from gamestats.config.settings import Settings
from gamestats.core.errors import FetchError


def _load_settings() -> Settings:
    settings = Settings.from_env()
    for problem in settings.validate():
        print(f"Warning: {problem}", file=sys.stderr)
    return settings


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    from gamestats.version import __version__

    logger = setup_logging(console=True)
    logger.info(f"GameStats v{__version__} starting...")

    # Import here to avoid loading FastAPI when not needed
    import uvicorn

    from gamestats.api.app import create_app

    settings = _load_settings()
    logger.info(f"Source: {settings.base_url}, cache TTL: {settings.cache_ttl}s")
    logger.info(f"IGDB enrichment: {'enabled' if settings.enrichment_enabled else 'disabled'}")

    app = create_app(settings)
    logger.info(f"Listening on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    return 0


def cmd_games(args: argparse.Namespace) -> int:
    """Crawl a user's collection and print it as JSON."""
    # Configure logging before imported modules grab the logger
    setup_logging(console=args.verbose)
    from gamestats.api.app import build_crawler

    crawler = build_crawler(_load_settings())

    try:
        collection = crawler.crawl(args.username, start_page=args.page, full_crawl=args.all)
    except FetchError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if collection.is_partial:
        print(f"Warning: {collection.error}", file=sys.stderr)
    _print_json(asdict(collection))
    return 0


def cmd_profile(args: argparse.Namespace) -> int:
    """Fetch a user's profile and print it as JSON."""
    # Configure logging before imported modules grab the logger
    setup_logging(console=args.verbose)
    from gamestats.api.app import build_crawler

    crawler = build_crawler(_load_settings())

    try:
        profile = crawler.fetch_profile(args.username)
    except FetchError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    _print_json(asdict(profile))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="gamestats",
        description="Backloggd collection scraper with IGDB enrichment",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start web server")
    serve_parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )

    # games command
    games_parser = subparsers.add_parser("games", help="Print a user's collection as JSON")
    games_parser.add_argument("username", help="Backloggd username")
    games_parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page to start from (default: 1)",
    )
    games_parser.add_argument(
        "--all",
        action="store_true",
        help="Crawl every page from --page on",
    )
    games_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )

    # profile command
    profile_parser = subparsers.add_parser("profile", help="Print a user's profile as JSON")
    profile_parser.add_argument("username", help="Backloggd username")
    profile_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )

    return parser


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "serve": cmd_serve,
        "games": cmd_games,
        "profile": cmd_profile,
    }

    cmd_func = commands.get(args.command)
    if cmd_func is None:
        print(f"Unknown command: {args.command}")
        return 1

    return cmd_func(args)


if __name__ == "__main__":
    sys.exit(main())
