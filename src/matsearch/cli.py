"""CLI entry point for MatSearch.

Subcommands:
  serve   Run the HTTP API with uvicorn
  search  Run one aggregated search and print the result as JSON
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from matsearch import __version__
from matsearch.config.settings import Settings
from matsearch.observability.logging import setup_logging


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = _load_settings(args.config)
    if args.log_level:
        settings.observability.log_level = args.log_level
    setup_logging(settings.observability)

    if args.command == "search":
        sys.exit(_run_search(settings, args))
    _serve(settings, args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matsearch",
        description="MatSearch — Aggregated materials search over local and remote providers",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument("--version", action="version", version=f"MatSearch {__version__}")

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API (default)")
    serve.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    serve.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload for development")

    search = sub.add_parser("search", help="Run one search and print the result as JSON")
    search.add_argument("q", nargs="?", default=None, help="Formula or keyword")
    search.add_argument("--dataset", "-d", type=str, default=None, help="all, local or remote")
    search.add_argument("--page", type=str, default=None)
    search.add_argument("--page-size", type=str, default=None)
    for flag, param in (
        ("--band-gap-min", "bandGapMin"),
        ("--band-gap-max", "bandGapMax"),
        ("--tough-min", "toughMin"),
        ("--tough-max", "toughMax"),
        ("--dens-min", "densMin"),
        ("--dens-max", "densMax"),
    ):
        search.add_argument(flag, dest=param, type=str, default=None)

    return parser


def _load_settings(config: str | None) -> Settings:
    if not config:
        return Settings()
    config_path = Path(config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    return Settings.from_yaml(config_path)


def _run_search(settings: Settings, args: argparse.Namespace) -> int:
    """Run a single search; returns the process exit code."""
    from matsearch.core.engine import MaterialsSearchEngine
    from matsearch.models.query import InvalidQueryError, SearchQuery

    params = {
        "q": args.q,
        "dataset": args.dataset,
        "page": args.page,
        "pageSize": args.page_size,
        "bandGapMin": args.bandGapMin,
        "bandGapMax": args.bandGapMax,
        "toughMin": args.toughMin,
        "toughMax": args.toughMax,
        "densMin": args.densMin,
        "densMax": args.densMax,
    }
    try:
        query = SearchQuery.from_params(params)
    except InvalidQueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    async def _search() -> str:
        engine = MaterialsSearchEngine(settings)
        await engine.initialize()
        try:
            result = await engine.search(query)
        finally:
            await engine.shutdown()
        return result.model_dump_json(indent=2)

    print(asyncio.run(_search()))
    return 0


def _serve(settings: Settings, args: argparse.Namespace) -> None:
    host = getattr(args, "host", None) or settings.server.host
    port = getattr(args, "port", None) or settings.server.port
    workers = getattr(args, "workers", None) or settings.server.workers
    reload = getattr(args, "reload", False)

    # The app factory runs in the server process; hand it the same config.
    if args.config:
        os.environ["MATSEARCH_CONFIG"] = str(Path(args.config).resolve())
    if args.log_level:
        os.environ["MATSEARCH_OBSERVABILITY__LOG_LEVEL"] = args.log_level

    import uvicorn

    uvicorn.run(
        "matsearch.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        workers=workers if not reload else 1,
        reload=reload,
        log_level=settings.observability.log_level.lower(),
    )


if __name__ == "__main__":
    main()
