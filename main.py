"""CLI entry point for the candidate query engine."""

import argparse
import asyncio
import logging
import sys

from src.core.config import Settings
from src.core.store import CandidateStore
from src.llm import available_providers, get_provider
from src.pipeline.orchestrator import QueryPipeline, QueryResult
from src.pipeline.protocol import TextStreamSink


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Candidate query engine - plan, filter, rank and narrate candidate searches",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- query subcommand ---
    query_parser = subparsers.add_parser(
        "query",
        help="Run one query and print the NDJSON event stream to stdout",
    )
    query_parser.add_argument("message", help="Natural-language hiring request")
    query_parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    query_parser.add_argument(
        "--provider",
        choices=available_providers(),
        help="Override the configured LLM provider",
    )
    query_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config and dataset without calling the provider",
    )
    query_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- serve subcommand ---
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    serve_parser.add_argument("--host", help="Override the configured bind host")
    serve_parser.add_argument("--port", type=int, help="Override the configured port")
    serve_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def dry_run(settings: Settings, store: CandidateStore) -> None:
    """Print what would happen without calling the provider."""
    print(f"[DRY RUN] Dataset: {settings.dataset.path} ({len(store)} candidates)")
    print(f"[DRY RUN] Provider: {settings.llm.provider} "
          f"(plan model: {settings.llm.plan_model or 'default'}, "
          f"narration model: {settings.llm.narration_model or 'default'})")
    print(f"[DRY RUN] Write timeout: {settings.stream.write_timeout_seconds}s")
    print("[DRY RUN] Would run think → act1 → act2 → speak (no provider call in dry-run)")


async def run_query(settings: Settings, store: CandidateStore, message: str) -> QueryResult:
    """Run one query, streaming events to stdout."""
    provider = get_provider(settings.llm.provider)
    pipeline = QueryPipeline(store, provider, settings)
    return await pipeline.run(message, TextStreamSink(sys.stdout))


def cmd_query(args: argparse.Namespace) -> int:
    """Handle query subcommand."""
    settings = Settings.from_yaml(args.config)
    if args.provider:
        settings.llm.provider = args.provider
    store = CandidateStore.from_csv(settings.dataset.path)

    if args.dry_run:
        dry_run(settings, store)
        return 0

    result = asyncio.run(run_query(settings, store, args.message))
    if not result.succeeded:
        print(f"Query failed: {result.error}", file=sys.stderr)
        return 1
    print(
        f"\nQuery complete: {result.filtered_count} matched, "
        f"top ids: {', '.join(result.ranked_ids[:5]) or 'none'}",
        file=sys.stderr,
    )
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle serve subcommand."""
    import uvicorn

    from src.api.app import create_app

    settings = Settings.from_yaml(args.config)
    store = CandidateStore.from_csv(settings.dataset.path)
    app = create_app(settings, store=store)
    uvicorn.run(
        app,
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    handler = cmd_query if args.command == "query" else cmd_serve
    try:
        code = handler(args)
    except (FileNotFoundError, ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
