"""Entry point for manual and CI runs."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from serp_check.config.run_config import RunConfig
from serp_check.config.settings import Settings
from serp_check.core.browser import BrowserSession
from serp_check.core.logging import configure_logging
from serp_check.search.models import Query
from serp_check.storage.results import ResultsStore
from serp_check.tasks.search_check import QueryOutcome, SearchCheckTask

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/run_config.toml")


async def run(settings: Settings, queries: Sequence[Query]) -> list[QueryOutcome]:
    task = SearchCheckTask(settings)
    async with BrowserSession(settings) as session:
        outcomes = await task.run_all(queries, session.open_page)

    path = await ResultsStore(settings.results_dir).write(outcomes, base_url=settings.base_url)
    logger.info("Wrote %s results to %s", len(outcomes), path)
    for outcome in outcomes:
        if outcome.passed:
            logger.info("PASS '%s'", outcome.query.term)
        else:
            logger.error("FAIL '%s': %s", outcome.query.term, outcome.error)
    return outcomes


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate search engine result pages")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=(
            "Path to a TOML run configuration (or legacy settings.json) "
            "(defaults to config/run_config.toml when present)"
        ),
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        help="Ignore config/run_config.toml even if it exists",
    )
    parser.add_argument(
        "--query",
        action="append",
        metavar="TERM",
        help="Search term to check (repeatable). Replaces the configured queries.",
    )
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--headed",
        action="store_true",
        help="Force headed browser mode (overrides config/env)",
    )
    mode_group.add_argument(
        "--headless",
        action="store_true",
        help="Force headless browser mode (overrides config/env)",
    )
    parser.add_argument(
        "--override",
        action="append",
        metavar="KEY=VALUE",
        help="Override a Settings attribute (repeatable). Values accept JSON literals.",
    )
    return parser


def _decode_override(value: str) -> object:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _apply_overrides(settings: Settings, overrides: dict[str, object]) -> None:
    for key, raw in overrides.items():
        if key not in Settings.model_fields:
            logger.warning("Ignoring unknown override '%s'", key)
            continue
        setattr(settings, key, raw)
        logger.info("Override: set %s=%r", key, raw)


def _resolve_config_path(args: argparse.Namespace) -> Optional[Path]:
    if args.no_config:
        return None
    if args.config:
        if not args.config.exists():
            raise FileNotFoundError(f"Config file not found: {args.config}")
        return args.config
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings()
    overrides: dict[str, object] = {}

    config_path = _resolve_config_path(args)
    run_config: Optional[RunConfig] = None
    if config_path:
        run_config = RunConfig.load(config_path)
        run_config.apply_to(settings)

    if args.override:
        for entry in args.override:
            if "=" not in entry:
                parser.error(f"Override must be in KEY=VALUE form (got '{entry}')")
            key, value = entry.split("=", 1)
            overrides[key.strip()] = _decode_override(value.strip())

    if args.headed:
        settings.headless = False
    elif args.headless:
        settings.headless = True

    log_path = configure_logging(settings.log_level, settings.log_dir)
    logger.debug("Writing logs to %s", log_path)

    if overrides:
        _apply_overrides(settings, overrides)

    if args.query:
        queries: tuple[Query, ...] = tuple(Query(term=term) for term in args.query if term.strip())
    elif run_config:
        queries = run_config.query_list()
    else:
        queries = ()
    if not queries:
        parser.error("No queries configured; pass --query or a config file with queries")

    if run_config:
        suffix = f" ({run_config.title})" if run_config.title else ""
        logger.info("Loaded run profile '%s'%s from %s", run_config.profile, suffix, config_path)
    else:
        logger.info("Running with environment-based settings (no run_config applied)")
    logger.info("Checking %s queries against %s", len(queries), settings.base_url)

    outcomes = asyncio.run(run(settings, queries))
    return 0 if outcomes and all(outcome.passed for outcome in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
