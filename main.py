#!/usr/bin/env python
"""CLI for perspective-lens: search, serve and trending topics."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Literal

import uvicorn
from pydantic import BaseModel, field_validator

from perspective_lens.api import create_app
from perspective_lens.config import create_from_config, get_default_config_path, load_config
from perspective_lens.data import LEANS

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Literal["search", "serve", "trending"]
    topic: str = ""
    config: Path
    log: bool = False
    log_dir: str = "logs"
    fact_check: bool = True
    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


async def search(args: CLIArgs) -> int:
    """Run the full pipeline in-process and print each lean's articles."""
    config = load_config(args.config)
    services = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
        fact_check_override=False if not args.fact_check else None,
    )
    pipeline = services.pipeline()
    if pipeline is None:
        logger.error("AI service not configured: set CLAUDE_API_KEY")
        return 1

    logger.info(f"Searching perspectives for: {args.topic}")
    logger.info(f"Providers: {', '.join(services.searchers) or 'none'}")

    output = await pipeline.run(args.topic, fact_check=args.fact_check)

    logger.info(f"\n{output.topic.title}")
    logger.info(output.topic.description)
    logger.info(f"Tags: {', '.join(output.topic.tags)}")

    for view in output.perspectives:
        source = output.result.source_for(view.perspective)
        logger.info(f"\n=== {view.label} [{view.perspective.upper()}] via {source} ===")
        for i, article in enumerate(view.articles, 1):
            logger.info(f"{i}. {article.title}")
            logger.info(f"   Outlet: {article.outlet}")
            logger.info(f"   URL: {article.url}")
            for claim in output.fact_checks.get(article.url, []):
                logger.info(f"   Fact check ({claim.status}): {claim.rating} by {claim.source}")

    usage = output.usage
    logger.info("\n--- Usage Summary ---")
    counts = ", ".join(f"{lean}={len(output.result.articles[lean])}" for lean in LEANS)
    logger.info(f"Articles: {counts}")
    logger.info(f"Provider requests: {usage.provider_requests}")
    logger.info(f"API calls: {len(usage.api_calls)}")
    logger.info(f"Input tokens: {usage.input_tokens:,}")
    logger.info(f"Output tokens: {usage.output_tokens:,}")
    if usage.web_searches:
        logger.info(f"Web searches: {usage.web_searches}")

    if output.log_path:
        logger.info(f"\nRun log written to: {output.log_path}")
    return 0 if output.has_articles else 2


async def trending(args: CLIArgs) -> int:
    services = create_from_config(load_config(args.config))
    assert services.trending is not None
    for topic in await services.trending.fetch():
        print(topic)
    return 0


def serve(args: CLIArgs) -> int:
    services = create_from_config(
        load_config(args.config),
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )
    uvicorn.run(create_app(services), host=args.host, port=args.port)
    return 0


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Compare news coverage of a topic across the political spectrum."
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable per-run stage logging to JSON files",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    search_parser = commands.add_parser("search", help="Search a topic across all leans")
    search_parser.add_argument("topic", help="Topic to search")
    search_parser.add_argument(
        "--no-fact-check",
        action="store_true",
        default=False,
        help="Skip fact-check enrichment",
    )

    serve_parser = commands.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    commands.add_parser("trending", help="Print trending news topics")

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            command=ns.command,
            topic=getattr(ns, "topic", ""),
            config=config_path,
            log=ns.log,
            log_dir=ns.log_dir,
            fact_check=not getattr(ns, "no_fact_check", False),
            host=getattr(ns, "host", "127.0.0.1"),
            port=getattr(ns, "port", 8000),
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        if args.command == "serve":
            sys.exit(serve(args))
        if args.command == "trending":
            sys.exit(asyncio.run(trending(args)))
        if not args.topic.strip():
            logger.error("Topic is required")
            sys.exit(1)
        sys.exit(asyncio.run(search(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
