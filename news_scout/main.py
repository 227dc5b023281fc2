"""Command-line entrypoint for News Scout.

Flow:
1) load workspace configuration
2) create a run for a topic (or pick up an existing run)
3) execute it: fetch, filter, dedup, rank, persist, notify
"""

from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv

from .output.run_reporter import RunReport
from .output.telegram_client import TelegramClient
from .pipeline.scout_pipeline import execute_run
from .storage import JsonRunStore, UsageLog, WorkspaceStore
from .utils.config_loader import ConfigError
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import ScoutConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="News Scout - discover, deduplicate and rank news for a topic"
    )
    parser.add_argument(
        "--config",
        default="config/workspaces.yaml",
        help="Path to workspaces configuration file (YAML)",
    )
    parser.add_argument("--workspace", help="Workspace id owning the topic")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--topic", help="Create and execute a new run for this topic id")
    target.add_argument("--run-id", help="Execute an existing run (no-op unless it is running)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log notifications instead of sending them",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: LOG_LEVEL env or INFO)",
    )
    args = parser.parse_args(argv)
    if args.topic and not args.workspace:
        parser.error("--topic requires --workspace")
    return args


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("scout.cli")
    cfg = ScoutConfig.from_env()

    logger.info("Loading workspaces configuration from %s", args.config)
    try:
        workspaces = WorkspaceStore.from_yaml(args.config)
    except ConfigError as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1

    runs = JsonRunStore(cfg.runs_path)
    if args.topic:
        try:
            workspaces.get_topic(args.workspace, args.topic)
        except LookupError as exc:
            logger.error("%s", exc)
            return 1
        run_id = runs.create(args.workspace, args.topic).id
    else:
        run_id = args.run_id

    if not cfg.telegram_token and not args.dry_run:
        logger.warning("TELEGRAM_BOT_TOKEN not set; notifications will only be logged")
    notifier = TelegramClient(
        token=cfg.telegram_token, dry_run=args.dry_run or not cfg.telegram_token
    )
    try:
        run = execute_run(
            run_id,
            runs=runs,
            workspaces=workspaces,
            notifier=notifier,
            usage_log=UsageLog(cfg.usage_log_path),
            config=cfg,
        )
    except Exception as exc:  # noqa: BLE001 - top-level entrypoint guard
        logger.exception("Run %s failed: %s", run_id, exc)
        failed = runs.get(run_id)
        if failed is not None:
            sys.stdout.write(RunReport.from_run(failed).to_text())
        return 1

    sys.stdout.write(RunReport.from_run(run).to_text())
    return 0 if run.status == "done" else 1


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
