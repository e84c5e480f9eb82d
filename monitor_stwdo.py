"""CLI entrypoint for the STWDO offer watcher."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from dotenv import load_dotenv

from stwdowatcher.config import Settings
from stwdowatcher.runner import OfferWatcherRunner, run_forever

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="STWDO housing offer monitor")
    parser.add_argument(
        "--run",
        action="store_true",
        help="execute one monitoring cycle and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="fetch and diff without notifying or updating stored state",
    )
    parser.add_argument(
        "--target-url",
        help="URL to monitor (overrides MONITOR_URL env var)",
    )
    parser.add_argument(
        "--interval",
        type=int,
        help="polling interval in seconds (overrides POLL_INTERVAL_SECONDS)",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    load_dotenv()

    settings = Settings.from_env()
    overrides = {}
    if args.target_url:
        overrides["monitor_url"] = args.target_url
    if args.interval is not None:
        if args.interval <= 0:
            parser.error("--interval must be positive")
        overrides["poll_interval"] = args.interval
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    runner = OfferWatcherRunner.from_settings(settings)

    if args.run or args.dry_run:
        summary = runner.run(dry_run=args.dry_run)
        if args.dry_run:
            for offer in summary.new_offers:
                logger.info("New: %s | %s", offer.title, offer.url)
        return 0

    logger.info("Starting STWDO offer monitor for: %s", settings.monitor_url)
    logger.info("Polling interval: %ss", settings.poll_interval)
    logger.info("Notification method: %s", settings.notify_method)
    run_forever(runner, interval=settings.poll_interval)
    return 0


def cli() -> None:
    """Console-script wrapper: any error escaping ``main`` exits non-zero."""
    try:
        code = main()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
        code = 0
    except Exception:  # noqa: BLE001
        logger.exception("Critical error")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    cli()
