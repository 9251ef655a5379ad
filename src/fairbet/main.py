"""Application entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path

from fairbet.config import get_config
from fairbet.config.engine import EngineConfig
from fairbet.errors import InvalidInputError
from fairbet.markets.records import parse_records
from fairbet.pipeline import EVSnapshot, evaluate_records

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from the application config."""
    logging.basicConfig(
        level=level or get_config().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def boot() -> EngineConfig:
    """
    Boot sequence: load config → validate → build engine config.

    Raises:
        SystemExit: On configuration errors
    """
    try:
        config = get_config()
        logger.info(f"Configuration loaded: env={config.env}")

        engine_config = config.engine_config()
        logger.info(
            f"Engine configured: {len(engine_config.sharp_books_by_sport)} sharp book sets, "
            f"{len(engine_config.fee_profiles)} fee profiles"
        )
        return engine_config

    except Exception as e:
        logger.error(f"Boot sequence failed: {e}")
        raise SystemExit(1) from e


def evaluate_file(path: Path, engine_config: EngineConfig, max_workers: int = 1) -> EVSnapshot:
    """Load a JSON array of bet records and evaluate it.

    Raises:
        InvalidInputError: If the file is not a JSON array or a record is malformed
    """
    with path.open(encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise InvalidInputError(f"{path} must contain a JSON array of bet records")

    return evaluate_records(parse_records(raw), engine_config, max_workers=max_workers)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: boot check, optionally evaluating a snapshot file."""
    parser = argparse.ArgumentParser(
        description="FairBet: fair odds and EV for a snapshot of bet records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Example:\n"
            "  python -m fairbet.main --snapshot bets.json --workers 4"
        ),
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        metavar="PATH",
        help="JSON file holding an array of bet records",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads for the per-record EV pass (default: 1)",
    )
    args = parser.parse_args(argv)

    configure_logging()
    engine_config = boot()

    if args.snapshot is None:
        logger.info("Boot check complete")
        return

    try:
        snapshot = evaluate_file(args.snapshot, engine_config, max_workers=args.workers)
    except (OSError, json.JSONDecodeError, InvalidInputError) as e:
        logger.error(f"Could not evaluate {args.snapshot}: {e}")
        sys.exit(1)

    best = snapshot.best
    if best is not None:
        logger.info(
            f"Best EV: {best.record_id} at {best.best_book} "
            f"({best.ev_percent:+.1f}%, {best.confidence.value} confidence)"
        )
    for summary in snapshot.league_breakdown:
        logger.info(f"{summary.league}: {summary.positive_ev}/{summary.total} reliably +EV")


if __name__ == "__main__":
    main()
