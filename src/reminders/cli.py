"""Command-line trigger for a single reminder run."""

import argparse
import logging
import signal
import sys
import threading
from types import FrameType

from dotenv import load_dotenv

from src.observability.sentry import init_sentry
from src.paths import ENV_FILE
from src.reminders.exceptions import ReminderJobError
from src.reminders.factory import create_reminder_job
from src.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m src.reminders",
        description="Send due task reminder emails once and exit.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Users to dispatch concurrently (overrides REMINDER_MAX_WORKERS)",
    )
    args = parser.parse_args(argv)
    if args.max_workers is not None and args.max_workers < 1:
        parser.error("--max-workers must be at least 1")
    return args


def main(argv: list[str] | None = None) -> int:
    """Run the reminder job once.

    SIGINT/SIGTERM stop new users from being started; reminders already
    sent are still recorded before exiting.

    :param argv: Command-line arguments (defaults to sys.argv).
    :returns: Process exit code.
    """
    load_dotenv(ENV_FILE)
    configure_logging()
    init_sentry()
    args = _parse_args(argv)

    cancel_event = threading.Event()

    def _request_stop(signum: int, _frame: FrameType | None) -> None:
        logger.warning(f"Received signal {signum}, finishing in-flight reminders")
        cancel_event.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    try:
        job = create_reminder_job(max_workers=args.max_workers)
        result = job.run(cancel_event=cancel_event)
    except ReminderJobError as e:
        logger.error(f"Reminder run failed: {e}")
        return 1

    print(result.model_dump_json())
    return 0


if __name__ == "__main__":
    sys.exit(main())
