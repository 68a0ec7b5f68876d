"""Ingest daemon.

Runs a bootstrap ingest when it starts and then one scheduled ingest per day
at the configured local time. Ingest failures are logged and never stop the
daemon; the next scheduled run simply tries again.
"""

import asyncio
import logging
import signal
import sys
from datetime import UTC, datetime, time, timedelta
from types import FrameType

import click
import pytz
from dependency_injector import providers

from whalecount.config import ConfigManager
from whalecount.config.models import WhaleCountConfig
from whalecount.container import Container, initialize_services
from whalecount.ingest.service import IngestService
from whalecount.system.path_resolver import PathResolver
from whalecount.system.structlog_configurator import configure_structlog

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 1.0


class DaemonState:
    """Encapsulates daemon state to avoid module-level globals."""

    shutdown_flag: bool = False
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None

    @classmethod
    def reset(cls) -> None:
        """Reset state to initial values (useful for testing)."""
        cls.shutdown_flag = False
        cls.last_run_at = None
        cls.next_run_at = None


def _signal_handler(signum: int, frame: FrameType | None) -> None:
    logger.info("Signal %s received, initiating shutdown...", signum)
    DaemonState.shutdown_flag = True


def next_run_after(now: datetime, hour: int, minute: int, timezone_name: str) -> datetime:
    """Return the next daily run time strictly after ``now``, in UTC.

    Args:
        now: Timezone-aware current time
        hour: Local hour of the daily run
        minute: Local minute of the daily run
        timezone_name: Olson name of the schedule's timezone

    Returns:
        Timezone-aware UTC datetime
    """
    tz = pytz.timezone(timezone_name)
    local_now = now.astimezone(tz)
    run_day = local_now.date()
    candidate = tz.localize(datetime.combine(run_day, time(hour, minute)))
    if candidate <= local_now:
        candidate = tz.localize(datetime.combine(run_day + timedelta(days=1), time(hour, minute)))
    return candidate.astimezone(UTC)


async def run_ingest_safely(service: IngestService, trigger: str) -> bool:
    """Run one ingest, logging rather than raising any failure.

    Returns:
        True if the run completed without error
    """
    logger.info("Starting %s ingest", trigger)
    DaemonState.last_run_at = datetime.now(UTC)
    try:
        summary = await service.ingest()
    except Exception:
        logger.exception("%s ingest failed", trigger.capitalize())
        return False

    logger.info(
        "%s ingest complete: %d parsed, %d written, %d unchanged",
        trigger.capitalize(),
        summary.parsed,
        len(summary.written),
        len(summary.unchanged),
    )
    return True


async def run_schedule(service: IngestService, config: WhaleCountConfig) -> None:
    """Run the daily scheduled ingest until shutdown is requested."""
    schedule = config.ingest
    DaemonState.next_run_at = next_run_after(
        datetime.now(UTC), schedule.schedule_hour, schedule.schedule_minute, schedule.schedule_timezone
    )
    logger.info("Next scheduled ingest at %s", DaemonState.next_run_at.isoformat())

    while not DaemonState.shutdown_flag:
        now = datetime.now(UTC)
        if now >= DaemonState.next_run_at:
            await run_ingest_safely(service, "scheduled")
            DaemonState.next_run_at = next_run_after(
                now, schedule.schedule_hour, schedule.schedule_minute, schedule.schedule_timezone
            )
            logger.info("Next scheduled ingest at %s", DaemonState.next_run_at.isoformat())
        await asyncio.sleep(POLL_INTERVAL_SECONDS)


async def run(once: bool, path_resolver: PathResolver | None = None) -> int:
    """Run the daemon.

    Args:
        once: Only run the bootstrap ingest, then exit
        path_resolver: Optional PathResolver; defaults to one built from the environment

    Returns:
        Process exit code
    """
    container = Container()
    if path_resolver is not None:
        container.path_resolver.override(providers.Object(path_resolver))

    config = container.config()
    database = container.core_database()
    try:
        await initialize_services(container)
        service = container.ingest_service()

        if once or config.ingest.run_on_startup:
            await run_ingest_safely(service, "bootstrap")
        if not once:
            await run_schedule(service, config)
    finally:
        await database.dispose()

    logger.info("Ingest daemon stopped")
    return 0


@click.command()
@click.option("--once", is_flag=True, help="Run a single ingest and exit.")
def main(once: bool) -> None:
    """Start the whale count ingest daemon."""
    path_resolver = PathResolver()
    config = ConfigManager(path_resolver).load()
    configure_structlog(config)

    signal.signal(signal.SIGTERM, _signal_handler)
    signal.signal(signal.SIGINT, _signal_handler)

    try:
        exit_code = asyncio.run(run(once, path_resolver))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Ingest daemon stopped by user")
    except Exception as e:
        logger.error("Ingest daemon failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
