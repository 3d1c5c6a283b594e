"""Worker entry point: wires clients, handlers and the scheduler, then runs until signalled."""

import asyncio
import signal

import structlog

from bootcamp_tracker.core.config import Settings, get_global_settings
from bootcamp_tracker.core.database import DatabaseManager
from bootcamp_tracker.core.logging import setup_logging
from bootcamp_tracker.core.riot_api.client import RiotAPIClient
from bootcamp_tracker.core.riot_api.rate_limiter import RiotRateLimiter
from bootcamp_tracker.core.twitch.client import TwitchAPIClient
from bootcamp_tracker.features.roles.gateway import CommunityDragonClient
from bootcamp_tracker.jobs.handlers import JobHandlers
from bootcamp_tracker.jobs.roster import RosterSynchronizer, roster_loader
from bootcamp_tracker.jobs.scheduler import SchedulerService

logger = structlog.get_logger(__name__)


def _validate_credentials(settings: Settings) -> None:
    """Log credential configuration status."""
    if not settings.riot_api_key:
        logger.warning(
            "RIOT_API_KEY not configured, every Riot call will fail",
            hint="Get your key from https://developer.riotgames.com",
        )
    elif settings.riot_api_key.startswith("RGAPI-"):
        logger.info("Riot API key configured (development key detected)")
    else:
        logger.info("Riot API key configured")

    if not (settings.twitch_client_id and settings.twitch_client_secret):
        logger.warning("Twitch credentials not configured, stream checks are disabled")


async def run_worker(stop_event: asyncio.Event) -> None:
    """Run the tracker until ``stop_event`` is set."""
    settings = get_global_settings()
    _validate_credentials(settings)

    if not settings.job_scheduler_enabled:
        logger.info("Job scheduler is disabled via configuration")
        return

    db_manager = DatabaseManager(settings)
    riot = RiotAPIClient(
        api_key=settings.riot_api_key,
        rate_limiter=RiotRateLimiter.from_settings(settings),
    )
    twitch = TwitchAPIClient()
    cdragon = CommunityDragonClient()

    scheduler = SchedulerService()
    handlers = JobHandlers(
        session_scope=db_manager.get_session,
        riot=riot,
        twitch=twitch,
        cdragon=cdragon,
        follow_ups=scheduler,
    )
    scheduler.configure(
        handlers, RosterSynchronizer(scheduler, roster_loader(db_manager.get_session))
    )

    try:
        await riot.start_session()
        await twitch.start_session()
        await scheduler.start()
        logger.info("Tracker worker running")
        await stop_event.wait()
    finally:
        logger.info("Shutting down tracker worker")
        await scheduler.shutdown()
        await riot.close()
        await twitch.close()
        await cdragon.close()
        await db_manager.close()


async def _main() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)
    await run_worker(stop_event)


def main() -> None:
    settings = get_global_settings()
    setup_logging(settings.log_level)
    asyncio.run(_main())


if __name__ == "__main__":
    main()
