"""Job handlers: one per payload type.

Every handler opens its own database session, builds the repositories and
services it needs, and runs one unit of work for one entity.
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Awaitable, Callable, Dict, Optional, Type

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from bootcamp_tracker.core.riot_api.client import RiotAPIClient
from bootcamp_tracker.core.twitch.client import TwitchAPIClient
from bootcamp_tracker.features.accounts.service import DisplayNameService
from bootcamp_tracker.features.games.reconciler import (
    ReconciliationResult,
    StaleStateReconciler,
)
from bootcamp_tracker.features.games.repository import SQLAlchemyGameRepository
from bootcamp_tracker.features.games.service import (
    FollowUpScheduler,
    GameStateMachine,
    MatchDetailService,
)
from bootcamp_tracker.features.players.repository import SQLAlchemyPlayerRepository
from bootcamp_tracker.features.ranks.service import RankTracker
from bootcamp_tracker.features.roles.gateway import CommunityDragonClient
from bootcamp_tracker.features.roles.repository import SQLAlchemyPlayrateRepository
from bootcamp_tracker.features.roles.service import PlayrateService
from bootcamp_tracker.features.streams.repository import SQLAlchemyStreamRepository
from bootcamp_tracker.features.streams.service import StreamTracker
from .error_handling import handle_upstream_errors, job_log_context
from .payloads import (
    PAYLOAD_TYPES,
    CurrentRankPollJob,
    DisplayNamePollJob,
    GameStatePollJob,
    JobPayload,
    MatchDetailJob,
    PeakRankPollJob,
    PlayrateRefreshJob,
    StreamPollJob,
)

logger = structlog.get_logger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class JobHandlers:
    """Executes job payloads against the database and upstream APIs."""

    def __init__(
        self,
        session_scope: SessionScope,
        riot: RiotAPIClient,
        twitch: TwitchAPIClient,
        cdragon: CommunityDragonClient,
        follow_ups: Optional[FollowUpScheduler] = None,
    ):
        """
        Args:
            session_scope: Context manager factory yielding a database session
            riot: Shared Riot API client
            twitch: Shared Twitch API client
            cdragon: Community Dragon client for playrate refreshes
            follow_ups: Scheduler receiving post-game follow-up jobs
        """
        self.session_scope = session_scope
        self.riot = riot
        self.twitch = twitch
        self.cdragon = cdragon
        self.follow_ups = follow_ups

        self._registry: Dict[Type, Callable[[Any], Awaitable[Any]]] = {
            GameStatePollJob: self.poll_game_state,
            MatchDetailJob: self.fetch_match_detail,
            CurrentRankPollJob: self.update_current_rank,
            PeakRankPollJob: self.check_peak_rank,
            StreamPollJob: self.check_stream,
            DisplayNamePollJob: self.refresh_display_name,
            PlayrateRefreshJob: self.refresh_playrates,
        }
        missing = [t.__name__ for t in PAYLOAD_TYPES if t not in self._registry]
        if missing:
            raise RuntimeError(f"No handler registered for {', '.join(missing)}")

    async def dispatch(self, payload: JobPayload) -> Any:
        """Run the handler registered for the payload's type."""
        handler = self._registry.get(type(payload))
        if handler is None:
            raise TypeError(f"Unknown job payload: {type(payload).__name__}")
        return await handler(payload)

    def _game_state_machine(self, db: AsyncSession) -> GameStateMachine:
        return GameStateMachine(
            players=SQLAlchemyPlayerRepository(db),
            games=SQLAlchemyGameRepository(db),
            playrates=SQLAlchemyPlayrateRepository(db),
            riot=self.riot,
            follow_ups=self.follow_ups,
        )

    @handle_upstream_errors(
        operation="poll game state",
        log_context=lambda self, job: job_log_context(job),
    )
    async def poll_game_state(self, job: GameStatePollJob):
        async with self.session_scope() as db:
            return await self._game_state_machine(db).poll(job.player_id)

    @handle_upstream_errors(
        operation="fetch match detail",
        log_context=lambda self, job: job_log_context(job),
    )
    async def fetch_match_detail(self, job: MatchDetailJob):
        async with self.session_scope() as db:
            service = MatchDetailService(SQLAlchemyGameRepository(db), self.riot)
            return await service.fetch_and_store(job.player_id, job.game_id, job.region)

    @handle_upstream_errors(
        operation="update current rank",
        log_context=lambda self, job: job_log_context(job),
    )
    async def update_current_rank(self, job: CurrentRankPollJob):
        async with self.session_scope() as db:
            tracker = RankTracker(SQLAlchemyPlayerRepository(db), self.riot)
            return await tracker.update_current(job.player_id)

    @handle_upstream_errors(
        operation="check peak rank",
        log_context=lambda self, job: job_log_context(job),
    )
    async def check_peak_rank(self, job: PeakRankPollJob):
        async with self.session_scope() as db:
            tracker = RankTracker(SQLAlchemyPlayerRepository(db), self.riot)
            return await tracker.check_peak(job.player_id)

    @handle_upstream_errors(
        operation="check stream",
        log_context=lambda self, job: job_log_context(job),
    )
    async def check_stream(self, job: StreamPollJob):
        if not self.twitch.is_configured:
            logger.debug("Twitch credentials not configured, skipping stream check")
            return None

        async with self.session_scope() as db:
            tracker = StreamTracker(SQLAlchemyStreamRepository(db), self.twitch)
            return await tracker.check(
                job.player_id, job.twitch_user_id, job.twitch_login
            )

    @handle_upstream_errors(
        operation="refresh display name",
        log_context=lambda self, job: job_log_context(job),
    )
    async def refresh_display_name(self, job: DisplayNamePollJob):
        async with self.session_scope() as db:
            service = DisplayNameService(SQLAlchemyPlayerRepository(db), self.riot)
            return await service.refresh(job.player_id)

    async def refresh_playrates(self, job: PlayrateRefreshJob):
        async with self.session_scope() as db:
            service = PlayrateService(SQLAlchemyPlayrateRepository(db), self.cdragon)
            return await service.refresh()

    async def reconcile_stale_state(self) -> ReconciliationResult:
        """End recorded games that are no longer live; no follow-ups."""
        async with self.session_scope() as db:
            reconciler = StaleStateReconciler(
                SQLAlchemyPlayerRepository(db), self._game_state_machine(db)
            )
            return await reconciler.run()
