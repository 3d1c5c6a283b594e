"""Champion playrate refresh."""

import structlog

from .gateway import CommunityDragonClient
from .repository import PlayrateRepositoryInterface

logger = structlog.get_logger(__name__)


class PlayrateService:
    """Refreshes stored play rates from Community Dragon."""

    def __init__(
        self,
        repository: PlayrateRepositoryInterface,
        client: CommunityDragonClient,
    ):
        self.repository = repository
        self.client = client

    async def refresh(self) -> int:
        """Fetch the latest rates and upsert them.

        :returns: Number of champions written
        """
        snapshot = await self.client.fetch_snapshot()
        written = await self.repository.upsert_snapshot(snapshot)
        logger.info(
            "Champion playrates refreshed", champions=written, patch=snapshot.patch
        )
        return written
