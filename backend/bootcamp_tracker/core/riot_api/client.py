"""Riot API HTTP client with reservoir rate limiting and typed errors."""

import asyncio
from typing import Optional, Dict, Any, List

import httpx
import structlog

from ..config import get_global_settings
from .rate_limiter import RiotRateLimiter
from .errors import (
    RiotAPIError,
    RateLimitError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    BadRequestError,
)
from .models import AccountDTO, ActiveGameDTO, LeagueEntryDTO
from .endpoints import RiotAPIEndpoints

logger = structlog.get_logger(__name__)


class RiotAPIClient:
    """Riot API client used by the pollers.

    Requests are attempted once. A 429 or 5xx surfaces as a typed error and
    the next scheduled poll is the retry.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        rate_limiter: Optional[RiotRateLimiter] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Riot API client.

        Args:
            api_key: Riot API key (uses config if None)
            rate_limiter: Application + per-call limiter pair (built from config if None)
            timeout: Request timeout in seconds (uses config if None)
            transport: Optional httpx transport, used by tests
        """
        settings = get_global_settings()
        self.api_key = api_key or settings.riot_api_key
        self.rate_limiter = rate_limiter or RiotRateLimiter.from_settings(settings)
        self.timeout = timeout or settings.http_timeout_seconds
        self.endpoints = RiotAPIEndpoints()

        self._transport = transport
        self.session: Optional[httpx.AsyncClient] = None
        self._session_lock = asyncio.Lock()

    async def __aenter__(self):
        await self.start_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start_session(self) -> None:
        """Start the httpx session."""
        if self.session is None or self.session.is_closed:
            async with self._session_lock:
                if self.session is None or self.session.is_closed:
                    headers = {
                        "X-Riot-Token": self.api_key,
                        "User-Agent": "bootcamp-tracker/1.0",
                    }
                    limits = httpx.Limits(
                        max_keepalive_connections=20, max_connections=20
                    )
                    self.session = httpx.AsyncClient(
                        headers=headers,
                        timeout=httpx.Timeout(self.timeout),
                        limits=limits,
                        transport=self._transport,
                    )
                    logger.info(
                        "Riot API client session started",
                        api_key_prefix="[REDACTED]" if self.api_key else "None",
                    )

    async def close(self) -> None:
        """Close the httpx session."""
        if self.session and not self.session.is_closed:
            await self.session.aclose()
            logger.info("Riot API client session closed")

    @staticmethod
    def _response_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"body": body}

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise the RiotAPIError subclass matching a non-2xx response."""
        status = response.status_code
        if status < 400:
            return

        body = self._response_body(response)
        if status == 400:
            raise BadRequestError("Invalid request parameters", status, body)
        if status == 401:
            raise AuthenticationError("Invalid API key", status, body)
        if status == 403:
            raise ForbiddenError("Access forbidden", status, body)
        if status == 404:
            raise NotFoundError("Resource not found", status, body)
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Rate limit exceeded",
                status,
                body,
                retry_after=float(retry_after) if retry_after else None,
            )
        if status >= 500:
            raise ServiceUnavailableError(f"Server error {status}", status, body)
        raise RiotAPIError(f"Unexpected status {status}", status, body)

    async def _make_request(self, url: str) -> Any:
        """
        Make a rate limited GET request.

        Args:
            url: Request URL

        Returns:
            Decoded JSON body

        Raises:
            RiotAPIError: For API errors
        """
        await self.start_session()
        if self.session is None:
            raise RiotAPIError("Session not initialized")

        async with self.rate_limiter.limit():
            try:
                response = await self.session.get(url)
            except httpx.TransportError as e:
                # Timeouts and dropped connections resolve like a 5xx
                raise ServiceUnavailableError(f"Request failed: {e!s}") from e

        self._raise_for_status(response)

        return response.json()

    # Spectator endpoints
    async def get_active_match(
        self, region: str, puuid: str
    ) -> Optional[ActiveGameDTO]:
        """Live game for a player, or None when the player is not in one."""
        url = self.endpoints.active_game_by_puuid(puuid, region)
        try:
            response = await self._make_request(url)
        except NotFoundError:
            return None
        return ActiveGameDTO.model_validate(response)

    # League endpoints
    async def get_league_entries(
        self, region: str, puuid: str
    ) -> List[LeagueEntryDTO]:
        """Ranked standings by queue. Unranked players yield an empty list."""
        url = self.endpoints.league_entries_by_puuid(puuid, region)
        try:
            response = await self._make_request(url)
        except NotFoundError:
            return []

        if not isinstance(response, list):
            raise RiotAPIError(
                f"Expected list response for league entries, got {type(response)}"
            )
        return [LeagueEntryDTO.model_validate(entry) for entry in response]

    # Match endpoints
    async def get_match_by_id(self, region: str, match_id: str) -> Dict[str, Any]:
        """Full match record, stored as-is on the game session."""
        url = self.endpoints.match_by_id(match_id, region)
        return await self._make_request(url)

    # Account endpoints
    async def get_account_by_puuid(self, region: str, puuid: str) -> AccountDTO:
        url = self.endpoints.account_by_puuid(puuid, region)
        response = await self._make_request(url)
        return AccountDTO.model_validate(response)
