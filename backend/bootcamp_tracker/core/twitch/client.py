"""Twitch Helix client using app access tokens (client-credentials grant)."""

import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import BaseModel, ConfigDict

from ..config import get_global_settings
from ..riot_api.errors import UpstreamAPIError

logger = structlog.get_logger(__name__)

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
HELIX_URL = "https://api.twitch.tv/helix"

# Refresh the app token this many seconds before Twitch says it expires
TOKEN_EXPIRY_MARGIN = 300


class TwitchAPIError(UpstreamAPIError):
    """Error returned by the Twitch Helix or OAuth endpoints."""

    service = "Twitch API Error"

    @property
    def is_transient(self) -> bool:
        return self.status_code == 429 or (self.status_code or 0) >= 500


class TwitchStreamDTO(BaseModel):
    """A live stream as reported by ``GET /helix/streams``."""

    id: str
    user_id: str
    user_login: str
    user_name: Optional[str] = None
    type: str = "live"
    title: Optional[str] = None
    viewer_count: int = 0
    started_at: str

    model_config = ConfigDict(extra="allow")


class TwitchAPIClient:
    """Minimal Helix client: stream liveness only."""

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock=time.monotonic,
    ):
        settings = get_global_settings()
        self.client_id = client_id or settings.twitch_client_id
        self.client_secret = client_secret or settings.twitch_client_secret
        self.timeout = timeout or settings.http_timeout_seconds

        self._transport = transport
        self._clock = clock
        self.session: Optional[httpx.AsyncClient] = None
        self._session_lock = asyncio.Lock()
        self._token_lock = asyncio.Lock()
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def start_session(self) -> None:
        if self.session is None or self.session.is_closed:
            async with self._session_lock:
                if self.session is None or self.session.is_closed:
                    self.session = httpx.AsyncClient(
                        timeout=httpx.Timeout(self.timeout),
                        transport=self._transport,
                    )

    async def close(self) -> None:
        if self.session and not self.session.is_closed:
            await self.session.aclose()
            logger.info("Twitch API client session closed")

    @staticmethod
    def _raise_for_status(response: httpx.Response, path: str) -> None:
        if response.status_code < 400:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        raise TwitchAPIError(
            f"{path} failed",
            status_code=response.status_code,
            response_data=body if isinstance(body, dict) else {},
        )

    async def _get_access_token(self) -> str:
        """Return the cached app token, requesting a new one once it is near expiry."""
        async with self._token_lock:
            if self._access_token and self._clock() < self._token_expires_at:
                return self._access_token

            if not self.is_configured:
                raise TwitchAPIError(
                    "TWITCH_CLIENT_ID and TWITCH_CLIENT_SECRET must be set"
                )

            await self.start_session()
            if self.session is None:
                raise TwitchAPIError("Session not initialized")
            try:
                response = await self.session.post(
                    TOKEN_URL,
                    params={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "grant_type": "client_credentials",
                    },
                )
            except httpx.TransportError as e:
                raise TwitchAPIError(f"Token request failed: {e!s}", 503) from e

            self._raise_for_status(response, "oauth2/token")
            payload = response.json()
            self._access_token = payload["access_token"]
            self._token_expires_at = (
                self._clock() + payload["expires_in"] - TOKEN_EXPIRY_MARGIN
            )
            logger.info("Twitch app access token refreshed")
            return self._access_token

    async def _authenticated_get(
        self, path: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        token = await self._get_access_token()
        if self.session is None:
            raise TwitchAPIError("Session not initialized")
        try:
            response = await self.session.get(
                f"{HELIX_URL}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}", "Client-Id": self.client_id},
            )
        except httpx.TransportError as e:
            raise TwitchAPIError(f"Request failed: {e!s}", 503) from e

        if response.status_code == 401:
            # Token revoked early; drop it so the next poll fetches a new one
            self._access_token = None
        self._raise_for_status(response, path)
        return response.json()

    async def get_streams(self, user_ids: List[str]) -> List[TwitchStreamDTO]:
        """Live streams for the given user ids. Offline users are simply absent."""
        if not user_ids:
            return []
        payload = await self._authenticated_get("/streams", {"user_id": user_ids})
        return [TwitchStreamDTO.model_validate(item) for item in payload.get("data", [])]
