"""Error classes raised by the upstream API clients."""

from typing import Optional, Dict, Any


class UpstreamAPIError(Exception):
    """Base exception for upstream HTTP errors with status code tracking."""

    service = "upstream"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        """
        Initialize UpstreamAPIError.

        Args:
            message: Error message
            status_code: HTTP status code (400, 401, 403, 404, 429, 5xx)
            response_data: Raw response body, if it was JSON
            retry_after: Seconds the upstream asked us to wait (429 only)
        """
        super().__init__(message)
        self.message: str = message
        self.status_code: Optional[int] = status_code
        self.response_data: Dict[str, Any] = response_data or {}
        self.retry_after: Optional[float] = retry_after

    @property
    def is_transient(self) -> bool:
        """Whether the next scheduled poll is expected to succeed without intervention."""
        return False

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.status_code == 429 and self.retry_after:
            return f"{self.service} {self.status_code}: {self.message} (Retry after: {self.retry_after}s)"
        if self.status_code:
            return f"{self.service} {self.status_code}: {self.message}"
        return f"{self.service}: {self.message}"


class RiotAPIError(UpstreamAPIError):
    """Error returned by the Riot Games API."""

    service = "Riot API Error"


class RateLimitError(RiotAPIError):
    """Rate limit error (429)."""

    @property
    def is_transient(self) -> bool:
        return True


class AuthenticationError(RiotAPIError):
    """Authentication error (401) - invalid or expired API key."""


class ForbiddenError(RiotAPIError):
    """Forbidden error (403) - usually an expired development key."""


class NotFoundError(RiotAPIError):
    """Not found error (404) - no active game, unranked player, unknown match."""


class ServiceUnavailableError(RiotAPIError):
    """Server-side error (5xx)."""

    @property
    def is_transient(self) -> bool:
        return True


class BadRequestError(RiotAPIError):
    """Bad request (400) - invalid parameters."""

