"""Error handling for job handlers.

Upstream errors fall into three groups:

- Not found: the expected answer for "no active game" and "unranked". Logged
  at debug level only; the handler returns None.
- Rate limited and 5xx: transient. Logged as a warning; nothing is written
  and the next scheduled poll is the retry.
- Anything else: logged as an error with the job's context and re-raised so
  the worker pool records the job as failed.
"""

import inspect
from functools import wraps
from typing import Any, Callable, Optional, ParamSpec, TypeVar

import structlog

from bootcamp_tracker.core.riot_api.errors import (
    NotFoundError,
    RateLimitError,
    UpstreamAPIError,
)

logger = structlog.get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def handle_upstream_errors(
    *,
    operation: str,
    log_context: Optional[Callable[..., dict[str, Any]]] = None,
):
    """Decorator classifying upstream errors raised by an async job handler.

    :param operation: Description of the operation (e.g., "poll game state").
    :param log_context: Optional function extracting context from args for logging.
                        Example: lambda self, job: {"entity_id": job.player_id}

    Usage example::

        @handle_upstream_errors(
            operation="check peak rank",
            log_context=lambda self, job: job_log_context(job),
        )
        async def check_peak_rank(self, job: PeakRankPollJob):
            ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError("handle_upstream_errors only wraps async handlers")

        @wraps(func)
        async def wrapper(*args, **kwargs):
            context = _extract_log_context(log_context, args, kwargs, func.__name__)
            try:
                return await func(*args, **kwargs)
            except Exception as error:
                _handle_error(error, operation, context)
                return None

        return wrapper

    return decorator


def _extract_log_context(
    log_context: Optional[Callable], args: tuple, kwargs: dict, func_name: str
) -> dict:
    """Extract logging context from function arguments."""
    if not log_context:
        return {}

    try:
        return log_context(*args, **kwargs)
    except Exception as e:
        logger.warning(
            "Failed to extract log context",
            error=str(e),
            function=func_name,
        )
        return {}


def _handle_error(error: Exception, operation: str, context: dict) -> None:
    """Log ``error`` at the level its class deserves; re-raise unexpected ones."""
    if isinstance(error, NotFoundError):
        logger.debug(f"Nothing found during {operation}", **context)
        return

    if isinstance(error, RateLimitError):
        logger.warning(
            f"Rate limited during {operation}, leaving data untouched",
            retry_after=error.retry_after,
            **context,
        )
        return

    if isinstance(error, UpstreamAPIError) and error.is_transient:
        logger.warning(
            f"Upstream unavailable during {operation}, leaving data untouched",
            status_code=error.status_code,
            error=str(error),
            **context,
        )
        return

    logger.error(
        f"Failed to {operation}",
        error=str(error),
        error_type=type(error).__name__,
        **context,
    )
    raise error


def job_log_context(job: Any) -> dict[str, Any]:
    """Context every handler log line carries: entity, job class and region."""
    context = {"entity_id": job.entity_id, "job_class": job.job_class.value}
    region = getattr(job, "region", None)
    if region:
        context["region"] = region
    return context
