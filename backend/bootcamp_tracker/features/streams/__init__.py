"""Twitch stream tracking."""

from .orm_models import StreamSessionORM
from .service import StreamTracker

__all__ = ["StreamSessionORM", "StreamTracker"]
