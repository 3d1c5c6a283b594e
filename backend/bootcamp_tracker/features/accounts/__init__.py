"""Riot account identity refresh."""

from .service import DisplayNameService

__all__ = ["DisplayNameService"]
