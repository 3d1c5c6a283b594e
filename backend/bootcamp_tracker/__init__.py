"""Bootcamp tracker: background worker following League of Legends bootcamp players."""

__version__ = "0.1.0"
