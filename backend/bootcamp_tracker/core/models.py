"""Declarative base shared by every feature's ORM models."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

SCHEMA = "tracker"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    metadata = MetaData(schema=SCHEMA)
