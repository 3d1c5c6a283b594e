"""Database initialization script using SQLAlchemy create_all().

Creates the tracker schema and every table defined by the feature ORM models.
"""

import asyncio
import sys
from typing import NoReturn

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from bootcamp_tracker.core.config import get_global_settings
from bootcamp_tracker.core.logging import setup_logging
from bootcamp_tracker.core.models import SCHEMA, Base

# Imported for their side effect of registering tables on Base.metadata
from bootcamp_tracker.features.games import orm_models as _games  # noqa: F401
from bootcamp_tracker.features.players import orm_models as _players  # noqa: F401
from bootcamp_tracker.features.roles import orm_models as _roles  # noqa: F401
from bootcamp_tracker.features.streams import orm_models as _streams  # noqa: F401

logger = structlog.get_logger(__name__)


async def init_db() -> None:
    """Create the schema and all tables.

    Raises:
        SQLAlchemyError: If database connection or table creation fails
    """
    settings = get_global_settings()
    logger.info(
        "Initializing database",
        database_url=settings.database_url.replace(settings.postgres_password, "***"),
    )

    engine = create_async_engine(settings.database_url, echo=settings.debug)
    try:
        async with engine.begin() as conn:
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}"))
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        logger.error(
            "Database initialization failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        await engine.dispose()

    logger.info(
        "Database initialization completed successfully",
        tables_created=len(Base.metadata.tables),
        table_names=list(Base.metadata.tables.keys()),
    )


async def drop_all_tables() -> None:
    """Drop all tracker tables.

    WARNING: This is destructive and will delete all data!
    """
    settings = get_global_settings()
    logger.warning("Dropping all database tables...")

    engine = create_async_engine(settings.database_url, echo=settings.debug)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    except SQLAlchemyError as e:
        logger.error(
            "Failed to drop database tables",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        await engine.dispose()

    logger.info("All database tables dropped successfully")


async def reset_db() -> None:
    """Drop and recreate all tables."""
    logger.warning("Resetting database (drop + create)...")
    await drop_all_tables()
    await init_db()


def main() -> NoReturn:
    """Run CLI for database initialization commands.

    Usage:
        python -m bootcamp_tracker.init_db [init|drop|reset]
    """
    setup_logging(get_global_settings().log_level)
    command = sys.argv[1] if len(sys.argv) > 1 else "init"

    if command == "init":
        asyncio.run(init_db())
    elif command == "drop":
        asyncio.run(drop_all_tables())
    elif command == "reset":
        asyncio.run(reset_db())
    else:
        logger.error(f"Unknown command: {command}")
        print("Usage: python -m bootcamp_tracker.init_db [init|drop|reset]")
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
