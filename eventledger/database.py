"""
Database Connection and Schema Management
Async queries go through `databases`; migrations use a synchronous SQLAlchemy engine
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from databases import Database
from sqlalchemy import create_engine, MetaData
from sqlalchemy.orm import declarative_base
from eventledger.config import settings

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.DATABASE_URL

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

if DATABASE_URL.startswith("sqlite"):
    db_options = {}
else:
    db_options = {"min_size": 1, "max_size": 10}

# Create database instance for async queries
database = Database(DATABASE_URL, **db_options)

# Create SQLAlchemy engine for migrations
engine = create_engine(
    DATABASE_URL.replace("postgresql://", "postgresql+psycopg2://")
    if DATABASE_URL.startswith("postgresql://") else DATABASE_URL
)

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


def is_postgres() -> bool:
    """True when the backing store supports row locks (SELECT ... FOR UPDATE)"""
    return database.url.dialect == "postgresql"


def lock_clause() -> str:
    """Row-lock suffix for SELECTs inside a write transaction"""
    return " FOR UPDATE" if is_postgres() else ""


@asynccontextmanager
async def write_transaction():
    """
    All-or-nothing block for ledger mutations.

    SQLite takes the database write lock at BEGIN IMMEDIATE, so concurrent
    writers queue on the busy timeout instead of failing on lock upgrade.
    PostgreSQL uses a regular transaction plus row locks (see lock_clause).
    """
    if database.url.dialect == "sqlite":
        async with database.connection() as connection:
            await connection.execute("BEGIN IMMEDIATE")
            try:
                yield connection
            except BaseException:
                await connection.execute("ROLLBACK")
                raise
            else:
                await connection.execute("COMMIT")
    else:
        async with database.transaction():
            yield database


def read_snapshot():
    """Transaction giving several aggregate queries one consistent view"""
    if is_postgres():
        return database.transaction(isolation="repeatable_read", readonly=True)
    return database.transaction()


def alembic_config() -> Config:
    """Alembic configuration built in code; there is no alembic.ini"""
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    # configparser interpolation treats % specially
    config.set_main_option("sqlalchemy.url", engine.url.render_as_string(hide_password=False).replace("%", "%%"))
    return config


def run_migrations() -> None:
    """Bring the schema to the latest revision. Safe to call on every startup."""
    command.upgrade(alembic_config(), "head")
    logger.info("Database schema is at head revision")


async def connect_db():
    """Connect to database on startup"""
    await database.connect()
    logger.info("Database connected")


async def disconnect_db():
    """Disconnect from database on shutdown"""
    await database.disconnect()
    logger.info("Database disconnected")
