"""
Database connection and session management for the inventory ledger.

This module provides:
- Database engine creation and configuration
- Session factory creation
- Database initialization (create tables)
- Store handles bound to a session
- SQLite pragmas (foreign keys, WAL)

Nothing here is held in module state: callers create an engine, keep the
handle, and pass stores explicitly into the service functions.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.base import Base
from ..utils.config import get_config
from .store import InventoryStore

logger = logging.getLogger(__name__)

EXPECTED_TABLES = ("suppliers", "raw_materials", "purchases", "stock_movements")


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Set SQLite pragmas on connection.

    Enables foreign key constraints and WAL journaling for every new
    SQLite connection. Other drivers are left untouched.
    """
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: Optional database URL. If None, uses config default.
        echo: If True, log all SQL statements (useful for debugging)

    Returns:
        Configured SQLAlchemy Engine
    """
    if database_url is None:
        config = get_config()
        config.ensure_directories()
        database_url = config.database_url

    logger.info(f"Creating database engine: {database_url}")

    if ":memory:" in database_url or "mode=memory" in database_url:
        # In-memory databases must share one connection across the pool
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    return create_engine(database_url, echo=echo)


def init_database(engine: Engine) -> None:
    """
    Initialize the database by creating all tables.

    Safe to call multiple times - existing tables won't be recreated.

    Args:
        engine: Engine to create the tables on
    """
    logger.info("Initializing database tables")

    # Import models so every table is registered with Base
    from .. import models  # noqa: F401

    Base.metadata.create_all(engine)

    logger.info("Database tables initialized successfully")


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Create a session factory bound to an engine.

    Args:
        engine: Database engine

    Returns:
        Session factory (sessionmaker)
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Provide a transactional scope for database operations.

    - Creates a new session
    - Commits on success
    - Rolls back on exception
    - Always closes the session

    Example:
        with session_scope(factory) as session:
            session.add(Supplier(name="Timber Traders Ltd"))
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def open_store(session_factory: sessionmaker) -> InventoryStore:
    """
    Open a store handle on a new session.

    The caller owns the handle and must close it.

    Args:
        session_factory: Factory from create_session_factory()

    Returns:
        InventoryStore bound to a fresh session
    """
    return InventoryStore(session_factory())


@contextmanager
def store_scope(session_factory: sessionmaker) -> Iterator[InventoryStore]:
    """
    Provide a store handle for the duration of a block.

    Service functions manage their own units of work; this scope only
    guarantees the underlying session is closed.

    Example:
        with store_scope(factory) as store:
            totals = valuation_service.compute_totals(store)
    """
    store = open_store(session_factory)
    try:
        yield store
    finally:
        store.close()


def verify_database(engine: Engine) -> bool:
    """
    Verify that the database is accessible and has tables.

    Args:
        engine: Engine to inspect

    Returns:
        True if all expected tables exist, False otherwise
    """
    try:
        tables = inspect(engine).get_table_names()
    except SQLAlchemyError as e:
        logger.error(f"Database verification failed: {e}")
        return False

    missing = [table for table in EXPECTED_TABLES if table not in tables]
    if missing:
        logger.warning(f"Database is missing tables: {', '.join(missing)}")
        return False
    return True


def reset_database(engine: Engine, confirm: bool = False) -> None:
    """
    Drop all tables and recreate the database.

    WARNING: This will delete all data!

    Args:
        engine: Engine to reset
        confirm: Must be True to actually reset. Safety check.

    Raises:
        ValueError: If confirm is not True
    """
    if not confirm:
        raise ValueError("Must pass confirm=True to reset database. This will delete all data!")

    logger.warning("RESETTING DATABASE - ALL DATA WILL BE LOST")

    from .. import models  # noqa: F401

    Base.metadata.drop_all(engine)
    logger.info("All tables dropped")

    Base.metadata.create_all(engine)
    logger.info("Tables recreated")


def initialize_app_database(database_url: Optional[str] = None) -> Engine:
    """
    Initialize the application database.

    Creates the engine and tables if they don't exist, then verifies them.

    Args:
        database_url: Optional database URL. If None, uses config default.

    Returns:
        Ready-to-use engine
    """
    engine = create_database_engine(database_url)
    init_database(engine)

    if verify_database(engine):
        logger.info("Database initialized and verified successfully")
    else:
        logger.warning("Database verification failed - tables may not exist")

    return engine
