"""
Database configuration and session management

This module provides the SQLAlchemy setup for database connectivity.
NO models are defined here - this is just infrastructure.

A Database value owns one engine and its session factory. Callers connect
explicitly and dispose explicitly; nothing here is a process-wide singleton.
"""

import logging
import uuid

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool

logger = logging.getLogger(__name__)

# Base class for ORM models
Base = declarative_base()


def _engine_options(url: str, timeout: float) -> dict:
    """Build create_engine() keyword arguments for the given backend."""
    if url.startswith("sqlite"):
        options = {
            # Handlers run on the threadpool, so the connection crosses threads
            "connect_args": {"check_same_thread": False, "timeout": timeout},
        }
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout gets an empty db
            options["poolclass"] = StaticPool
        return options

    if url.startswith("postgresql"):
        return {
            "connect_args": {
                "connect_timeout": max(1, int(timeout)),
                "options": f"-c statement_timeout={int(timeout * 1000)}",
            },
            # NullPool for better compatibility with containerized environments
            "poolclass": NullPool,
        }

    return {"pool_timeout": timeout}


class Database:
    """Engine + session factory for one storage connection."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def connect(cls, url: str, timeout: float = 5.0, echo: bool = False) -> "Database":
        """
        Create an engine for `url` and verify it answers.

        Raises SQLAlchemyError if the database cannot be reached.
        """
        engine = create_engine(url, echo=echo, **_engine_options(url, timeout))

        if url.startswith("sqlite"):
            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        database = cls(engine)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            engine.dispose()
            raise

        logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
        return database

    def create_all(self) -> None:
        """Create tables for every model registered on Base."""
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Disconnected from database")

    def session(self):
        """
        Generator yielding one session, closed afterwards.
        Wrapped by the get_db dependency of each service.
        """
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def check_connection(self) -> bool:
        """
        Test database connectivity
        Returns True if connection successful, False otherwise
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False


def new_id() -> str:
    """Opaque identifier for new rows."""
    return uuid.uuid4().hex
