import logging
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()

ENABLE_QUERY_LOGGING = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))


class Database(ABC):
    """Owns one engine and its session factory for the lifetime of the process"""

    def __init__(self, url: str):
        self.url = url
        try:
            self.engine = create_engine(url, **self.engine_options())
        except Exception as e:
            logger.error(f"❌ Failed to create database engine: {e}")
            raise
        self.configure(self.engine)
        if ENABLE_QUERY_LOGGING:
            _install_slow_query_logging(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"✅ Database engine created ({self.backend})")

    backend = "generic"

    @abstractmethod
    def engine_options(self) -> dict:
        """Keyword arguments passed to ``create_engine``"""

    def configure(self, engine: Engine) -> None:
        """Hook for backend specific connection setup"""

    def create_tables(self) -> None:
        # Import models so they're registered with Base before create_all
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine, checkfirst=True)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info(f"{self.backend} database connections closed")


class SQLiteDatabase(Database):
    backend = "sqlite"

    def engine_options(self) -> dict:
        options = {"connect_args": {"check_same_thread": False}, "echo": False}
        # In-memory databases live and die with a single connection
        if self.url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    def configure(self, engine: Engine) -> None:
        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()


class PostgresDatabase(Database):
    backend = "postgresql"

    def engine_options(self) -> dict:
        pool_size = int(os.getenv("DB_POOL_SIZE", "20"))
        max_overflow = int(os.getenv("DB_MAX_OVERFLOW", "30"))
        pool_timeout = int(os.getenv("DB_POOL_TIMEOUT", "30"))
        pool_recycle = int(os.getenv("DB_POOL_RECYCLE", "300"))
        logger.info(
            f"📊 Connection pool: size={pool_size}, max_overflow={max_overflow}, timeout={pool_timeout}s"
        )
        return {
            "pool_pre_ping": True,
            "pool_recycle": pool_recycle,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "echo": False,
        }


def create_database(url: str) -> Database:
    """Pick the concrete Database for a connection URL"""
    if url.startswith("sqlite"):
        return SQLiteDatabase(url)
    if url.startswith("postgres://"):
        # Heroku-style URLs are not accepted by SQLAlchemy
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql"):
        return PostgresDatabase(url)
    raise ValueError(f"Unsupported database URL scheme: {url.split(':', 1)[0]}")


def _install_slow_query_logging(engine: Engine) -> None:
    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)
        if total > SLOW_QUERY_THRESHOLD:
            logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db: Session, detail: str) -> Iterator[None]:
    """Roll back and re-raise any SQLAlchemy error as a generic StorageError"""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ {detail}: {e}")
        raise StorageError(detail) from e
