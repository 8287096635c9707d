import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from . import config

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Owns the engine and session factory for one process.

    Built once at startup (API lifespan or worker on_startup) and disposed
    on shutdown. Request handlers receive sessions through ``get_db``.
    """

    def __init__(self, url: Optional[str] = None, echo: bool = False):
        self.url = url or config.DATABASE_URL
        self.engine = self._create_engine(self.url, echo)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

        if config.DB_LOG_SLOW_QUERIES:
            self._install_slow_query_logging(self.engine)

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection so every session sees the same in-memory DB
                kwargs["poolclass"] = StaticPool
            engine = create_engine(url, echo=echo, **kwargs)

            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_connection, _record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            logger.info("Database engine created (sqlite)")
            return engine

        engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=config.DB_POOL_RECYCLE,
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_timeout=config.DB_POOL_TIMEOUT,
            echo=echo,
        )
        logger.info(
            f"Database engine created: pool_size={config.DB_POOL_SIZE}, "
            f"max_overflow={config.DB_MAX_OVERFLOW}, timeout={config.DB_POOL_TIMEOUT}s"
        )
        return engine

    @staticmethod
    def _install_slow_query_logging(engine: Engine) -> None:
        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            conn.info.setdefault("query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            total = time.time() - conn.info["query_start_time"].pop(-1)
            if total > config.DB_SLOW_QUERY_THRESHOLD:
                logger.warning(f"Slow query ({total:.2f}s): {statement[:200]}...")

    def create_all(self) -> None:
        # Register every model on Base.metadata before creating tables
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine, checkfirst=True)

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session for background jobs: commit on success, rollback on error, always close."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    db = get_database(request).session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
