"""
Module: rentroll_kernel.db.engine
Responsibility: Build the SQLAlchemy engine, hold the process-wide session
    factory used by the CLI, and provide create/drop helpers for the schema.
Architecture position: Kernel > DB.  create_tables/drop_tables import the
    models package lazily so Base.metadata is complete; nothing else here
    touches models/.

Invariants enforced:
    - PostgreSQL (psycopg2) is the production store: QueuePool with pre-ping,
      READ COMMITTED isolation.
    - SQLite URLs are accepted for local runs and the test suite.  Foreign
      keys are switched on for every SQLite connection, and an in-memory
      database is pinned to a single connection so every session sees it.
    - Sessions never expire attributes on commit; the importer keeps using
      loaded rows after each file commits.

Failure modes:
    - RuntimeError from the module-level accessors before
      init_engine_from_url() has run.
    - OperationalError from the driver when the database is unreachable.
"""

import atexit
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from rentroll_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _is_memory_sqlite(database_url: str) -> bool:
    return ":memory:" in database_url or database_url.rstrip("/") == "sqlite:"


def _sqlite_foreign_keys_on(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False, **pool_options: Any) -> Engine:
    """
    Create an Engine for `database_url` without touching module state.

    `pool_options` (pool_size, max_overflow, pool_timeout, pool_recycle) apply
    to server databases only.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"echo": echo}
        if _is_memory_sqlite(database_url):
            kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
        engine = create_engine(database_url, **kwargs)
        event.listen(engine, "connect", _sqlite_foreign_keys_on)
        return engine

    options = {"pool_size": 5, "max_overflow": 5, "pool_timeout": 30, "pool_recycle": 1800}
    options.update(pool_options)
    return create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
        **options,
    )


def init_engine_from_url(database_url: str, echo: bool = False, **pool_options: Any) -> Engine:
    """Install the module-level engine and session factory (replacing any previous one)."""
    global _engine, _session_factory

    reset_engine()
    _engine = build_engine(database_url, echo=echo, **pool_options)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"dialect": _engine.dialect.name})
    return _engine


def _require_initialized() -> tuple[Engine, sessionmaker[Session]]:
    if _engine is None or _session_factory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine, _session_factory


def get_engine() -> Engine:
    return _require_initialized()[0]


def get_session_factory() -> sessionmaker[Session]:
    """The factory handed to the import pipeline (one session per source file)."""
    return _require_initialized()[1]


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit on normal exit, roll back and re-raise on error, always close.

    Usage:
        with session_scope() as session:
            session.add(facility)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_scope_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """create_all for every model; there are no migrations."""
    import rentroll_kernel.models  # noqa: F401  (registers tables on Base.metadata)
    from rentroll_kernel.db.base import Base

    Base.metadata.create_all(engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    import rentroll_kernel.models  # noqa: F401
    from rentroll_kernel.db.base import Base

    Base.metadata.drop_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the module-level engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)
