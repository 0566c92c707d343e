import logging
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from busbook.config import settings
from busbook.errors import LedgerTimeoutError, StorageFailureError

logger = logging.getLogger(__name__)


DATABASE_URL = str(settings.DATABASE_URL)

# execution option read by the sqlite "begin" hook below
SQLITE_BEGIN_OPTION = "sqlite_begin"


def _install_sqlite_hooks(engine: AsyncEngine) -> None:
    """Take transaction control away from the sqlite driver.

    pysqlite only emits BEGIN lazily before DML, so a read followed by a
    write can run outside any lock. With the driver's handling disabled we
    emit BEGIN ourselves, and ledger writers ask for BEGIN IMMEDIATE so
    they hold the database write lock from their first read.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql(conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "BEGIN"))


def sqlite_lock_timeout() -> float:
    """Seconds a sqlite connection waits for a lock before giving up.

    Never longer than the seat ledger deadline: a cancelled await does not
    stop the driver thread, so the driver has to give up on its own.
    """
    return min(settings.SQLITE_BUSY_TIMEOUT_SECONDS, settings.LEDGER_TIMEOUT_SECONDS)


def _is_lock_timeout(exc: DBAPIError) -> bool:
    return isinstance(exc, OperationalError) and "database is locked" in str(exc.orig)


def make_engine(url: str, **kwargs) -> AsyncEngine:
    if url.startswith("sqlite"):
        connect_args = kwargs.setdefault("connect_args", {})
        connect_args.setdefault("timeout", sqlite_lock_timeout())
        engine = create_async_engine(url, **kwargs)
        _install_sqlite_hooks(engine)
        return engine
    return create_async_engine(url, pool_pre_ping=True, **kwargs)


def make_session_factory(engine: AsyncEngine, exclusive: bool = False) -> async_sessionmaker:
    """Session factory bound to ``engine``.

    ``exclusive`` sessions are for seat ledger writes: on sqlite their
    transactions start with BEGIN IMMEDIATE. Other backends ignore the
    option and rely on row locks taken by the ledger itself.
    """
    if exclusive:
        engine = engine.execution_options(**{SQLITE_BEGIN_OPTION: "BEGIN IMMEDIATE"})
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def storage_session(factory: async_sessionmaker):
    """Open a session from ``factory``; driver and connection failures
    surface as StorageFailureError instead of raw DBAPI errors. A sqlite
    lock wait that runs out is a LedgerTimeoutError."""
    try:
        async with factory() as session:
            yield session
    except DBAPIError as exc:
        if _is_lock_timeout(exc):
            logger.warning("Gave up waiting for the database lock")
            raise LedgerTimeoutError() from exc
        logger.exception("Database unavailable")
        raise StorageFailureError() from exc
    except ConnectionError as exc:
        logger.exception("Database unavailable")
        raise StorageFailureError() from exc


# create async engine
engine = make_engine(DATABASE_URL, echo=settings.DEBUG)

# session factories
async_session = make_session_factory(engine)
ledger_session = make_session_factory(engine, exclusive=True)
