from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from bank_portal.core.config import settings
from bank_portal.core.errors import LedgerError, UnexpectedError

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs):
    """Create an engine for ``url``.

    SQLite ignores ``FOR UPDATE`` and pysqlite defers ``BEGIN`` until the first
    write, so on SQLite every transaction starts with ``BEGIN IMMEDIATE``: the
    first read of a unit of work already holds the database write lock.
    """
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        connect_args = dict(kwargs.pop("connect_args", {}))
        connect_args.setdefault("check_same_thread", False)  # FastAPI runs sync routes in a threadpool
        connect_args.setdefault("timeout", 30)  # seconds to wait for the write lock
        connect_args["isolation_level"] = None  # SQLAlchemy emits BEGIN itself
        kwargs["connect_args"] = connect_args
    else:
        kwargs.setdefault("pool_pre_ping", True)  # drops dead connections automatically
        kwargs.setdefault("pool_size", 5)
        kwargs.setdefault("max_overflow", 10)
        if settings.DB_ISOLATION_LEVEL:
            kwargs.setdefault("isolation_level", settings.DB_ISOLATION_LEVEL)

    engine = create_engine(url, echo=False, future=True, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """Run a block as one unit of work: commit on success, roll back on any error.

    Storage failures are re-raised as ``UnexpectedError``; ledger errors raised
    inside the block propagate unchanged after the rollback.
    """
    try:
        yield db
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure, transaction rolled back: {e}", exc_info=True)
        raise UnexpectedError(f"Storage failure: {e.__class__.__name__}") from e
    except Exception:
        db.rollback()
        raise
