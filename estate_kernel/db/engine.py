"""
Module: estate_kernel.db.engine
Responsibility: SQLAlchemy engine creation and transactional scope for the
    persistent store. Any SQLAlchemy URL works; tests use in-memory SQLite.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from estate_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def create_store_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine and make sure the store tables exist."""
    engine = create_engine(database_url, echo=echo)
    create_tables(engine)
    logger.info(
        "engine_initialized",
        extra={"dialect": engine.dialect.name, "echo": echo},
    )
    return engine


def create_tables(engine: Engine) -> None:
    """Create all tables registered on Base.metadata."""
    from estate_kernel.db.base import Base
    import estate_kernel.db.models  # noqa: F401  (registers tables)

    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed. The exception
        is re-raised to the caller.
    """
    session = factory()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()
