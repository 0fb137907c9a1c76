"""
Check Engine - State Store Database.

============================================================
PURPOSE
============================================================
Engine and session management for the persisted-state store.

- SQLAlchemy (sync) with explicit transaction boundaries
- Commits only when no exception occurs
- Rolls back and re-raises on any exception

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import StateStoreConfig
from .models import Base


logger = logging.getLogger(__name__)


def create_state_engine(config: Optional[StateStoreConfig] = None) -> Engine:
    """
    Create the SQLAlchemy engine for the state store.

    Args:
        config: Store configuration (database URL, echo)
    """
    config = config or StateStoreConfig()
    logger.info(f"Creating state store engine for: {config.database_url.split('@')[-1]}")

    engine = create_engine(config.database_url, echo=config.echo, future=True)

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        logger.debug("State store connection established")

    return engine


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.debug("State store tables ensured")


def get_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Transaction scope.

    Usage:
        with session_scope(factory) as session:
            StateRepository(session).save(record)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        logger.error(f"State store error, rolling back: {e}")
        session.rollback()
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
