import logging
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session, SQLModel

from taskboard import config

# Make sure to import models to register them with SQLModel.metadata
from taskboard.models import User, Task  # noqa: F401

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """
    Lazily builds the engine for ``DATABASE_URL``; tests never reach this
    because they override ``get_session``.
    """
    global _engine
    if _engine is None:
        # Log a redacted version for verification, not the whole URL
        logger.info("Connecting to database %s...", config.DATABASE_URL[:15])
        connect_args = {}
        if config.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(
            config.DATABASE_URL, echo=config.DATABASE_ECHO, connect_args=connect_args
        )
    return _engine


def create_db_and_tables(engine: Optional[Engine] = None) -> None:
    SQLModel.metadata.create_all(engine or get_engine())


def get_session() -> Generator[Session, None, None]:
    with Session(get_engine()) as session:
        yield session
