import logging
from collections.abc import Generator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

# Registers the table on SQLModel.metadata
from app.data_access.models import PokemonRecord  # noqa: F401


logger = logging.getLogger(__name__)

def build_engine(database_url: str) -> Engine:
    """Creates the engine for the Record Store.

    SQLite needs ``check_same_thread=False`` because FastAPI runs sync
    handlers on a worker threadpool.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    # Use pool_pre_ping for stability with long-lived server connections
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)

def create_db_and_tables(engine: Engine) -> None:
    """Creates the pokemon table if it does not exist yet."""
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables are ready.")

def get_session(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency to provide a database session.

    The engine is owned by the application lifespan and lives on
    ``app.state``; nothing here reaches for a module-level global.
    """
    with Session(request.app.state.engine) as session:
        yield session
