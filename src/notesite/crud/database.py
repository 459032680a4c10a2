"""Database engine creation and schema initialization"""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from notesite.crud import tables  # noqa: F401  registers the tables on SQLModel.metadata


SQLITE_PREFIX = "sqlite:///"


def make_engine(db_url: str) -> Engine:
    """Create an engine; for file-backed SQLite the parent directory is created first."""
    if db_url.startswith(SQLITE_PREFIX):
        db_path = db_url[len(SQLITE_PREFIX):]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    SQLModel.metadata.create_all(engine)


def reset_db(engine: Engine) -> None:
    """Drop and recreate all tables."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
