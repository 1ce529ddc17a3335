"""
Engine and session wiring.

``DATABASE_URL`` selects the store (SQLite file by default). SQLite
connections get ``PRAGMA foreign_keys=ON`` so a review or booking can never
point at a tutorial that does not exist.
"""

import os
from pathlib import Path
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./language_school.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, **kwargs) -> Engine:
    """
    Build an engine for ``url``.

    SQLite URLs get thread-shared connections, foreign-key enforcement and,
    for file databases, their parent directory created.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=SQL_ECHO, **kwargs)

    if ":memory:" not in url:
        Path(url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)

    sqlite_engine = create_engine(url, echo=SQL_ECHO, connect_args={"check_same_thread": False}, **kwargs)
    event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
    return sqlite_engine


engine: Engine = make_engine(DATABASE_URL)


def get_session() -> Generator[Session, None, None]:
    """One session per request"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Create any missing tables. Alembic owns schema changes after that."""
    import langschool.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
