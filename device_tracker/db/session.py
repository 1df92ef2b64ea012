"""SQLAlchemy engine/session helpers shared by the app and the tests."""

from __future__ import annotations

from typing import Any, Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base

# ``Base`` is the parent class for every SQLAlchemy model defined in models/.
Base = declarative_base()


def engine_options(
    url: str,
    *,
    pool_size: int = 10,
    connect_timeout: int = 10,
    sslmode: str | None = None,
) -> dict[str, Any]:
    """Keyword arguments for ``create_engine`` that suit the given backend."""

    if url.startswith("sqlite"):
        # FastAPI runs sync handlers on worker threads, so the connection must
        # be shareable across them.
        return {"connect_args": {"check_same_thread": False}}

    connect_args: dict[str, Any] = {"connect_timeout": connect_timeout}
    if sslmode:
        connect_args["sslmode"] = sslmode
    return {
        "pool_size": pool_size,
        "pool_pre_ping": True,
        "connect_args": connect_args,
    }


def build_engine(url: str, **options: Any) -> Engine:
    return create_engine(url, **engine_options(url, **options))


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency: make sure the schema is ready, then yield a session."""

    database = request.app.state.database
    database.ensure_ready()
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
