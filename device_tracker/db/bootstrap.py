"""One-time schema creation and seeding, owned by the running application.

There is no migration machinery: the table is created when it is
absent and filled with the seed list when it is empty. ``Database`` wraps that
in an idempotent ``ensure_ready`` call that the request path invokes lazily.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.config import AppSettings
from ..core.device_status import STATUS_AVAILABLE
from ..core.errors import InfrastructureError
from ..models.device import Device
from .session import Base, build_engine

logger = logging.getLogger("device_tracker.db")


def create_schema(engine: Engine) -> None:
    """CREATE TABLE IF NOT EXISTS for every registered model."""

    Base.metadata.create_all(bind=engine, checkfirst=True)


def seed_devices(engine: Engine, names: Iterable[str]) -> int:
    """Insert ``names`` as Available devices if the table is empty.

    Returns how many rows were inserted (0 when the table already had data).
    """

    names = list(dict.fromkeys(names))
    table = Device.__table__
    with engine.begin() as conn:
        count = conn.execute(select(func.count()).select_from(table)).scalar_one()
        if count:
            logger.info("database.already_populated", extra={"extra_data": {"count": count}})
            return 0
        if names:
            conn.execute(insert(table), [{"name": name, "status": STATUS_AVAILABLE} for name in names])
    logger.info("database.seeded", extra={"extra_data": {"count": len(names)}})
    return len(names)


class Database:
    """Engine, session factory and the "initialize once" guard for one process.

    ``ensure_ready`` is safe to call from many worker threads at once: the
    first caller does the work while the rest wait on the same lock and then
    see the ready flag. A failure leaves the flag unset so the next call starts
    over.
    """

    def __init__(self, engine: Engine, seed_names: Iterable[str] = ()) -> None:
        self.engine = engine
        self.seed_names = tuple(seed_names)
        self.SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
        self._lock = threading.Lock()
        self._ready = False

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "Database":
        engine = build_engine(
            settings.DB_URL,
            pool_size=settings.DB_POOL_SIZE,
            connect_timeout=settings.DB_CONNECT_TIMEOUT,
            sslmode=settings.DB_SSLMODE,
        )
        return cls(engine, seed_names=settings.SEED_DEVICES)

    @property
    def ready(self) -> bool:
        return self._ready

    def ensure_ready(self) -> None:
        if self._ready:
            return
        with self._lock:
            if self._ready:
                return
            logger.info("database.init.start")
            try:
                create_schema(self.engine)
                seed_devices(self.engine, self.seed_names)
            except SQLAlchemyError as exc:
                logger.exception("database.init.failed")
                raise InfrastructureError("Database initialization failed") from exc
            self._ready = True
            logger.info("database.init.complete")

    def dispose(self) -> None:
        self.engine.dispose()
        self._ready = False
