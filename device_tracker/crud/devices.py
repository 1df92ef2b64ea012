# device_tracker/crud/devices.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.device_status import STATUS_AVAILABLE, STATUS_CHECKED_OUT
from ..core.errors import InfrastructureError
from ..models.device import Device

logger = logging.getLogger("device_tracker.store")


def list_devices(db: Session) -> list[Device]:
    """
    Return every device ordered by name.
    """
    stmt = select(Device).order_by(Device.name)
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as exc:
        raise InfrastructureError("Error fetching devices") from exc


def checkout_device(db: Session, name: str, borrower: str, *, now: datetime | None = None) -> int:
    """
    Hand the named device to ``borrower``.

    The current status is not checked, so a second checkout simply replaces
    the borrower. Returns the number of rows updated (0 when no device has
    that name).
    """
    stamp = now or datetime.now(timezone.utc)
    stmt = (
        update(Device)
        .where(Device.name == name)
        .values(borrower=borrower, checked_out_date=stamp, status=STATUS_CHECKED_OUT)
    )
    count = _execute_update(db, stmt, "Error checking out device")
    logger.info(
        "device.checkout",
        extra={"extra_data": {"device": name, "borrower": borrower, "matched": count}},
    )
    return count


def checkin_device(db: Session, name: str) -> int:
    """
    Return the named device to the shelf. Checking in an Available device is
    harmless and still reports the row as matched.
    """
    stmt = (
        update(Device)
        .where(Device.name == name)
        .values(borrower=None, checked_out_date=None, status=STATUS_AVAILABLE)
    )
    count = _execute_update(db, stmt, "Error checking in device")
    logger.info("device.checkin", extra={"extra_data": {"device": name, "matched": count}})
    return count


def _execute_update(db: Session, stmt, failure_message: str) -> int:
    try:
        result = db.execute(stmt.execution_options(synchronize_session=False))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InfrastructureError(failure_message) from exc
    return result.rowcount or 0
