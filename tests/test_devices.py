"""Tests for the device store and the one-time schema bootstrap."""

import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from device_tracker.core.config import DEFAULT_SEED_DEVICES
from device_tracker.core.device_status import STATUS_AVAILABLE, STATUS_CHECKED_OUT
from device_tracker.core.errors import InfrastructureError
from device_tracker.crud.devices import checkin_device, checkout_device, list_devices
from device_tracker.db.bootstrap import Database
from device_tracker.db.session import build_engine
from device_tracker.models.device import Device


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _count(database: Database) -> int:
    with database.SessionLocal() as session:
        return session.scalar(select(func.count()).select_from(Device))


def _fetch_device(session, name):
    return session.execute(select(Device).where(Device.name == name)).scalars().first()


def _assert_consistent(session):
    for device in list_devices(session):
        if device.status == STATUS_AVAILABLE:
            assert device.borrower is None and device.checked_out_date is None, device
        else:
            assert device.status == STATUS_CHECKED_OUT, device
            assert device.borrower is not None and device.checked_out_date is not None, device


@pytest.fixture()
def database(tmp_path):
    db = Database(build_engine(f"sqlite:///{tmp_path / 'devices.db'}"), seed_names=DEFAULT_SEED_DEVICES)
    db.ensure_ready()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture()
def db_session(database):
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def test_seed_inserts_default_devices_as_available(db_session):
    devices = list_devices(db_session)

    assert len(devices) == 7
    assert {d.name for d in devices} == set(DEFAULT_SEED_DEVICES)
    assert all(d.status == STATUS_AVAILABLE for d in devices)
    _assert_consistent(db_session)


def test_list_devices_sorted_by_name_regardless_of_seed_order(tmp_path):
    names = ["Pixel", "Galaxy", "iPad", "Aquos", "Moto"]
    db = Database(build_engine(f"sqlite:///{tmp_path / 'order.db'}"), seed_names=names)
    db.ensure_ready()
    with db.SessionLocal() as session:
        listed = [d.name for d in list_devices(session)]
    db.dispose()

    assert listed == sorted(names)


def test_checkout_records_borrower_and_timestamp(db_session):
    before = datetime.now(timezone.utc).replace(microsecond=0)

    assert checkout_device(db_session, "iPhone 15", "Alice") == 1

    device = _fetch_device(db_session, "iPhone 15")
    assert device.status == STATUS_CHECKED_OUT
    assert device.borrower == "Alice"
    stamp = _as_utc(device.checked_out_date)
    assert before <= stamp <= datetime.now(timezone.utc)
    _assert_consistent(db_session)


def test_checkout_unknown_device_changes_nothing(db_session):
    assert checkout_device(db_session, "Nonexistent Phone", "Bob") == 0

    assert _fetch_device(db_session, "Nonexistent Phone") is None
    assert all(d.status == STATUS_AVAILABLE for d in list_devices(db_session))


def test_second_checkout_replaces_borrower(db_session):
    checkout_device(db_session, "Google Pixel 8A", "Alice")
    assert checkout_device(db_session, "Google Pixel 8A", "Bob") == 1

    device = _fetch_device(db_session, "Google Pixel 8A")
    assert device.borrower == "Bob"
    assert device.status == STATUS_CHECKED_OUT


def test_checkin_clears_borrower_and_date(db_session):
    checkout_device(db_session, "iPhone 13 Mini", "Carol")

    assert checkin_device(db_session, "iPhone 13 Mini") == 1

    device = _fetch_device(db_session, "iPhone 13 Mini")
    assert device.status == STATUS_AVAILABLE
    assert device.borrower is None
    assert device.checked_out_date is None
    _assert_consistent(db_session)


def test_checkin_of_available_device_still_matches(db_session):
    assert checkin_device(db_session, "Samsung Galaxy S5") == 1
    assert checkin_device(db_session, "Nope") == 0
    assert _fetch_device(db_session, "Samsung Galaxy S5").status == STATUS_AVAILABLE


def test_concurrent_ensure_ready_seeds_once(tmp_path):
    db = Database(build_engine(f"sqlite:///{tmp_path / 'race.db'}"), seed_names=DEFAULT_SEED_DEVICES)

    with ThreadPoolExecutor(max_workers=8) as pool:
        for future in [pool.submit(db.ensure_ready) for _ in range(8)]:
            future.result()

    assert db.ready
    assert _count(db) == 7
    db.dispose()


def test_reopening_populated_database_does_not_reseed(database, tmp_path):
    again = Database(build_engine(f"sqlite:///{tmp_path / 'devices.db'}"), seed_names=DEFAULT_SEED_DEVICES)
    again.ensure_ready()

    assert _count(again) == 7
    again.dispose()


def test_failed_initialization_is_retried(tmp_path):
    target = tmp_path / "later" / "devices.db"
    db = Database(build_engine(f"sqlite:///{target}"), seed_names=DEFAULT_SEED_DEVICES)

    with pytest.raises(InfrastructureError):
        db.ensure_ready()
    assert not db.ready

    target.parent.mkdir()
    db.ensure_ready()

    assert db.ready
    assert _count(db) == 7
    db.dispose()


def test_unknown_status_is_rejected_by_the_table(database):
    with database.engine.connect() as conn:
        with pytest.raises(IntegrityError):
            conn.execute(insert(Device.__table__).values(name="Lumia 950", status="Lost"))
