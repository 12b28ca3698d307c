import os
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('ADMIN_PASSWORD', 'test-password')
os.environ.setdefault('SESSION_SECRET_KEY', 'test-secret')

from slotbook.database import Base  # noqa: E402
from slotbook.models.setting import Setting  # noqa: E402,F401
from slotbook.models.signup import Signup  # noqa: E402,F401
from slotbook.models.time_slot import SlotStatus, TimeSlot  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_slot(db):
    def _make_slot(
        slot_date: date = date(2026, 3, 2),
        start_time: time = time(9, 0),
        end_time: time = time(10, 0),
        status: SlotStatus = SlotStatus.AVAILABLE,
        booked_by: int | None = None,
    ) -> TimeSlot:
        slot = TimeSlot(
            date=slot_date,
            start_time=start_time,
            end_time=end_time,
            status=status.value,
            booked_by=booked_by,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return _make_slot


@pytest.fixture
def client(session_factory, monkeypatch: pytest.MonkeyPatch):
    from fastapi.testclient import TestClient

    from slotbook.database import get_db
    from slotbook.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr('slotbook.routes.slot_routes.ensure_database_ready', lambda: None)
    monkeypatch.setattr('slotbook.routes.signup_routes.ensure_database_ready', lambda: None)
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    response = client.post('/login', json={'password': 'test-password'})
    assert response.status_code == 200
    return client
