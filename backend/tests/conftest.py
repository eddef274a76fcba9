from __future__ import annotations

import os
from pathlib import Path

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["STATIC_DIR"] = str(Path(__file__).resolve().parents[1] / "public")

import pytest
from fastapi.testclient import TestClient

from core.errors import NotifierError
from core.rate_limit import limiter
from db.base_class import Base
from db.session import SessionLocal, engine, init_db
from main import app
from services.mail_transport import OutboundEmail
from services.notifier import Notifier, get_notifier
from services.waitlist_store import WaitlistStore


class FakeTransport:
    """Records outgoing mail; raises for addresses listed in ``fail_for``."""

    def __init__(self) -> None:
        self.sent: list[OutboundEmail] = []
        self.fail_for: set[str] = set()
        self.fail_all = False

    def send(self, message: OutboundEmail) -> None:
        if self.fail_all or message.to in self.fail_for:
            raise NotifierError(f"refused {message.to}")
        self.sent.append(message)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def notifier(transport: FakeTransport) -> Notifier:
    return Notifier(transport, from_address="noreply@hanti.com", brand_name="Hanti", app_url="https://hanti.com/app")


@pytest.fixture
def store():
    db = SessionLocal()
    try:
        yield WaitlistStore(db)
    finally:
        db.close()


@pytest.fixture
def client(notifier: Notifier):
    app.dependency_overrides[get_notifier] = lambda: notifier
    limiter.enabled = False
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True
        limiter.reset()
