"""
Shared pytest fixtures: an in-memory database, the API client, fake
notification senders, and a seeded agent with one client.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("EMAIL_BACKEND", "console")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from aminius.database import Database  # noqa: E402
from aminius.domain.agents.repository import AgentRepository  # noqa: E402
from aminius.domain.clients.repository import ClientRepository  # noqa: E402
from aminius.domain.notifications import senders  # noqa: E402
from aminius.main import create_app  # noqa: E402
from aminius.security import hash_password  # noqa: E402
from aminius.seed import seed_lookups  # noqa: E402

AGENT_PASSWORD = "password123"


class FakeSender:
    """Records deliveries; raises for the first ``fail_times`` calls"""

    def __init__(self, fail_times: int = 0):
        self.fail_times = fail_times
        self.delivered = []

    async def __call__(self, notification):
        if self.fail_times > 0:
            self.fail_times -= 1
            raise senders.DeliveryError("provider unavailable")
        self.delivered.append(notification.notification_id)


@pytest.fixture
def fake_senders(monkeypatch):
    fakes = {channel: FakeSender() for channel in senders.SENDERS}
    monkeypatch.setattr(senders, "SENDERS", fakes)
    return fakes


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    with db.session_scope() as session:
        seed_lookups(session)
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def client(database, fake_senders):
    app = create_app(database)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def agent(database):
    with database.session_scope() as session:
        return AgentRepository.create(
            session,
            first_name="Grace",
            last_name="Wanjiku",
            email="grace@example.com",
            phone="+254712345678",
            password_hash=hash_password(AGENT_PASSWORD),
        )


@pytest.fixture
def agent_id(agent):
    return agent.agent_id


@pytest.fixture
def insurance_client(database, agent_id):
    with database.session_scope() as session:
        return ClientRepository.create_client(
            session,
            agent_id,
            first_name="John",
            surname="Kamau",
            last_name="Otieno",
            phone_number="+254700111222",
            email="john.kamau@example.com",
            date_of_birth=date(1985, 3, 14),
            is_client=True,
            insurance_type="Motor",
        )


@pytest.fixture
def client_id(insurance_client):
    return insurance_client.client_id
