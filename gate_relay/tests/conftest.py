"""
Test setup for the gate relay.
Provides RSA client keys, an in-memory key registry and a fake gate controller.
"""
# Settings are read from the environment, so pin them BEFORE importing the app
import os

os.environ["GATE_HMAC_KEY"] = "test-gate-secret"
os.environ["GATE_URL"] = "http://gate.test/command"
os.environ["ENVIRONMENT"] = "PRODUCTION"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import json
import uuid

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gate_relay.api.dependencies import get_relay_dispatcher
from gate_relay.api.main import app
from gate_relay.core.config import reload_settings
from gate_relay.core.database import Base, PublicKey, get_db
from gate_relay.core.gate import RelayDispatcher
from gate_relay.core.signing import public_key_to_base64, sign_action

GATE_SECRET = "test-gate-secret"
GATE_URL = "http://gate.test/command"


class FakeGate:
    """Gate controller stand-in that records every envelope it receives."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = {"ok": True}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def envelopes(self):
        return [json.loads(r.content) for r in self.requests]

    def dispatcher(self) -> RelayDispatcher:
        return RelayDispatcher(GATE_URL, timeout=1.0, transport=httpx.MockTransport(self.handler))


def generate_client_key():
    """2048-bit RSA key pair as a client would hold it."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(autouse=True)
def settings():
    """Fresh settings for every test (picks up monkeypatched env)."""
    return reload_settings()


@pytest.fixture
def development_mode(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "DEVELOPMENT")
    return reload_settings()


@pytest.fixture(scope="session")
def client_private_key():
    return generate_client_key()


@pytest.fixture(scope="session")
def other_private_key():
    return generate_client_key()


@pytest.fixture(scope="session")
def client_public_key_b64(client_private_key):
    return public_key_to_base64(client_private_key.public_key())


@pytest.fixture
def signed_open(client_private_key, client_public_key_b64):
    """Valid PATCH /gate body for OPEN signed with the client key."""
    return {
        "signature": sign_action(client_private_key, "OPEN"),
        "action": "OPEN",
        "publicKey": client_public_key_b64,
    }


@pytest.fixture(scope="function")
def test_db():
    """Create an isolated in-memory registry database."""
    engine = create_engine(
        f"sqlite:///:memory:{uuid.uuid4().hex}",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def fake_gate():
    return FakeGate()


@pytest.fixture(scope="function")
def client(test_db, fake_gate):
    """Create test client with registry and gate overrides."""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_relay_dispatcher] = fake_gate.dispatcher
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register_key(test_db):
    """Insert a key directly into the registry."""
    def _register(key: str, trusted: bool = False) -> PublicKey:
        record = PublicKey(key=key, trusted=1 if trusted else 0)
        test_db.add(record)
        test_db.commit()
        test_db.refresh(record)
        return record
    return _register
