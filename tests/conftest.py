"""Shared fixtures: isolated settings, fake clock, fake media provider."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Setup environment for testing, before ituss.config is imported
os.environ["ITUSS_DATA_DIR"] = tempfile.mkdtemp()
os.environ["ITUSS_DB_PATH"] = os.path.join(os.environ["ITUSS_DATA_DIR"], "test.db")
os.environ["ITUSS_ACCOUNTS_FILE"] = os.path.join(os.environ["ITUSS_DATA_DIR"], "db.json")
os.environ["ITUSS_STORE_BACKEND"] = "memory"
os.environ["ITUSS_JWT_SECRET"] = "test-secret-not-for-production-use"
os.environ["ITUSS_BCRYPT_ROUNDS"] = "4"
os.environ["ITUSS_LIVEKIT_URL"] = "wss://livekit.test"
os.environ["ITUSS_LIVEKIT_API_KEY"] = "test-key"
os.environ["ITUSS_LIVEKIT_API_SECRET"] = "test-livekit-secret-at-least-32-bytes"

import pytest
from fastapi.testclient import TestClient

from ituss.config import settings
from ituss.errors import ProviderError
from ituss.main import create_app
from ituss.services.account_store import MemoryAccountStore
from ituss.services.broker import build_broker
from ituss.services.media_service import MediaGrant


class FakeClock:
    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeProvider:
    ws_url = "wss://media.test"

    def __init__(self):
        self.calls: list[MediaGrant] = []
        self.fail = False

    async def mint_token(self, grant: MediaGrant) -> str:
        self.calls.append(grant)
        if self.fail:
            raise ProviderError("provider down")
        return f"media-token:{grant.identity}:{grant.room_name}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def store():
    store = MemoryAccountStore()
    store.open()
    yield store
    store.close()


@pytest.fixture
def broker(store, provider, clock):
    return build_broker(settings, store=store, provider=provider, clock=clock)


@pytest.fixture
def client(broker):
    with TestClient(create_app(broker)) as client:
        yield client


@pytest.fixture
def signup_and_login(client):
    def _signup_and_login(email: str = "a@x.com", password: str = "secret1") -> str:
        r = client.post("/signup", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        r = client.post("/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["token"]

    return _signup_and_login
