import time

import jwt
import pytest

from backend.config import get_settings
from backend.services.meeting_store import MeetingStore
from backend.services.repository import MeetingRepository

JWT_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def _app_env(monkeypatch, tmp_path):
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_token(user_id, ttl: int = 3600, secret: str = JWT_SECRET, **claims) -> str:
    now = int(time.time())
    payload = {"userId": str(user_id), "iat": now, "exp": now + ttl, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


class FakeRedis:
    def __init__(self):
        self.values: dict[str, str] = {}
        self.expiries: dict[str, int] = {}

    async def exists(self, key):
        return int(key in self.values)

    async def set(self, key, value, ex=None):
        self.values[key] = value
        self.expiries[key] = ex
        return True


class FakeEmitter:
    """Records every (event, payload, sid) the router delivers."""

    def __init__(self):
        self.sent: list[tuple[str, dict, str]] = []

    async def __call__(self, event, payload, sid):
        self.sent.append((event, payload, sid))

    def to(self, sid):
        return [(event, payload) for event, payload, target in self.sent if target == sid]


@pytest.fixture
def repository(tmp_path):
    return MeetingRepository(tmp_path / "meetings.json")


@pytest.fixture
def store(repository):
    return MeetingStore(repository)
