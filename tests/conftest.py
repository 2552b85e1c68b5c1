import os
from datetime import datetime, timezone

import pytest
from mongomock import MongoClient as MockClient

# Keep Mongo out of unit tests unless explicitly needed
os.environ.setdefault("MONGODB_URI", "")
os.environ.setdefault("MONGO_DB", "agegate_test")
os.environ.setdefault("FLASK_ENV", "testing")
os.environ.setdefault("SESSION_BACKEND", "memory")

from agegate import create_app  # noqa: E402
import agegate.config as cfg  # noqa: E402
import agegate.db.mongo as mongo_mod  # noqa: E402
from agegate.session.context import SessionContext  # noqa: E402
from agegate.session.mongo_store import MongoSessionStore  # noqa: E402
from agegate.session.store import MemorySessionStore  # noqa: E402


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(scope="session")
def mock_db():
    client = MockClient()
    return client["agegate_test"]


@pytest.fixture(autouse=True)
def _patch_db(monkeypatch, mock_db):
    monkeypatch.setattr(mongo_mod, "get_db", lambda: mock_db, raising=True)
    monkeypatch.setattr(mongo_mod, "get_collection", lambda name: mock_db[name], raising=True)
    monkeypatch.setattr(mongo_mod, "ping", lambda: True, raising=True)
    yield
    for name in list(mock_db.list_collection_names()):
        mock_db[name].delete_many({})


@pytest.fixture(autouse=True)
def _patch_cfg(monkeypatch):
    monkeypatch.setattr(cfg, "FLASK_ENV", "testing", raising=False)
    monkeypatch.setattr(cfg, "MONGO_DB", "agegate_test", raising=False)
    monkeypatch.setattr(cfg, "AVS_ENABLED", True, raising=False)
    monkeypatch.setattr(cfg, "AVS_METHOD", "question", raising=False)
    monkeypatch.setattr(cfg, "AVS_MIN_AGE", "18", raising=False)
    monkeypatch.setattr(cfg, "AVS_DATE_FORMAT", "mdy", raising=False)
    monkeypatch.setattr(cfg, "AVS_FREQUENCY", "session", raising=False)
    monkeypatch.setattr(cfg, "AVS_PATH_MODE", "exclude", raising=False)
    monkeypatch.setattr(cfg, "AVS_PATH_PATTERNS", "", raising=False)
    monkeypatch.setattr(cfg, "AVS_REDIRECT_SUCCESS", "", raising=False)
    monkeypatch.setattr(cfg, "AVS_REDIRECT_FAILURE", "", raising=False)
    yield


@pytest.fixture
def gate_config(monkeypatch):
    """gate_config(method="dob", min_age=21) -> patches the AVS_* values."""
    def install(**values):
        for key, value in values.items():
            monkeypatch.setattr(cfg, f"AVS_{key.upper()}", value, raising=True)
    return install


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture(params=["memory", "mongo"])
def store(request):
    if request.param == "mongo":
        return MongoSessionStore()
    return MemorySessionStore()


@pytest.fixture
def session_ctx(store):
    return SessionContext("sid-test-0001", store)


@pytest.fixture
def app(store, clock):
    return create_app(testing=True, store=store, clock=clock)


@pytest.fixture
def app_client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def fresh_token(app_client):
    def issue() -> str:
        r = app_client.get("/api/token")
        assert r.status_code == 200
        return r.get_json()["token"]
    return issue
