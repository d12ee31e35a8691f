"""
Shared pytest fixtures — in-memory stores, SQLite session, FastAPI TestClient.
"""
import os
import tempfile

# Keep the application's own engine and data dir away from the working tree
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="expensedesk-test-"))
os.environ.setdefault("SEED_DEMO_DATA", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from expensedesk.database import Base, get_db  # noqa: E402
from expensedesk.main import app  # noqa: E402
from expensedesk.models import ReceiptModel  # noqa: E402,F401
from expensedesk.store import InMemoryStore, SqlStore, seed_demo_data  # noqa: E402
from expensedesk.store.seed import demo_departments, demo_receipts, demo_users  # noqa: E402

SUPERVISOR = {"X-User-Id": "1"}
JANE = {"X-User-Id": "2"}
MIKE = {"X-User-Id": "3"}

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture()
def db():
    session = _Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def memory_store():
    return InMemoryStore(demo_users(), demo_departments(), demo_receipts())


@pytest.fixture()
def sql_store(db):
    store = SqlStore(db)
    seed_demo_data(store)
    return store


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Both store implementations, seeded with the demo data."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture()
def users(memory_store):
    return {u.id: u for u in memory_store.get_users()}


@pytest.fixture()
def client(sql_store, db):
    def _override():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
