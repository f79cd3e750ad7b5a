from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import create_engine, SQLModel, Session
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
import pytest

from .helpers import create_user

# --- Test Database Setup ---
# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(name="test_engine")
def test_engine_fixture():
    # StaticPool hands every caller the same connection, so the in-memory DB is shared
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import taskboard.models  # noqa: F401  registers the tables
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="test_db_session")
def test_db_session_fixture(test_engine: Engine):
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="app")
def app_fixture(test_db_session: Session):
    """
    The application with ``get_session`` pointed at the test database.
    """
    from taskboard.main import app
    from taskboard.database import get_session

    def get_session_override():
        return test_db_session

    app.dependency_overrides[get_session] = get_session_override
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(name="client")
def client_fixture(app: FastAPI):
    with TestClient(app) as client:
        yield client


@pytest.fixture(name="owner")
def owner_fixture(client: TestClient):
    return create_user(client)
