import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"

from appraisal_api.core.config import Config
from appraisal_api.core.context import AppContext
from appraisal_api.database import build_engine, build_session_factory
from appraisal_api.main import create_app

FRONTEND_ORIGIN = "http://frontend.test"


def make_context(database_url: str = "sqlite://", **overrides) -> AppContext:
    settings = Config(
        database_url_override=database_url,
        db_connect_attempts=overrides.pop("db_connect_attempts", 1),
        db_connect_delay=overrides.pop("db_connect_delay", 0.0),
        frontend_url=FRONTEND_ORIGIN,
        **overrides,
    )
    if database_url == "sqlite://":
        # One shared in-memory database for every session in the test
        engine = build_engine(database_url, poolclass=StaticPool)
    else:
        engine = build_engine(database_url)
    return AppContext(settings=settings, engine=engine, session_factory=build_session_factory(engine))


@pytest.fixture(scope="function")
def context():
    """In-memory SQLite context; the schema is created by the app's own startup."""
    ctx = make_context()
    yield ctx
    ctx.close()


@pytest.fixture(scope="function")
def app(context):
    return create_app(context=context)


@pytest.fixture(scope="function")
def client(app):
    """TestClient with the lifespan run, so connect + schema bootstrap happen as in production."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def bare_client(app):
    """TestClient without startup: the schema is not created."""
    return TestClient(app)


@pytest.fixture
def unreachable_context(tmp_path):
    # SQLite cannot create a file inside a directory that does not exist
    url = f"sqlite:///{tmp_path / 'missing' / 'nested' / 'appraisals.db'}"
    ctx = make_context(url, db_connect_attempts=2)
    yield ctx
    ctx.close()


@pytest.fixture
def appraisal_payload():
    return {
        "employeeName": "Jane Doe",
        "employeeId": "ENG0001",
        "taskName": "Code Review",
        "feedback": "Great work",
        "rating": 5,
    }
