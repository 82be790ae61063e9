import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aquaguardian.config import Settings
from aquaguardian.database import Base, get_db
from aquaguardian.main import create_app
from aquaguardian.scoring import SensorReading


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        cors_origins=["*"],
        assessor_mode="local",
        llm_api_key="",
        llm_api_url="http://llm.invalid/generate",
        llm_model="test-model",
        llm_timeout_sec=1.0,
        sim_interval_sec=1,
    )


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(settings, session_factory):
    app = create_app(settings)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class FakeLLM:
    """Stands in for LLMClient: returns canned text or raises."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate(self, *parts, **kwargs):
        self.calls.append((parts, kwargs))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def optimal_reading():
    return SensorReading(ph=7.0, tds=150, turbidity=2, temperature=22, timestamp=1)


@pytest.fixture
def poor_reading():
    return SensorReading(ph=5.0, tds=700, turbidity=15, temperature=35, timestamp=2)
