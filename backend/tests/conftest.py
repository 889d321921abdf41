import pytest
from faker import Faker
from fastapi.testclient import TestClient

from core.config import Settings
from db.base import Base
from db.executor import QueryExecutor
from db.session import build_engine, build_session_factory
from main import create_app
from models import entities  # noqa: F401

fake = Faker()


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", log_level="WARNING")


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def executor(db):
    return QueryExecutor(db)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # context manager runs startup, which creates the entities table
    with TestClient(app) as client:
        yield client


@pytest.fixture
def service_data():
    return {
        "title": "Cleaning",
        "category": "cleaning",
        "providerName": "Acme",
        "priceRange": "$50-$100",
    }


@pytest.fixture
def booking_data():
    return {
        "serviceId": 1,
        "serviceTitle": "Cleaning",
        "providerName": "Acme",
        "customerName": fake.name(),
        "customerEmail": fake.free_email(),
        "preferredDate": "2026-11-02",
    }
