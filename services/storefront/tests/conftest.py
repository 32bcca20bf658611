from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nursery_api import config, models
from nursery_api.database import Base, get_db
from nursery_api.main import create_app
from nursery_api.rate_limit import InMemoryRateLimitStore, RateLimiter


class FakeClock:
    """Epoch-millisecond clock the tests move by hand."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(InMemoryRateLimitStore(), limit=100, window_ms=60000, clock=clock)


@pytest.fixture
def app(session_factory, rate_limiter, monkeypatch):
    monkeypatch.setattr(config, "DEMO_MODE", False)
    monkeypatch.setattr(config, "ENVIRONMENT", "development")

    app = create_app(rate_limiter=rate_limiter)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def add_item(db_session):
    def _add(**fields) -> models.InventoryItem:
        values = {
            "plant_name": "African Olive",
            "category": "Indigenous Trees",
            "quantity": 45,
            "price": 1200,
            "ready_for_sale": True,
        }
        values.update(fields)
        item = models.InventoryItem(**values)
        db_session.add(item)
        db_session.commit()
        db_session.refresh(item)
        return item

    return _add
