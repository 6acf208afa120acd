from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.database import Base
from backend.main import app
from backend.routers.deps import get_record_store, get_summary_tracker
from backend.services.kv_store import KeyValueStore
from backend.services.record_store import RecordStore
from backend.services.summarizer import SummaryTracker


@pytest.fixture()
def session_factory() -> Generator:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def kv(session_factory) -> KeyValueStore:
    return KeyValueStore(session_factory)


@pytest.fixture()
def store(kv) -> RecordStore:
    record_store = RecordStore(kv)
    record_store.load()
    return record_store


@pytest.fixture()
def tracker() -> SummaryTracker:
    return SummaryTracker(requester=lambda records: f"Summary of {len(records)} records")


@pytest.fixture()
def client(store, tracker) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_summary_tracker] = lambda: tracker

    # Tests use an in-memory DB via dependency override; skip app startup side effects.
    original_startup = list(app.router.on_startup)
    app.router.on_startup.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.router.on_startup[:] = original_startup
    app.dependency_overrides.clear()
