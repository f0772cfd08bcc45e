import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bitebite.core.database import Base, get_db
from bitebite.deps import get_cart_sessions
from bitebite.services.cart import CartSessions
from bitebite.services.kv_store import InMemoryKeyValueStore
from bitebite.services.seed import seed_menu
import bitebite.models  # noqa: F401


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
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
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    seed_menu(db)
    return db


@pytest.fixture
def cart_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def client(session_factory, cart_store):
    from bitebite import main

    seed_session = session_factory()
    try:
        seed_menu(seed_session)
    finally:
        seed_session.close()

    sessions = CartSessions(cart_store)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    main.app.dependency_overrides[get_cart_sessions] = lambda: sessions
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def default_policies(monkeypatch):
    from bitebite.core import config

    monkeypatch.setattr(config, "ORDER_PRICE_POLICY", "trust")
    monkeypatch.setattr(config, "ORDER_STATUS_POLICY", "permissive")
    monkeypatch.setattr(config, "ADMIN_API_TOKEN", "")
    monkeypatch.setattr(config, "IS_PROD", False)
