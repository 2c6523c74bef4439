"""
Shared fixtures

Every test gets its own in-memory SQLite database (StaticPool keeps the
single connection alive so all sessions see the same data).
"""
import os

# Must be set before filaledger.core.settings is first imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUDIT_LOG_FILE"] = ""
os.environ["LOG_FILE"] = ""
os.environ["PRINTER_CLOUD_ENABLED"] = "false"

from datetime import date  # noqa: E402

import pytest  # noqa: E402

from filaledger.db.session import create_db_engine, init_db, make_session_factory  # noqa: E402
from filaledger.schemas.material import MaterialCreate  # noqa: E402
from filaledger.services.store import Store  # noqa: E402


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    """A session for testing one component directly"""
    db = session_factory()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def store(session_factory):
    """Empty store: no built-in taxonomy or presets"""
    return Store(session_factory)


@pytest.fixture
def seeded_store(store):
    store.initialize(seed_builtin=True)
    return store


@pytest.fixture
def material_data():
    """Factory for MaterialCreate with sensible defaults"""
    def _make(**overrides):
        values = {
            "brand": "Bambu Lab",
            "main_category": "PLA",
            "sub_category": "Matte",
            "name": "Ivory White",
            "price": 100.0,
            "initial_weight": 1000.0,
            "purchase_date": date(2024, 1, 15),
        }
        values.update(overrides)
        return MaterialCreate(**values)
    return _make
