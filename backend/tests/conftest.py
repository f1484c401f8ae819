import sys
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from db import init_db, make_engine  # noqa: E402
from repositories import GuidesRepository  # noqa: E402
from services import geocoding  # noqa: E402
from settings import settings  # noqa: E402


@pytest.fixture(autouse=True)
def no_remote_lookups(monkeypatch):
    """Keep tests offline unless a test turns a lookup back on explicitly."""
    monkeypatch.setattr(settings, "GEOCODING_ENABLED", False)
    monkeypatch.setattr(settings, "IMAGE_LOOKUP_ENABLED", False)
    monkeypatch.setattr(settings, "UNSPLASH_ACCESS_KEY", None)
    monkeypatch.setattr(geocoding, "_MIN_INTERVAL_SEC", 0.0)


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'guides.db'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def session(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def repo():
    return GuidesRepository()
