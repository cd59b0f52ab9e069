import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure backend package is importable and the import-time engine stays in memory
backend_root = Path(__file__).resolve().parents[1]
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))
os.environ.setdefault("DATABASE_URL", "sqlite://")


@pytest.fixture
def session_factory(tmp_path, monkeypatch):
    """Sessionmaker bound to an isolated SQLite file under tmp_path."""
    # Avoid accidental usage of real API keys during tests
    monkeypatch.delenv("API_KEY", raising=False)

    from resume_studio import db  # type: ignore
    import resume_studio.models  # noqa: F401

    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False}
    )
    db.Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """Provide a FastAPI TestClient whose get_db dependency uses the test DB."""
    from resume_studio import db  # type: ignore
    from resume_studio.main import app  # type: ignore

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[db.get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
