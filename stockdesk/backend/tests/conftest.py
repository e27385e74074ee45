"""
Shared test fixtures.

Every test gets its own in-memory SQLite database (StaticPool keeps the
single connection alive across sessions), with all tables created.
"""

import os
import sys
import tempfile
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Must be set before app.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="stockdesk-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db, init_db
from app.models import Category, Warehouse


# ===================
# DATABASE
# ===================

@pytest.fixture
def engine():
    """Fresh in-memory database with all tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def category(db):
    """Default category (first in the table)."""
    category = Category(name="General", description="Default category")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def warehouse(db):
    warehouse = Warehouse(name="Main Warehouse", code="MAIN", city="Accra", country="Ghana")
    db.add(warehouse)
    db.commit()
    db.refresh(warehouse)
    return warehouse


@pytest.fixture
def seeded(category, warehouse):
    """Minimum catalog an import needs: one category and one warehouse."""
    return {"category": category, "warehouse": warehouse}


# ===================
# HTTP CLIENT
# ===================

@pytest.fixture
def client(session_factory):
    """TestClient whose get_db dependency uses the test database."""
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def uploads_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path

