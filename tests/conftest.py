# tests/conftest.py
"""
Configuration globale pour les tests pytest
Base SQLite en mémoire partagée, jetons par rôle, catalogue de test
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ajouter le répertoire racine au path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.security import Actor, create_actor_token  # noqa: E402
from db.data_client import DataClient  # noqa: E402
from db.models import Base, Category, Product  # noqa: E402
from db.session import get_db  # noqa: E402
from main import app  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override de la dépendance get_db pour les tests."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

ADMIN = Actor(id="admin-1", name="Asha Admin", email="admin@example.com", role="Admin")
DESIGNER = Actor(id="designer-1", name="Dev Designer", email="designer@example.com", role="Designer")
CLIENT = Actor(id="client-1", name="Chitra Client", email="client@example.com", role="Client")


@pytest.fixture
def test_db():
    """DB propre à chaque test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def data_client(test_db):
    return DataClient(test_db)


@pytest.fixture
def api(test_db):
    return TestClient(app)


def _headers(actor: Actor):
    return {"Authorization": f"Bearer {create_actor_token(actor)}"}


@pytest.fixture
def admin_headers():
    return _headers(ADMIN)


@pytest.fixture
def designer_headers():
    return _headers(DESIGNER)


@pytest.fixture
def client_headers():
    return _headers(CLIENT)


@pytest.fixture
def catalog(test_db):
    """Deux catégories, trois produits."""
    furniture = Category(name="Furniture")
    lighting = Category(name="Lighting")
    test_db.add_all([furniture, lighting])
    test_db.flush()

    sofa = Product(name="Sofa", itemcode="FUR-001", categoryid=furniture.id, baserate=100)
    table = Product(name="Coffee table", itemcode="FUR-002", categoryid=furniture.id, baserate=80)
    lamp = Product(name="Floor lamp", itemcode="LIG-001", categoryid=lighting.id, baserate=50, unit="pcs")
    test_db.add_all([sofa, table, lamp])
    test_db.commit()

    return {
        "furniture": furniture.id,
        "lighting": lighting.id,
        "sofa": sofa.id,
        "table": table.id,
        "lamp": lamp.id,
    }
