"""Shared fixtures for backend tests."""

from contextlib import contextmanager
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from solvix.api.auth import create_token
from solvix.models import ClientInfo, CompanyInfo, LineItem, Quote


# ── Mock DB before importing app ────────────────────────────

@contextmanager
def _mock_cursor():
    """Context manager that yields a mock cursor."""
    cur = MagicMock()
    cur.fetchone.return_value = None
    cur.fetchall.return_value = []
    yield cur


@contextmanager
def _mock_db():
    """Context manager that yields a mock connection."""
    conn = MagicMock()
    cur = MagicMock()
    cur.fetchone.return_value = None
    cur.fetchall.return_value = []
    conn.cursor.return_value = cur
    yield conn


# Patch DB at module level so app can import without a real database
_patcher_cursor = patch("solvix.database.get_cursor", _mock_cursor)
_patcher_db = patch("solvix.database.get_db", _mock_db)
_patcher_pool = patch("solvix.database.close_pool", lambda: None)
_patcher_cursor.start()
_patcher_db.start()
_patcher_pool.start()

from solvix.main import app  # noqa: E402

# 1x1 transparent PNG
PNG_DATA_URI = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


# ── Fixtures ────────────────────────────────────────────────

@pytest.fixture
def client():
    """TestClient for the FastAPI app."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_token():
    """Valid JWT token for the owner of the sample quote."""
    return create_token("user-1", "owner@solvix.test")


@pytest.fixture
def auth_headers(auth_token):
    """Authorization headers for the quote owner."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def sample_items():
    return [
        LineItem(id="1", designation="Développement site vitrine", quantity=2, unit_price=100, vat_rate=20),
        LineItem(id="2", designation="Formation", quantity=1, unit_price=50, vat_rate=10),
    ]


@pytest.fixture
def sample_quote(sample_items):
    """Devis de référence : 250 HT, 45 TVA, 295 TTC."""
    return Quote(
        id="q-1",
        number="DEV-2025-001",
        date_creation=date(2025, 1, 15),
        date_expiration=date(2025, 2, 14),
        currency="EUR",
        notes="Paiement : 30% à la commande.\nSolde à la livraison.",
        template="classic",
        items=sample_items,
        client=ClientInfo(
            name="Aziz Tindé",
            company="Danitechs",
            email="aziz@danitechs.pro",
            phone="06 12 34 56 78",
            address="456 Avenue de l'Innovation\n69000 Lyon",
        ),
        company=CompanyInfo(
            name="Solvix",
            address="123 Rue de la Technologie\n75001 Paris",
            phone="+33 1 23 45 67 89",
            email="contact@solvix.com",
            rccm="RCCM-PA-2024-B-123",
        ),
        subtotal_ht=250,
        total_vat=45,
        total_ttc=295,
    )


@pytest.fixture
def mock_cursor():
    """Provides a fresh mock cursor for repository tests."""
    with patch("solvix.services.repository.get_cursor") as mock_gc:
        cur = MagicMock()
        cur.fetchone.return_value = None
        cur.fetchall.return_value = []

        @contextmanager
        def ctx():
            yield cur

        mock_gc.side_effect = ctx
        yield cur


@pytest.fixture
def png_data_uri():
    return PNG_DATA_URI
