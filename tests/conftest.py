"""
Freelancer CRM Test Configuration

Shared fixtures for all tests.
"""
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List

import pytest

from freelance_crm.common.config import reload_config
from freelance_crm.common.models import Client, Project, ProjectStatus


# =============================================================================
# FIXTURES: Sample Data
# =============================================================================

@pytest.fixture
def now() -> datetime:
    """Frozen 'now' for overdue checks and report headers."""
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ann() -> Client:
    return Client(
        id="c-ann",
        full_name="Ann Lee",
        email="ann@leestudio.com",
        phone="+1 555 0100",
        company_name="Lee Studio",
        company_website="https://leestudio.com",
        tags=["vip", "design"],
        created_at=datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def bob() -> Client:
    return Client(
        id="c-bob",
        full_name="Bob Stone",
        email="bob@stone.dev",
        company_name="Stone Commerce",
        tags=["retainer"],
        created_at=datetime(2026, 2, 10, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def carla() -> Client:
    return Client(
        id="c-carla",
        full_name="Carla Diaz",
        email="carla@example.org",
        created_at=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_clients(ann, bob, carla) -> List[Client]:
    return [ann, bob, carla]


@pytest.fixture
def sample_projects() -> List[Project]:
    """
    Revenue: Ann 1500.50, Bob 2500, Carla 800 → 4800.50 total.
    Overdue at `now`: p-store (ongoing, Oct 1) and p-landing (ongoing, due today).
    """
    return [
        Project(
            id="p-store", client_id="c-ann", title="Store redesign",
            description="Shopify theme rework", price=Decimal("1200"),
            deadline=date(2026, 10, 1), status=ProjectStatus.ONGOING,
            created_at=datetime(2026, 9, 1, tzinfo=timezone.utc),
        ),
        Project(
            id="p-logo", client_id="c-ann", title="Logo refresh",
            price=Decimal("300.50"), deadline=date(2026, 9, 1),
            status=ProjectStatus.COMPLETED,
            created_at=datetime(2026, 8, 1, tzinfo=timezone.utc),
        ),
        Project(
            id="p-migration", client_id="c-bob", title="Shopify migration",
            price=Decimal("2500"), deadline=date(2026, 12, 1),
            status=ProjectStatus.PENDING,
            created_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
        ),
        Project(
            id="p-seo", client_id="c-bob", title="SEO audit",
            price=Decimal("0"), status=ProjectStatus.PENDING,
            created_at=datetime(2026, 10, 10, tzinfo=timezone.utc),
        ),
        Project(
            id="p-landing", client_id="c-carla", title="Landing page",
            description="Product launch page", price=Decimal("800"),
            deadline=date(2026, 10, 19), status=ProjectStatus.ONGOING,
            created_at=datetime(2026, 10, 5, tzinfo=timezone.utc),
        ),
    ]


# =============================================================================
# FIXTURES: Config
# =============================================================================

@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Config pointing at a temp SQLite DB and output dir, no YAML file."""
    for key in ("SUPABASE_URL", "SUPABASE_KEY", "CRM_OWNER_ID"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CRM_CONFIG_PATH", str(tmp_path / "missing.yml"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'crm.db'}")
    monkeypatch.setenv("CONFIG__EXPORT__OUTPUT_DIR", str(tmp_path / "output"))
    config = reload_config()
    yield config
    monkeypatch.undo()
    reload_config()
