"""
Pytest configuration and fixtures for retiros tests.

Every test that touches storage gets its own file-backed SQLite database
under pytest's tmp_path, with the schema already created.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio

from retiros.core.database import Database
from retiros.models import Category, Retreat
from retiros.repositories import (
    CategoryRepository,
    RetreatRepository,
    TransactionRepository,
)


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLAlchemy URL of a fresh SQLite file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'retiros.db'}"


@pytest_asyncio.fixture
async def database(database_url: str) -> AsyncIterator[Database]:
    """Database with the schema created, disposed after the test."""
    db = Database(database_url)
    await db.init_schema()
    yield db
    await db.dispose()


@pytest.fixture
def category_repo(database: Database) -> CategoryRepository:
    return CategoryRepository(database)


@pytest.fixture
def retreat_repo(database: Database) -> RetreatRepository:
    return RetreatRepository(database)


@pytest.fixture
def transaction_repo(database: Database) -> TransactionRepository:
    return TransactionRepository(database)


def _retreat_fields(**overrides) -> dict:
    """Valid retreat input, with any field replaced by ``overrides``."""
    fields = {
        "nombre": "Retiro de primavera",
        "descripcion": "Fin de semana en la montana",
        "fecha_inicio": datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        "fecha_fin": datetime(2024, 3, 3, 18, 0, tzinfo=timezone.utc),
        "ubicacion": "Montserrat",
        "numero_participantes": 20,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def retreat_fields():
    """Builder of valid retreat input; keyword arguments replace fields."""
    return _retreat_fields


@pytest_asyncio.fixture
async def retreat(retreat_repo: RetreatRepository) -> Retreat:
    return await retreat_repo.create(_retreat_fields())


@pytest_asyncio.fixture
async def income_category(category_repo: CategoryRepository) -> Category:
    return await category_repo.create(
        {"nombre": "Donaciones", "tipo": "Ingreso", "color": "#00AA00"}
    )


@pytest_asyncio.fixture
async def expense_category(category_repo: CategoryRepository) -> Category:
    return await category_repo.create(
        {"nombre": "Comida", "tipo": "Gasto", "color": "#FF5733"}
    )


@pytest.fixture
def new_retreat(retreat_repo: RetreatRepository):
    """Factory creating retreats from ``retreat_fields`` overrides."""

    async def create(**overrides) -> Retreat:
        return await retreat_repo.create(_retreat_fields(**overrides))

    return create


@pytest.fixture
def record(transaction_repo: TransactionRepository):
    """Factory recording a transaction against a retreat and category."""

    async def create(retreat: Retreat, category: Category, kind: str, amount: float, **extra):
        fields = {
            "retiro_id": retreat.id,
            "categoria_id": category.id,
            "tipo": kind,
            "monto": amount,
            "descripcion": extra.pop("descripcion", f"{kind} {amount}"),
        }
        fields.update(extra)
        return await transaction_repo.create(fields)

    return create
