"""
Integration tests for CategoryRepository against a SQLite file.
"""

from uuid import uuid4

import pytest
from sqlalchemy import insert

from retiros.core.exceptions import DataIntegrityError, InputValidationError, StorageError
from retiros.core.schema import categorias
from retiros.models import CategoryCreate, CategoryKind


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_and_get(category_repo) -> None:
    """Test that a created category reads back unchanged."""
    created = await category_repo.create(
        {"nombre": "Alojamiento", "tipo": "Gasto", "color": "#123ABC"}
    )
    fetched = await category_repo.get_by_id(created.id)

    assert fetched == created
    assert fetched.kind is CategoryKind.EXPENSE


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_accepts_model(category_repo) -> None:
    """Test creating from an input model instead of a mapping."""
    data = CategoryCreate(name="Cuotas", kind=CategoryKind.INCOME, color="#00FF00")
    created = await category_repo.create(data)
    assert created.name == "Cuotas"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_rejects_invalid_color(category_repo) -> None:
    with pytest.raises(InputValidationError):
        await category_repo.create({"nombre": "Comida", "tipo": "Gasto", "color": "red"})
    assert await category_repo.get_all() == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_missing_returns_none(category_repo) -> None:
    assert await category_repo.get_by_id(uuid4()) is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_all_ordered_by_name(category_repo) -> None:
    for name in ("Transporte", "Alojamiento", "Material"):
        await category_repo.create({"nombre": name, "tipo": "Gasto", "color": "#111111"})

    names = [c.name for c in await category_repo.get_all()]
    assert names == ["Alojamiento", "Material", "Transporte"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_by_kind(category_repo, income_category, expense_category) -> None:
    incomes = await category_repo.get_by_kind(CategoryKind.INCOME)
    expenses = await category_repo.get_by_kind(CategoryKind.EXPENSE)

    assert [c.id for c in incomes] == [income_category.id]
    assert [c.id for c in expenses] == [expense_category.id]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update(category_repo, expense_category) -> None:
    updated = await category_repo.update(
        expense_category.id, {"nombre": "Catering", "tipo": "Gasto", "color": "#ABCDEF"}
    )

    assert updated is not None
    assert updated.id == expense_category.id
    assert updated.name == "Catering"
    assert (await category_repo.get_by_id(expense_category.id)).color == "#ABCDEF"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_missing_returns_none(category_repo) -> None:
    result = await category_repo.update(
        uuid4(), {"nombre": "Nada", "tipo": "Gasto", "color": "#000000"}
    )
    assert result is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete(category_repo, expense_category) -> None:
    assert await category_repo.delete(expense_category.id) is True
    assert await category_repo.get_by_id(expense_category.id) is None
    assert await category_repo.delete(expense_category.id) is False


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_in_use_is_rejected(
    category_repo, retreat, expense_category, record
) -> None:
    """Test that a category referenced by a transaction cannot be deleted."""
    await record(retreat, expense_category, "Gasto", 10.0)

    with pytest.raises(StorageError):
        await category_repo.delete(expense_category.id)
    assert await category_repo.get_by_id(expense_category.id) is not None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_count_by_kind(category_repo, income_category, expense_category) -> None:
    await category_repo.create({"nombre": "Viajes", "tipo": "Gasto", "color": "#222222"})

    assert await category_repo.count_by_kind(CategoryKind.EXPENSE) == 2
    assert await category_repo.count_by_kind(CategoryKind.INCOME) == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_corrupt_id_is_integrity_error(category_repo, database) -> None:
    """Test that a row with a non-UUID id is reported as corrupt."""
    async with database.engine.begin() as conn:
        await conn.execute(
            insert(categorias).values(
                id="not-a-uuid", nombre="Rota", tipo="Gasto", color="#000000"
            )
        )

    with pytest.raises(DataIntegrityError):
        await category_repo.get_all()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_over_long_stored_name_is_integrity_error(category_repo, database) -> None:
    """Test that a stored name over 100 characters is reported as corrupt."""
    category_id = uuid4()
    async with database.engine.begin() as conn:
        await conn.execute(
            insert(categorias).values(
                id=str(category_id), nombre="x" * 150, tipo="Gasto", color="#000000"
            )
        )

    with pytest.raises(DataIntegrityError, match="Category"):
        await category_repo.get_by_id(category_id)
