"""
Integration tests for the MCP tools against a SQLite file.
"""

from uuid import uuid4

import pytest

from retiros.core.exceptions import InputValidationError, NotFoundError, StorageError
from retiros.tools.tools import RetirosTools


@pytest.fixture
def tools(database) -> RetirosTools:
    """Create RetirosTools bound to the test database."""
    return RetirosTools(database)


async def _seed(tools: RetirosTools):
    category = await tools.create_categoria("Lodging", "Gasto", "#FF5733")
    donations = await tools.create_categoria("Donaciones", "Ingreso", "#00AA00")
    retreat = await tools.create_retiro(
        nombre="Spring Retreat",
        fecha_inicio="2024-03-01",
        fecha_fin="2024-03-05 18:00:00",
        numero_participantes=25,
    )
    return category, donations, retreat


@pytest.mark.integration
@pytest.mark.asyncio
async def test_categories_round_trip(tools) -> None:
    created = await tools.create_categoria("Lodging", "Gasto", "#FF5733")

    assert created["nombre"] == "Lodging"
    assert created["tipo"] == "Gasto"

    listed = await tools.get_categorias()
    assert listed["count"] == 1
    assert listed["categorias"][0] == created

    assert (await tools.get_categorias(tipo="Ingreso"))["count"] == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_categoria(tools) -> None:
    created = await tools.create_categoria("Lodging", "Gasto", "#FF5733")

    updated = await tools.update_categoria(created["id"], "Hotel", "Gasto", "#000000")

    assert updated["id"] == created["id"]
    assert updated["nombre"] == "Hotel"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_missing_categoria(tools) -> None:
    with pytest.raises(NotFoundError):
        await tools.update_categoria(str(uuid4()), "Hotel", "Gasto", "#000000")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_invalid_filter_label(tools) -> None:
    with pytest.raises(InputValidationError):
        await tools.get_categorias(tipo="Ahorro")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_retreat_lifecycle(tools) -> None:
    _, _, retreat = await _seed(tools)

    assert retreat["estado"] == "Planificacion"
    assert retreat["fecha_inicio"].startswith("2024-03-01T00:00:00")

    active = await tools.update_retiro_estado(retreat["id"], "Activo")
    assert active["estado"] == "Activo"
    assert (await tools.get_retiros(estado="Activo"))["count"] == 1

    edited = await tools.update_retiro(
        retreat["id"],
        nombre="Spring Retreat 2024",
        fecha_inicio="2024-03-02",
        fecha_fin="2024-03-06",
        numero_participantes=30,
        ubicacion="Montserrat",
    )
    assert edited["estado"] == "Activo"
    assert edited["numero_participantes"] == 30
    assert edited["ubicacion"] == "Montserrat"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_estado_rejects_unknown_label(tools) -> None:
    _, _, retreat = await _seed(tools)
    with pytest.raises(InputValidationError):
        await tools.update_retiro_estado(retreat["id"], "Cancelado")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_transactions_and_balance(tools) -> None:
    category, donations, retreat = await _seed(tools)

    await tools.create_transaccion(
        retreat["id"], category["id"], "Gasto", 120.50, "Cabin rental"
    )
    await tools.create_transaccion(
        retreat["id"], donations["id"], "Ingreso", 500, "Fees", fecha="2024-03-01T10:00:00Z"
    )

    listed = await tools.get_transacciones(retreat["id"])
    assert listed["count"] == 2

    balance = await tools.get_balance_retiro(retreat["id"])
    assert balance == {
        "retiro_id": retreat["id"],
        "balance": 379.5,
        "total_ingresos": 500.0,
        "total_gastos": 120.5,
        "transacciones_count": 2,
    }


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_transacciones_without_retreat(tools) -> None:
    assert await tools.get_transacciones() == {"count": 0, "transacciones": []}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_category_in_use(tools) -> None:
    category, _, retreat = await _seed(tools)
    await tools.create_transaccion(retreat["id"], category["id"], "Gasto", 10, "Sabanas")

    with pytest.raises(StorageError):
        await tools.delete_categoria(category["id"])


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_retreat_and_transaction(tools) -> None:
    category, _, retreat = await _seed(tools)
    txn = await tools.create_transaccion(retreat["id"], category["id"], "Gasto", 10, "Sabanas")

    assert await tools.delete_transaccion(txn["id"]) == {"id": txn["id"], "deleted": True}
    assert await tools.delete_retiro(retreat["id"]) == {"id": retreat["id"], "deleted": True}
    assert (await tools.delete_retiro(retreat["id"]))["deleted"] is False


@pytest.mark.integration
@pytest.mark.asyncio
async def test_estadisticas(tools) -> None:
    category, donations, retreat = await _seed(tools)
    await tools.create_transaccion(retreat["id"], category["id"], "Gasto", 300, "Cabins")
    await tools.create_transaccion(retreat["id"], donations["id"], "Ingreso", 1000, "Fees")
    await tools.update_retiro_estado(retreat["id"], "Finalizado")

    stats = await tools.get_estadisticas()

    assert stats["global"]["balance"] == 700.0
    assert stats["participantes_total"] == 25
    assert stats["retiros_por_estado"] == {"Planificacion": 0, "Activo": 0, "Finalizado": 1}
    assert stats["categorias_por_tipo"] == {"Ingreso": 1, "Gasto": 1}
    assert stats["top_categorias_gasto"] == [
        {"name": "Lodging", "color": "#FF5733", "total": 300.0}
    ]
    assert stats["promedios"]["retreats_with_expenses"] == 1
    assert [r["id"] for r in stats["retiros_finalizados_recientes"]] == [retreat["id"]]
    recent = stats["retiros_finalizados_recientes"][0]
    assert recent["nombre"] == "Spring Retreat"
    assert recent["total_gastos"] == 300.0
    assert recent["balance"] == 700.0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_estadisticas_recent_without_transactions(tools) -> None:
    _, _, retreat = await _seed(tools)
    await tools.update_retiro_estado(retreat["id"], "Finalizado")

    stats = await tools.get_estadisticas()

    recent = stats["retiros_finalizados_recientes"]
    assert [(r["id"], r["total_gastos"], r["balance"]) for r in recent] == [
        (retreat["id"], 0.0, 0.0)
    ]
