"""
Integration tests for RetreatRepository against a SQLite file.
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import insert, select, update

from retiros.core.exceptions import DataIntegrityError, InputValidationError
from retiros.core.schema import retiros
from retiros.models import RetreatState


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_and_get(retreat_repo, retreat_fields) -> None:
    """Test that a new retreat is stored in PLANNING state."""
    created = await retreat_repo.create(retreat_fields())
    fetched = await retreat_repo.get_by_id(created.id)

    assert fetched == created
    assert fetched.state is RetreatState.PLANNING
    assert fetched.start_date == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_dates_stored_as_rfc3339(retreat_repo, database, retreat_fields) -> None:
    created = await retreat_repo.create(retreat_fields())

    async with database.engine.connect() as conn:
        result = await conn.execute(
            select(retiros.c.fecha_inicio, retiros.c.fecha_fin).where(
                retiros.c.id == str(created.id)
            )
        )
        start, end = result.one()

    assert start == "2024-03-01T09:00:00+00:00"
    assert end == "2024-03-03T18:00:00+00:00"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_rejects_zero_participants(retreat_repo, retreat_fields) -> None:
    with pytest.raises(InputValidationError):
        await retreat_repo.create(retreat_fields(numero_participantes=0))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_all_latest_start_first(retreat_repo, new_retreat) -> None:
    older = await new_retreat(nombre="Invierno", fecha_inicio=datetime(2023, 1, 10))
    newer = await new_retreat(nombre="Verano", fecha_inicio=datetime(2024, 7, 1))

    assert [r.id for r in await retreat_repo.get_all()] == [newer.id, older.id]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_state_and_filters(retreat_repo, new_retreat) -> None:
    first = await new_retreat(nombre="Uno")
    second = await new_retreat(nombre="Dos")

    changed = await retreat_repo.update_state(first.id, RetreatState.ACTIVE)

    assert changed.state is RetreatState.ACTIVE
    assert changed.updated_at >= first.updated_at
    assert [r.id for r in await retreat_repo.get_active()] == [first.id]
    planning = await retreat_repo.get_by_state(RetreatState.PLANNING)
    assert [r.id for r in planning] == [second.id]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_any_state_may_follow_any_other(retreat_repo, retreat) -> None:
    await retreat_repo.update_state(retreat.id, RetreatState.FINISHED)
    back = await retreat_repo.update_state(retreat.id, RetreatState.PLANNING)
    assert back.state is RetreatState.PLANNING


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_state_missing_returns_none(retreat_repo) -> None:
    assert await retreat_repo.update_state(uuid4(), RetreatState.ACTIVE) is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_keeps_state_and_created_at(retreat_repo, retreat, retreat_fields) -> None:
    await retreat_repo.update_state(retreat.id, RetreatState.ACTIVE)

    updated = await retreat_repo.update(
        retreat.id,
        retreat_fields(nombre="Retiro de otono", numero_participantes=35, ubicacion=None),
    )

    assert updated.name == "Retiro de otono"
    assert updated.participant_count == 35
    assert updated.location is None
    assert updated.state is RetreatState.ACTIVE
    assert updated.created_at == retreat.created_at


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_missing_returns_none(retreat_repo, retreat_fields) -> None:
    assert await retreat_repo.update(uuid4(), retreat_fields()) is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_search_by_name(retreat_repo, new_retreat) -> None:
    await new_retreat(nombre="Retiro de Silencio")
    await new_retreat(nombre="Convivencia juvenil")

    found = await retreat_repo.search_by_name("silencio")
    assert [r.name for r in found] == ["Retiro de Silencio"]
    assert await retreat_repo.search_by_name("zzz") == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete(retreat_repo, retreat) -> None:
    assert await retreat_repo.delete(retreat.id) is True
    assert await retreat_repo.get_by_id(retreat.id) is None
    assert await retreat_repo.delete(retreat.id) is False


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_cascades_to_transactions(
    retreat_repo, transaction_repo, retreat, expense_category, record
) -> None:
    txn = await record(retreat, expense_category, "Gasto", 42.0)

    await retreat_repo.delete(retreat.id)

    assert await transaction_repo.get_by_id(txn.id) is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_counts_and_participants(retreat_repo, new_retreat) -> None:
    assert await retreat_repo.total_participants() == 0

    first = await new_retreat(numero_participantes=12)
    await new_retreat(numero_participantes=8)
    await retreat_repo.update_state(first.id, RetreatState.FINISHED)

    assert await retreat_repo.total_participants() == 20
    assert await retreat_repo.count_by_state(RetreatState.FINISHED) == 1
    assert await retreat_repo.count_by_state(RetreatState.PLANNING) == 1
    assert await retreat_repo.count_by_state(RetreatState.ACTIVE) == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_recent_finished(retreat_repo, new_retreat) -> None:
    ids = []
    for month in (1, 5, 3):
        retreat = await new_retreat(
            fecha_inicio=datetime(2024, month, 1), fecha_fin=datetime(2024, month, 3)
        )
        await retreat_repo.update_state(retreat.id, RetreatState.FINISHED)
        ids.append(retreat.id)
    await new_retreat(fecha_fin=datetime(2025, 1, 1))

    recent = await retreat_repo.get_recent_finished(limit=2)
    assert [r.id for r in recent] == [ids[1], ids[2]]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_reads_legacy_timestamps(retreat_repo, database) -> None:
    """Test rows written with SQLite's naive "YYYY-MM-DD HH:MM:SS" timestamps."""
    retreat_id = uuid4()
    async with database.engine.begin() as conn:
        await conn.execute(
            insert(retiros).values(
                id=str(retreat_id),
                nombre="Antiguo",
                fecha_inicio="2022-06-01 10:00:00",
                fecha_fin="2022-06-03 17:30:00.500000",
                numero_participantes=5,
            )
        )

    retreat = await retreat_repo.get_by_id(retreat_id)

    assert retreat.start_date == datetime(2022, 6, 1, 10, 0, tzinfo=timezone.utc)
    assert retreat.end_date == datetime(2022, 6, 3, 17, 30, 0, 500000, tzinfo=timezone.utc)
    assert retreat.state is RetreatState.PLANNING
    assert retreat.created_at.tzinfo is not None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unknown_state_label_is_integrity_error(retreat_repo, database, retreat) -> None:
    """Test that a state label outside the enum is reported as corrupt."""
    async with database.engine.begin() as conn:
        await conn.exec_driver_sql("PRAGMA ignore_check_constraints = ON")
        await conn.execute(
            update(retiros).where(retiros.c.id == str(retreat.id)).values(estado="Cancelado")
        )

    with pytest.raises(DataIntegrityError):
        await retreat_repo.get_by_id(retreat.id)


async def _insert_retreat(database, nombre: str, fecha_inicio: str, fecha_fin: str):
    retreat_id = uuid4()
    async with database.engine.begin() as conn:
        await conn.execute(
            insert(retiros).values(
                id=str(retreat_id),
                nombre=nombre,
                fecha_inicio=fecha_inicio,
                fecha_fin=fecha_fin,
                numero_participantes=5,
            )
        )
    return retreat_id


@pytest.mark.integration
@pytest.mark.asyncio
async def test_ordering_mixes_legacy_and_rfc3339(retreat_repo, database) -> None:
    """Test that same-day rows in both formats sort by their actual time."""
    legacy = await _insert_retreat(
        database, "Legacy noon", "2024-03-01 12:00:00", "2024-03-02 12:00:00"
    )
    current = await _insert_retreat(
        database, "Current morning", "2024-03-01T09:00:00+00:00", "2024-03-02T09:00:00+00:00"
    )

    assert [r.id for r in await retreat_repo.get_all()] == [legacy, current]
    planning = await retreat_repo.get_by_state(RetreatState.PLANNING)
    assert [r.id for r in planning] == [legacy, current]
    found = await retreat_repo.search_by_name("o")
    assert [r.id for r in found] == [legacy, current]

    for retreat_id in (legacy, current):
        await retreat_repo.update_state(retreat_id, RetreatState.FINISHED)
    finished = await retreat_repo.get_recent_finished()
    assert [r.id for r in finished] == [legacy, current]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_ordering_applies_offsets(retreat_repo, database) -> None:
    """Test that a +02:00 timestamp is compared as its UTC instant."""
    # 10:00+02:00 is 08:00 UTC, earlier than 09:00 UTC
    shifted = await _insert_retreat(
        database, "Shifted", "2024-03-01T10:00:00+02:00", "2024-03-02T10:00:00+02:00"
    )
    plain = await _insert_retreat(
        database, "Plain", "2024-03-01 09:00:00", "2024-03-02 09:00:00"
    )

    assert [r.id for r in await retreat_repo.get_all()] == [plain, shifted]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_over_long_stored_name_is_integrity_error(retreat_repo, database) -> None:
    """Test that a stored row breaking a length rule is reported as corrupt."""
    retreat_id = await _insert_retreat(
        database, "x" * 250, "2024-03-01T09:00:00+00:00", "2024-03-02T09:00:00+00:00"
    )

    with pytest.raises(DataIntegrityError, match="Retreat"):
        await retreat_repo.get_by_id(retreat_id)
