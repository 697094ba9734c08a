"""
Retreat repository: CRUD, state changes, search and participant statistics
over the ``retiros`` table.

Every date column read from storage goes through the flexible date parser;
every date written is RFC 3339.
"""

import logging
from typing import Any, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import RowMapping

from retiros.core.schema import retiros
from retiros.models.enums import RetreatState
from retiros.models.retreat import Retreat, RetreatCreate
from retiros.models.validation import validate_input
from retiros.repositories.base import BaseRepository, build_row, latest_first, parse_uuid
from retiros.utils.date_utils import parse_flexible_datetime, to_rfc3339, utc_now

logger = logging.getLogger(__name__)

RetreatInput = Union[RetreatCreate, Mapping[str, Any]]

_COLUMNS = (
    retiros.c.id,
    retiros.c.nombre,
    retiros.c.descripcion,
    retiros.c.fecha_inicio,
    retiros.c.fecha_fin,
    retiros.c.ubicacion,
    retiros.c.numero_participantes,
    retiros.c.estado,
    retiros.c.created_at,
    retiros.c.updated_at,
)


def _row_to_retreat(row: RowMapping) -> Retreat:
    return build_row(
        Retreat,
        id=parse_uuid(row["id"]),
        name=row["nombre"],
        description=row["descripcion"],
        start_date=parse_flexible_datetime(row["fecha_inicio"]),
        end_date=parse_flexible_datetime(row["fecha_fin"]),
        location=row["ubicacion"],
        participant_count=int(row["numero_participantes"]),
        state=RetreatState.from_label(row["estado"]),
        created_at=parse_flexible_datetime(row["created_at"]),
        updated_at=parse_flexible_datetime(row["updated_at"]),
    )


class RetreatRepository(BaseRepository):
    """Repository for retreats and their lifecycle state."""

    async def create(self, data: RetreatInput) -> Retreat:
        """
        Validate and insert a new retreat in PLANNING state.

        Args:
            data: Retreat fields

        Returns:
            The stored retreat with its new id and timestamps

        Raises:
            InputValidationError: If a field constraint is violated
            StorageError: If the insert fails
        """
        retreat = Retreat.new(validate_input(RetreatCreate, data))

        async with self._write() as conn:
            await conn.execute(
                insert(retiros).values(
                    id=str(retreat.id),
                    nombre=retreat.name,
                    descripcion=retreat.description,
                    fecha_inicio=to_rfc3339(retreat.start_date),
                    fecha_fin=to_rfc3339(retreat.end_date),
                    ubicacion=retreat.location,
                    numero_participantes=retreat.participant_count,
                    estado=retreat.state.value,
                    created_at=to_rfc3339(retreat.created_at),
                    updated_at=to_rfc3339(retreat.updated_at),
                )
            )

        logger.info(f"Created retreat {retreat.id} ({retreat.name})")
        return retreat

    async def get_by_id(self, retreat_id: UUID) -> Optional[Retreat]:
        """Get a retreat by id, or None if it does not exist."""
        async with self._read() as conn:
            result = await conn.execute(
                select(*_COLUMNS).where(retiros.c.id == str(retreat_id))
            )
            row = result.mappings().first()

        return _row_to_retreat(row) if row is not None else None

    async def _fetch(self, statement) -> List[Retreat]:
        async with self._read() as conn:
            result = await conn.execute(statement)
            rows = result.mappings().all()
        return [_row_to_retreat(row) for row in rows]

    async def get_all(self) -> List[Retreat]:
        """Get every retreat, most recent start date first."""
        return await self._fetch(
            select(*_COLUMNS).order_by(latest_first(retiros.c.fecha_inicio))
        )

    async def get_by_state(self, state: RetreatState) -> List[Retreat]:
        """Get retreats in one state, most recent start date first."""
        return await self._fetch(
            select(*_COLUMNS)
            .where(retiros.c.estado == state.value)
            .order_by(latest_first(retiros.c.fecha_inicio))
        )

    async def get_active(self) -> List[Retreat]:
        """Get retreats in ACTIVE state."""
        return await self.get_by_state(RetreatState.ACTIVE)

    async def search_by_name(self, query: str) -> List[Retreat]:
        """
        Partial name match.

        Case sensitivity follows the storage engine's LIKE semantics (SQLite
        folds ASCII letters only).

        Args:
            query: Substring to look for anywhere in the name

        Returns:
            Matching retreats, most recent start date first
        """
        return await self._fetch(
            select(*_COLUMNS)
            .where(retiros.c.nombre.like(f"%{query}%"))
            .order_by(latest_first(retiros.c.fecha_inicio))
        )

    async def update(self, retreat_id: UUID, data: RetreatInput) -> Optional[Retreat]:
        """
        Overwrite the editable fields of a retreat.

        ``state`` and ``created_at`` are preserved; ``updated_at`` is refreshed.

        Returns:
            The refreshed retreat, or None if no row has this id

        Raises:
            InputValidationError: If a field constraint is violated
        """
        fields = validate_input(RetreatCreate, data)

        async with self._write() as conn:
            result = await conn.execute(
                update(retiros)
                .where(retiros.c.id == str(retreat_id))
                .values(
                    nombre=fields.name,
                    descripcion=fields.description,
                    fecha_inicio=to_rfc3339(fields.start_date),
                    fecha_fin=to_rfc3339(fields.end_date),
                    ubicacion=fields.location,
                    numero_participantes=fields.participant_count,
                    updated_at=to_rfc3339(utc_now()),
                )
            )
            updated = result.rowcount

        if updated == 0:
            return None

        logger.info(f"Updated retreat {retreat_id}")
        return await self.get_by_id(retreat_id)

    async def update_state(
        self, retreat_id: UUID, state: RetreatState
    ) -> Optional[Retreat]:
        """
        Replace the state of a retreat.

        Any state may replace any other; no transition rules are applied.

        Returns:
            The refreshed retreat, or None if no row has this id
        """
        async with self._write() as conn:
            result = await conn.execute(
                update(retiros)
                .where(retiros.c.id == str(retreat_id))
                .values(estado=state.value, updated_at=to_rfc3339(utc_now()))
            )
            updated = result.rowcount

        if updated == 0:
            return None

        logger.info(f"Retreat {retreat_id} is now {state.value}")
        return await self.get_by_id(retreat_id)

    async def delete(self, retreat_id: UUID) -> bool:
        """
        Delete a retreat.

        Its transactions are removed by the storage engine's cascade.

        Returns:
            True if a row was removed, False if the id did not exist
        """
        async with self._write() as conn:
            result = await conn.execute(
                delete(retiros).where(retiros.c.id == str(retreat_id))
            )
            removed = result.rowcount > 0

        if removed:
            logger.info(f"Deleted retreat {retreat_id}")
        return removed

    async def count_by_state(self, state: RetreatState) -> int:
        """Count retreats in one state."""
        async with self._read() as conn:
            result = await conn.execute(
                select(func.count())
                .select_from(retiros)
                .where(retiros.c.estado == state.value)
            )
            return int(result.scalar_one())

    async def total_participants(self) -> int:
        """Sum of participant counts across all retreats (0 when empty)."""
        async with self._read() as conn:
            result = await conn.execute(
                select(func.coalesce(func.sum(retiros.c.numero_participantes), 0))
            )
            return int(result.scalar_one())

    async def get_recent_finished(self, limit: int = 5) -> List[Retreat]:
        """
        Get the most recently ended FINISHED retreats.

        Args:
            limit: Maximum number of retreats to return

        Returns:
            Retreats ordered by end date, latest first
        """
        return await self._fetch(
            select(*_COLUMNS)
            .where(retiros.c.estado == RetreatState.FINISHED.value)
            .order_by(latest_first(retiros.c.fecha_fin))
            .limit(limit)
        )
