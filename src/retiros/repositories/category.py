"""
Category repository: CRUD and filtering over the ``categorias`` table.
"""

import logging
from typing import Any, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import RowMapping

from retiros.core.schema import categorias
from retiros.models.category import Category, CategoryCreate
from retiros.models.enums import CategoryKind
from retiros.models.validation import validate_input
from retiros.repositories.base import BaseRepository, build_row, parse_uuid
from retiros.utils.date_utils import to_rfc3339, utc_now

logger = logging.getLogger(__name__)

CategoryInput = Union[CategoryCreate, Mapping[str, Any]]

_COLUMNS = (
    categorias.c.id,
    categorias.c.nombre,
    categorias.c.tipo,
    categorias.c.color,
)


def _row_to_category(row: RowMapping) -> Category:
    return build_row(
        Category,
        id=parse_uuid(row["id"]),
        name=row["nombre"],
        kind=CategoryKind.from_label(row["tipo"]),
        color=row["color"],
    )


class CategoryRepository(BaseRepository):
    """Repository for income and expense categories."""

    async def create(self, data: CategoryInput) -> Category:
        """
        Validate and insert a new category.

        Args:
            data: Category fields

        Returns:
            The stored category with its new id

        Raises:
            InputValidationError: If a field constraint is violated
            StorageError: If the insert fails
        """
        category = Category.new(validate_input(CategoryCreate, data))
        now = to_rfc3339(utc_now())

        async with self._write() as conn:
            await conn.execute(
                insert(categorias).values(
                    id=str(category.id),
                    nombre=category.name,
                    tipo=category.kind.value,
                    color=category.color,
                    created_at=now,
                    updated_at=now,
                )
            )

        logger.info(f"Created category {category.id} ({category.name})")
        return category

    async def get_by_id(self, category_id: UUID) -> Optional[Category]:
        """Get a category by id, or None if it does not exist."""
        async with self._read() as conn:
            result = await conn.execute(
                select(*_COLUMNS).where(categorias.c.id == str(category_id))
            )
            row = result.mappings().first()

        return _row_to_category(row) if row is not None else None

    async def get_all(self) -> List[Category]:
        """Get every category ordered by name."""
        async with self._read() as conn:
            result = await conn.execute(
                select(*_COLUMNS).order_by(categorias.c.nombre)
            )
            rows = result.mappings().all()

        return [_row_to_category(row) for row in rows]

    async def get_by_kind(self, kind: CategoryKind) -> List[Category]:
        """Get categories of one kind ordered by name."""
        async with self._read() as conn:
            result = await conn.execute(
                select(*_COLUMNS)
                .where(categorias.c.tipo == kind.value)
                .order_by(categorias.c.nombre)
            )
            rows = result.mappings().all()

        return [_row_to_category(row) for row in rows]

    async def update(
        self, category_id: UUID, data: CategoryInput
    ) -> Optional[Category]:
        """
        Overwrite name, kind and color of an existing category.

        Returns:
            The refreshed category, or None if no row has this id

        Raises:
            InputValidationError: If a field constraint is violated
        """
        fields = validate_input(CategoryCreate, data)

        async with self._write() as conn:
            result = await conn.execute(
                update(categorias)
                .where(categorias.c.id == str(category_id))
                .values(
                    nombre=fields.name,
                    tipo=fields.kind.value,
                    color=fields.color,
                    updated_at=to_rfc3339(utc_now()),
                )
            )
            updated = result.rowcount

        if updated == 0:
            return None

        logger.info(f"Updated category {category_id}")
        return await self.get_by_id(category_id)

    async def delete(self, category_id: UUID) -> bool:
        """
        Delete a category.

        Transactions that still reference the category make the storage
        engine reject the delete, which surfaces as StorageError.

        Returns:
            True if a row was removed, False if the id did not exist
        """
        async with self._write() as conn:
            result = await conn.execute(
                delete(categorias).where(categorias.c.id == str(category_id))
            )
            removed = result.rowcount > 0

        if removed:
            logger.info(f"Deleted category {category_id}")
        return removed

    async def count_by_kind(self, kind: CategoryKind) -> int:
        """Count categories of one kind."""
        async with self._read() as conn:
            result = await conn.execute(
                select(func.count())
                .select_from(categorias)
                .where(categorias.c.tipo == kind.value)
            )
            return int(result.scalar_one())
