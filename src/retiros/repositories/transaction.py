"""
Transaction repository: create/read/delete plus the balance and statistics
queries over the ``transacciones`` table.

There is no unscoped listing; callers list transactions per
retreat. The aggregation queries scan the whole table.
"""

import logging
from typing import Any, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy import case, delete, func, insert, select
from sqlalchemy.engine import RowMapping

from retiros.core.schema import categorias, transacciones
from retiros.models.enums import TransactionKind
from retiros.models.stats import (
    CategoryTotal,
    GlobalBalance,
    RetreatBalance,
    RetreatStatistics,
)
from retiros.models.transaction import Transaction, TransactionCreate
from retiros.models.validation import validate_input
from retiros.repositories.base import (
    BaseRepository,
    as_float,
    build_row,
    latest_first,
    parse_uuid,
)
from retiros.utils.date_utils import parse_flexible_datetime, to_rfc3339

logger = logging.getLogger(__name__)

TransactionInput = Union[TransactionCreate, Mapping[str, Any]]

_COLUMNS = (
    transacciones.c.id,
    transacciones.c.retiro_id,
    transacciones.c.categoria_id,
    transacciones.c.tipo,
    transacciones.c.monto,
    transacciones.c.descripcion,
    transacciones.c.fecha,
    transacciones.c.created_at,
    transacciones.c.updated_at,
)

_INCOME = TransactionKind.INCOME.value
_EXPENSE = TransactionKind.EXPENSE.value


def _row_to_transaction(row: RowMapping) -> Transaction:
    return build_row(
        Transaction,
        id=parse_uuid(row["id"]),
        retreat_id=parse_uuid(row["retiro_id"]),
        category_id=parse_uuid(row["categoria_id"]),
        kind=TransactionKind.from_label(row["tipo"]),
        amount=float(row["monto"]),
        description=row["descripcion"],
        occurred_at=parse_flexible_datetime(row["fecha"]),
        created_at=parse_flexible_datetime(row["created_at"]),
        updated_at=parse_flexible_datetime(row["updated_at"]),
    )


def _sum_amount():
    return func.coalesce(func.sum(transacciones.c.monto), 0.0)


def _average_of(subquery):
    return select(func.coalesce(func.avg(subquery.c.total), 0.0)).scalar_subquery()


class TransactionRepository(BaseRepository):
    """Repository for retreat transactions and their aggregates."""

    async def create(self, data: TransactionInput) -> Transaction:
        """
        Validate and insert a transaction.

        The retreat and category are referenced by id only; their kinds are
        not compared with the transaction's kind.

        Args:
            data: Transaction fields (``occurred_at`` defaults to now)

        Returns:
            The stored transaction with its id and timestamps

        Raises:
            InputValidationError: If a field constraint is violated
            StorageError: If the insert fails
        """
        txn = Transaction.new(validate_input(TransactionCreate, data))

        async with self._write() as conn:
            await conn.execute(
                insert(transacciones).values(
                    id=str(txn.id),
                    retiro_id=str(txn.retreat_id),
                    categoria_id=str(txn.category_id),
                    tipo=txn.kind.value,
                    monto=txn.amount,
                    descripcion=txn.description,
                    fecha=to_rfc3339(txn.occurred_at),
                    created_at=to_rfc3339(txn.created_at),
                    updated_at=to_rfc3339(txn.updated_at),
                )
            )

        logger.info(
            f"Created {txn.kind.value} transaction {txn.id} "
            f"for retreat {txn.retreat_id}: {txn.amount:.2f}"
        )
        return txn

    async def get_by_id(self, transaction_id: UUID) -> Optional[Transaction]:
        """Get a transaction by id, or None if it does not exist."""
        async with self._read() as conn:
            result = await conn.execute(
                select(*_COLUMNS).where(transacciones.c.id == str(transaction_id))
            )
            row = result.mappings().first()

        return _row_to_transaction(row) if row is not None else None

    async def get_by_retiro(self, retreat_id: UUID) -> List[Transaction]:
        """Get the transactions of one retreat, most recent first."""
        async with self._read() as conn:
            result = await conn.execute(
                select(*_COLUMNS)
                .where(transacciones.c.retiro_id == str(retreat_id))
                .order_by(latest_first(transacciones.c.fecha))
            )
            rows = result.mappings().all()

        return [_row_to_transaction(row) for row in rows]

    async def delete(self, transaction_id: UUID) -> bool:
        """
        Delete a transaction.

        Returns:
            True if a row was removed, False if the id did not exist
        """
        async with self._write() as conn:
            result = await conn.execute(
                delete(transacciones).where(transacciones.c.id == str(transaction_id))
            )
            removed = result.rowcount > 0

        if removed:
            logger.info(f"Deleted transaction {transaction_id}")
        return removed

    # =========================================================================
    # Aggregations
    # =========================================================================

    async def calculate_balance(
        self, retreat_id: UUID, kind: Optional[TransactionKind] = None
    ) -> float:
        """
        Sum the amounts of a retreat.

        Args:
            retreat_id: Retreat to sum over
            kind: If given, sum only this kind; otherwise income minus expenses

        Returns:
            The sum, 0.0 for a retreat without matching transactions
        """
        scoped = transacciones.c.retiro_id == str(retreat_id)

        if kind is not None:
            statement = select(_sum_amount()).where(
                scoped, transacciones.c.tipo == kind.value
            )
        else:
            signed = case(
                (transacciones.c.tipo == _INCOME, transacciones.c.monto),
                else_=-transacciones.c.monto,
            )
            statement = select(func.coalesce(func.sum(signed), 0.0)).where(scoped)

        async with self._read() as conn:
            result = await conn.execute(statement)
            return as_float(result.scalar_one())

    async def count_by_retreat(self, retreat_id: UUID) -> int:
        """Number of transactions recorded against a retreat."""
        async with self._read() as conn:
            result = await conn.execute(
                select(func.count())
                .select_from(transacciones)
                .where(transacciones.c.retiro_id == str(retreat_id))
            )
            return int(result.scalar_one())

    async def get_retreat_balance(self, retreat_id: UUID) -> RetreatBalance:
        """Income, expense and count for one retreat in a single result."""
        total_income = await self.calculate_balance(retreat_id, TransactionKind.INCOME)
        total_expense = await self.calculate_balance(retreat_id, TransactionKind.EXPENSE)
        count = await self.count_by_retreat(retreat_id)

        return RetreatBalance(
            retreat_id=retreat_id,
            total_income=total_income,
            total_expense=total_expense,
            transaction_count=count,
        )

    async def calculate_global_balance(self) -> GlobalBalance:
        """
        Totals over every retreat.

        Returns:
            Total income, total expense and transaction count
        """
        income = func.coalesce(
            func.sum(case((transacciones.c.tipo == _INCOME, transacciones.c.monto))),
            0.0,
        )
        expense = func.coalesce(
            func.sum(case((transacciones.c.tipo == _EXPENSE, transacciones.c.monto))),
            0.0,
        )

        async with self._read() as conn:
            result = await conn.execute(select(income, expense, func.count()))
            total_income, total_expense, count = result.one()

        return GlobalBalance(
            total_income=as_float(total_income),
            total_expense=as_float(total_expense),
            transaction_count=int(count),
        )

    async def get_top_categories_by_expense(self, limit: int = 5) -> List[CategoryTotal]:
        """
        Categories with the largest summed expenses.

        Args:
            limit: Number of categories to return

        Returns:
            (name, color, total) per category, largest total first
        """
        total = func.sum(transacciones.c.monto).label("total")
        statement = (
            select(categorias.c.nombre, categorias.c.color, total)
            .select_from(
                transacciones.join(
                    categorias, transacciones.c.categoria_id == categorias.c.id
                )
            )
            .where(transacciones.c.tipo == _EXPENSE)
            .group_by(categorias.c.id, categorias.c.nombre, categorias.c.color)
            .order_by(total.desc())
            .limit(limit)
        )

        async with self._read() as conn:
            result = await conn.execute(statement)
            rows = result.mappings().all()

        return [
            CategoryTotal(
                name=row["nombre"], color=row["color"], total=as_float(row["total"])
            )
            for row in rows
        ]

    async def get_retreat_statistics(self) -> RetreatStatistics:
        """
        Per-retreat averages over retreats that have transactions.

        The three averages are grouped independently: a retreat with no
        income transactions is absent from the income average rather than
        contributing a zero, and likewise for expenses. The balance average
        covers every retreat with at least one transaction of any kind.

        Returns:
            Average balance, average income, average expense and the number of
            retreats with at least one expense
        """
        signed = case(
            (transacciones.c.tipo == _INCOME, transacciones.c.monto),
            else_=-transacciones.c.monto,
        )
        balances = (
            select(func.sum(signed).label("total"))
            .group_by(transacciones.c.retiro_id)
            .subquery("balances")
        )
        incomes = (
            select(func.sum(transacciones.c.monto).label("total"))
            .where(transacciones.c.tipo == _INCOME)
            .group_by(transacciones.c.retiro_id)
            .subquery("incomes")
        )
        expenses = (
            select(func.sum(transacciones.c.monto).label("total"))
            .where(transacciones.c.tipo == _EXPENSE)
            .group_by(transacciones.c.retiro_id)
            .subquery("expenses")
        )
        with_expenses = (
            select(func.count(func.distinct(transacciones.c.retiro_id)))
            .where(transacciones.c.tipo == _EXPENSE)
            .scalar_subquery()
        )

        statement = select(
            _average_of(balances),
            _average_of(incomes),
            _average_of(expenses),
            with_expenses,
        )

        async with self._read() as conn:
            result = await conn.execute(statement)
            average_balance, average_income, average_expense, count = result.one()

        return RetreatStatistics(
            average_balance=as_float(average_balance),
            average_income=as_float(average_income),
            average_expense=as_float(average_expense),
            retreats_with_expenses=int(count or 0),
        )
