"""
"estadisticas" command: ledger-wide totals and per-retreat averages.
"""

import argparse

from retiros.cli import formatting as fmt
from retiros.config import DEFAULT_RECENT_FINISHED, DEFAULT_TOP_CATEGORIES
from retiros.core.database import Database
from retiros.models.enums import CategoryKind, RetreatState
from retiros.repositories import (
    CategoryRepository,
    RetreatRepository,
    TransactionRepository,
)


async def estadisticas(args: argparse.Namespace, db: Database) -> None:
    categories = CategoryRepository(db)
    retreats = RetreatRepository(db)
    transactions = TransactionRepository(db)

    print("Retiros:")
    print(
        fmt.details(
            [(state.value, str(await retreats.count_by_state(state))) for state in RetreatState]
            + [("Participantes totales", str(await retreats.total_participants()))]
        )
    )

    print("\nCategorias:")
    print(
        fmt.details(
            [(kind.value, str(await categories.count_by_kind(kind))) for kind in CategoryKind]
        )
    )

    totals = await transactions.calculate_global_balance()
    print("\nBalance global:")
    print(
        fmt.details(
            [
                ("Ingresos", fmt.money(totals.total_income)),
                ("Gastos", fmt.money(totals.total_expense)),
                ("Balance", fmt.money(totals.balance)),
                ("Transacciones", str(totals.transaction_count)),
            ]
        )
    )

    top = await transactions.get_top_categories_by_expense(args.top)
    if top:
        print("\nCategorias con mas gasto:")
        print(
            fmt.table(
                ["NOMBRE", "COLOR", "TOTAL"],
                [30, 7, 12],
                [(cat.name, cat.color, fmt.money(cat.total)) for cat in top],
            )
        )

    averages = await transactions.get_retreat_statistics()
    print("\nPromedios por retiro:")
    print(
        fmt.details(
            [
                ("Balance", fmt.money(averages.average_balance)),
                ("Ingresos", fmt.money(averages.average_income)),
                ("Gastos", fmt.money(averages.average_expense)),
                ("Retiros con gastos", str(averages.retreats_with_expenses)),
            ]
        )
    )

    recent = await retreats.get_recent_finished(args.recientes)
    if recent:
        rows = []
        for r in recent:
            summary = await transactions.get_retreat_balance(r.id)
            rows.append(
                (
                    fmt.truncate(r.name),
                    fmt.day(r.end_date),
                    str(r.participant_count),
                    fmt.money(summary.total_expense),
                    fmt.money(summary.balance),
                )
            )
        print("\nRetiros finalizados recientemente:")
        print(fmt.table(["NOMBRE", "FIN", "PART.", "GASTOS", "BALANCE"], [28, 10, 5, 12, 12], rows))


def register(subparsers: argparse._SubParsersAction) -> None:
    """Add the "estadisticas" command."""
    parser = subparsers.add_parser("estadisticas", help="Estadisticas generales")
    parser.add_argument("--top", type=int, default=DEFAULT_TOP_CATEGORIES)
    parser.add_argument("--recientes", type=int, default=DEFAULT_RECENT_FINISHED)
    parser.set_defaults(handler=estadisticas)
