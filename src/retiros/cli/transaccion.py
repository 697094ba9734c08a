"""
"transaccion" subcommands: record income and expenses against a retreat.
"""

import argparse

from retiros.cli import formatting as fmt
from retiros.config import DEFAULT_TRANSACTION_LIST_LIMIT
from retiros.core.database import Database
from retiros.core.exceptions import NotFoundError
from retiros.models.enums import TransactionKind
from retiros.models.transaction import Transaction
from retiros.repositories import (
    CategoryRepository,
    RetreatRepository,
    TransactionRepository,
)
from retiros.tools.tools import parse_id, parse_label
from retiros.utils.date_utils import parse_user_datetime

KIND_CHOICES = [kind.value for kind in TransactionKind]


def balance_label(balance: float) -> str:
    """Describe the sign of a balance."""
    if balance > 0:
        return "Superavit"
    if balance < 0:
        return "Deficit"
    return "Equilibrado"


def _show(txn: Transaction) -> None:
    print(
        fmt.details(
            [
                ("ID", str(txn.id)),
                ("Retiro", str(txn.retreat_id)),
                ("Categoria", str(txn.category_id)),
                ("Tipo", txn.kind.value),
                ("Monto", fmt.money(txn.amount)),
                ("Descripcion", txn.description),
                ("Fecha", fmt.timestamp(txn.occurred_at)),
                ("Creado", fmt.timestamp(txn.created_at)),
            ]
        )
    )


async def crear(args: argparse.Namespace, db: Database) -> None:
    retreat_id = parse_id(args.retiro_id, "retiro_id")
    category_id = parse_id(args.categoria_id, "categoria_id")

    # Friendlier message than the foreign key failure
    if await RetreatRepository(db).get_by_id(retreat_id) is None:
        raise NotFoundError("Retiro", retreat_id)
    if await CategoryRepository(db).get_by_id(category_id) is None:
        raise NotFoundError("Categoria", category_id)

    txn = await TransactionRepository(db).create(
        {
            "retiro_id": retreat_id,
            "categoria_id": category_id,
            "tipo": args.tipo,
            "monto": args.monto,
            "descripcion": args.descripcion,
            "fecha": parse_user_datetime(args.fecha) if args.fecha else None,
        }
    )
    print("Transaccion creada.")
    _show(txn)


async def listar(args: argparse.Namespace, db: Database) -> None:
    retreat_id = parse_id(args.retiro_id, "retiro_id")
    retreat = await RetreatRepository(db).get_by_id(retreat_id)
    if retreat is None:
        raise NotFoundError("Retiro", retreat_id)

    transactions = await TransactionRepository(db).get_by_retiro(retreat_id)
    if args.tipo:
        kind = parse_label(TransactionKind, args.tipo, "tipo")
        transactions = [txn for txn in transactions if txn.kind == kind]

    if not transactions:
        print(f"No hay transacciones para el retiro '{retreat.name}'.")
        return

    shown = transactions[: args.limit]
    print(f"Transacciones del retiro '{retreat.name}':")
    print(
        fmt.table(
            ["ID", "FECHA", "TIPO", "MONTO", "DESCRIPCION"],
            [36, 10, 8, 12, 28],
            [
                (
                    str(txn.id),
                    fmt.day(txn.occurred_at),
                    txn.kind.value,
                    fmt.money(txn.amount),
                    fmt.truncate(txn.description),
                )
                for txn in shown
            ],
        )
    )
    if len(transactions) > len(shown):
        print(f"\nMostrando {len(shown)} de {len(transactions)} transacciones.")

    income = sum(t.amount for t in transactions if t.kind == TransactionKind.INCOME)
    expense = sum(t.amount for t in transactions if t.kind == TransactionKind.EXPENSE)
    print("\nResumen:")
    print(
        fmt.details(
            [
                ("Ingresos", fmt.money(income)),
                ("Gastos", fmt.money(expense)),
                ("Balance", fmt.money(income - expense)),
            ]
        )
    )


async def mostrar(args: argparse.Namespace, db: Database) -> None:
    transaction_id = parse_id(args.id)
    txn = await TransactionRepository(db).get_by_id(transaction_id)
    if txn is None:
        raise NotFoundError("Transaccion", transaction_id)
    _show(txn)


async def eliminar(args: argparse.Namespace, db: Database) -> None:
    repo = TransactionRepository(db)
    transaction_id = parse_id(args.id)
    txn = await repo.get_by_id(transaction_id)
    if txn is None:
        raise NotFoundError("Transaccion", transaction_id)

    if not args.force:
        print("Seguro que quieres eliminar esta transaccion?")
        print(
            fmt.details(
                [
                    ("Tipo", txn.kind.value),
                    ("Monto", fmt.money(txn.amount)),
                    ("Descripcion", txn.description),
                ]
            )
        )
        print("Usa --force para confirmar la eliminacion.")
        return

    if not await repo.delete(transaction_id):
        raise NotFoundError("Transaccion", transaction_id)
    print("Transaccion eliminada.")


async def balance(args: argparse.Namespace, db: Database) -> None:
    retreat_id = parse_id(args.retiro_id, "retiro_id")
    retreat = await RetreatRepository(db).get_by_id(retreat_id)
    if retreat is None:
        raise NotFoundError("Retiro", retreat_id)

    summary = await TransactionRepository(db).get_retreat_balance(retreat_id)
    print(f"Balance del retiro '{retreat.name}':")
    print(
        fmt.details(
            [
                ("Ingresos", fmt.money(summary.total_income)),
                ("Gastos", fmt.money(summary.total_expense)),
                ("Balance", fmt.money(summary.balance)),
                ("Transacciones", str(summary.transaction_count)),
                ("Resultado", balance_label(summary.balance)),
            ]
        )
    )
    if retreat.participant_count > 0 and summary.total_expense > 0:
        per_head = summary.total_expense / retreat.participant_count
        print(f"   Gasto por participante: {fmt.money(per_head)}")


def register(subparsers: argparse._SubParsersAction) -> None:
    """Add the "transaccion" command tree."""
    parser = subparsers.add_parser("transaccion", help="Gestion de transacciones")
    commands = parser.add_subparsers(dest="action", required=True)

    create = commands.add_parser("crear", help="Registrar una transaccion")
    create.add_argument("-r", "--retiro-id", dest="retiro_id", required=True)
    create.add_argument("-c", "--categoria-id", dest="categoria_id", required=True)
    create.add_argument("-t", "--tipo", required=True, choices=KIND_CHOICES)
    create.add_argument("-m", "--monto", type=float, required=True)
    create.add_argument("-d", "--descripcion", required=True)
    create.add_argument("--fecha", help="YYYY-MM-DD o YYYY-MM-DD HH:MM:SS (por defecto ahora)")
    create.set_defaults(handler=crear)

    listing = commands.add_parser("listar", help="Listar transacciones de un retiro")
    listing.add_argument("-r", "--retiro-id", dest="retiro_id", required=True)
    listing.add_argument("-t", "--tipo", choices=KIND_CHOICES)
    listing.add_argument("-l", "--limit", type=int, default=DEFAULT_TRANSACTION_LIST_LIMIT)
    listing.set_defaults(handler=listar)

    show = commands.add_parser("mostrar", help="Mostrar una transaccion")
    show.add_argument("id")
    show.set_defaults(handler=mostrar)

    remove = commands.add_parser("eliminar", help="Eliminar una transaccion")
    remove.add_argument("id")
    remove.add_argument("-f", "--force", action="store_true")
    remove.set_defaults(handler=eliminar)

    summary = commands.add_parser("balance", help="Balance de un retiro")
    summary.add_argument("retiro_id")
    summary.set_defaults(handler=balance)
