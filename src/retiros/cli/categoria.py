"""
"categoria" subcommands: create, list, show, update and delete categories.
"""

import argparse

from retiros.cli import formatting as fmt
from retiros.core.database import Database
from retiros.core.exceptions import NotFoundError
from retiros.models.category import Category
from retiros.models.enums import CategoryKind
from retiros.repositories import CategoryRepository
from retiros.tools.tools import parse_id, parse_label

KIND_CHOICES = [kind.value for kind in CategoryKind]


def _show(category: Category) -> None:
    print(
        fmt.details(
            [
                ("ID", str(category.id)),
                ("Nombre", category.name),
                ("Tipo", category.kind.value),
                ("Color", category.color),
            ]
        )
    )


async def crear(args: argparse.Namespace, db: Database) -> None:
    repo = CategoryRepository(db)
    category = await repo.create(
        {"nombre": args.nombre, "tipo": args.tipo, "color": args.color}
    )
    print("Categoria creada.")
    _show(category)


async def listar(args: argparse.Namespace, db: Database) -> None:
    repo = CategoryRepository(db)
    if args.tipo:
        categories = await repo.get_by_kind(parse_label(CategoryKind, args.tipo, "tipo"))
    else:
        categories = await repo.get_all()

    if not categories:
        print("No se encontraron categorias.")
        return

    print(
        fmt.table(
            ["ID", "NOMBRE", "TIPO", "COLOR"],
            [36, 30, 8, 7],
            [(str(c.id), c.name, c.kind.value, c.color) for c in categories],
        )
    )
    print(f"\nTotal: {len(categories)}")


async def mostrar(args: argparse.Namespace, db: Database) -> None:
    repo = CategoryRepository(db)
    category_id = parse_id(args.id)
    category = await repo.get_by_id(category_id)
    if category is None:
        raise NotFoundError("Categoria", category_id)
    _show(category)


async def actualizar(args: argparse.Namespace, db: Database) -> None:
    repo = CategoryRepository(db)
    category_id = parse_id(args.id)

    current = await repo.get_by_id(category_id)
    if current is None:
        raise NotFoundError("Categoria", category_id)

    merged = {
        "nombre": args.nombre if args.nombre is not None else current.name,
        "tipo": args.tipo if args.tipo is not None else current.kind.value,
        "color": args.color if args.color is not None else current.color,
    }
    category = await repo.update(category_id, merged)
    if category is None:
        raise NotFoundError("Categoria", category_id)

    print("Categoria actualizada.")
    _show(category)


async def eliminar(args: argparse.Namespace, db: Database) -> None:
    repo = CategoryRepository(db)
    category_id = parse_id(args.id)

    category = await repo.get_by_id(category_id)
    if category is None:
        raise NotFoundError("Categoria", category_id)

    if not args.force:
        print("Seguro que quieres eliminar esta categoria?")
        print(fmt.details([("Nombre", category.name), ("Tipo", category.kind.value)]))
        print("Las categorias usadas por transacciones no se pueden eliminar.")
        print("Usa --force para confirmar la eliminacion.")
        return

    if not await repo.delete(category_id):
        raise NotFoundError("Categoria", category_id)
    print("Categoria eliminada.")


def register(subparsers: argparse._SubParsersAction) -> None:
    """Add the "categoria" command tree."""
    parser = subparsers.add_parser("categoria", help="Gestion de categorias de ingresos y gastos")
    commands = parser.add_subparsers(dest="action", required=True)

    create = commands.add_parser("crear", help="Crear una nueva categoria")
    create.add_argument("-n", "--nombre", required=True)
    create.add_argument("-t", "--tipo", required=True, choices=KIND_CHOICES)
    create.add_argument("-c", "--color", required=True, help="Color hexadecimal, ej: #FF5733")
    create.set_defaults(handler=crear)

    listing = commands.add_parser("listar", help="Listar categorias")
    listing.add_argument("-t", "--tipo", choices=KIND_CHOICES)
    listing.set_defaults(handler=listar)

    show = commands.add_parser("mostrar", help="Mostrar una categoria")
    show.add_argument("id")
    show.set_defaults(handler=mostrar)

    edit = commands.add_parser("actualizar", help="Actualizar una categoria")
    edit.add_argument("id")
    edit.add_argument("-n", "--nombre")
    edit.add_argument("-t", "--tipo", choices=KIND_CHOICES)
    edit.add_argument("-c", "--color")
    edit.set_defaults(handler=actualizar)

    remove = commands.add_parser("eliminar", help="Eliminar una categoria")
    remove.add_argument("id")
    remove.add_argument("-f", "--force", action="store_true")
    remove.set_defaults(handler=eliminar)

