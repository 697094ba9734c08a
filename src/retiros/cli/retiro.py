"""
"retiro" subcommands: manage retreats and their lifecycle state.
"""

import argparse
from typing import List

from retiros.cli import formatting as fmt
from retiros.core.database import Database
from retiros.core.exceptions import NotFoundError
from retiros.models.enums import RetreatState
from retiros.models.retreat import Retreat
from retiros.repositories import RetreatRepository
from retiros.tools.tools import parse_id, parse_label
from retiros.utils.date_utils import parse_user_datetime

STATE_CHOICES = [state.value for state in RetreatState]


def _show(retreat: Retreat) -> None:
    print(
        fmt.details(
            [
                ("ID", str(retreat.id)),
                ("Nombre", retreat.name),
                ("Descripcion", fmt.or_default(retreat.description)),
                ("Fecha inicio", fmt.day(retreat.start_date)),
                ("Fecha fin", fmt.day(retreat.end_date)),
                ("Ubicacion", fmt.or_default(retreat.location)),
                ("Participantes", str(retreat.participant_count)),
                ("Estado", retreat.state.value),
                ("Creado", fmt.timestamp(retreat.created_at)),
                ("Actualizado", fmt.timestamp(retreat.updated_at)),
            ]
        )
    )


def _print_table(retreats: List[Retreat]) -> None:
    print(
        fmt.table(
            ["ID", "NOMBRE", "INICIO", "FIN", "PART.", "ESTADO"],
            [36, 28, 10, 10, 5, 13],
            [
                (
                    str(r.id),
                    fmt.truncate(r.name),
                    fmt.day(r.start_date),
                    fmt.day(r.end_date),
                    str(r.participant_count),
                    r.state.value,
                )
                for r in retreats
            ],
        )
    )
    print(f"\nTotal: {len(retreats)}")


async def _require(repo: RetreatRepository, raw_id: str) -> Retreat:
    retreat_id = parse_id(raw_id)
    retreat = await repo.get_by_id(retreat_id)
    if retreat is None:
        raise NotFoundError("Retiro", retreat_id)
    return retreat


async def crear(args: argparse.Namespace, db: Database) -> None:
    repo = RetreatRepository(db)
    retreat = await repo.create(
        {
            "nombre": args.nombre,
            "descripcion": args.descripcion,
            "fecha_inicio": parse_user_datetime(args.fecha_inicio),
            "fecha_fin": parse_user_datetime(args.fecha_fin),
            "ubicacion": args.ubicacion,
            "numero_participantes": args.participantes,
        }
    )
    print("Retiro creado.")
    _show(retreat)


async def listar(args: argparse.Namespace, db: Database) -> None:
    repo = RetreatRepository(db)
    if args.estado:
        retreats = await repo.get_by_state(parse_label(RetreatState, args.estado, "estado"))
    else:
        retreats = await repo.get_all()

    if not retreats:
        print("No se encontraron retiros.")
        return
    _print_table(retreats)


async def mostrar(args: argparse.Namespace, db: Database) -> None:
    _show(await _require(RetreatRepository(db), args.id))


async def actualizar(args: argparse.Namespace, db: Database) -> None:
    repo = RetreatRepository(db)
    current = await _require(repo, args.id)

    merged = {
        "nombre": args.nombre if args.nombre is not None else current.name,
        "descripcion": (
            args.descripcion if args.descripcion is not None else current.description
        ),
        "fecha_inicio": (
            parse_user_datetime(args.fecha_inicio)
            if args.fecha_inicio is not None
            else current.start_date
        ),
        "fecha_fin": (
            parse_user_datetime(args.fecha_fin)
            if args.fecha_fin is not None
            else current.end_date
        ),
        "ubicacion": args.ubicacion if args.ubicacion is not None else current.location,
        "numero_participantes": (
            args.participantes
            if args.participantes is not None
            else current.participant_count
        ),
    }
    retreat = await repo.update(current.id, merged)
    if retreat is None:
        raise NotFoundError("Retiro", current.id)

    print("Retiro actualizado.")
    _show(retreat)


async def estado(args: argparse.Namespace, db: Database) -> None:
    repo = RetreatRepository(db)
    retreat_id = parse_id(args.id)
    state = parse_label(RetreatState, args.estado, "estado")

    retreat = await repo.update_state(retreat_id, state)
    if retreat is None:
        raise NotFoundError("Retiro", retreat_id)
    print(f"Estado del retiro '{retreat.name}' cambiado a {retreat.state.value}.")


async def eliminar(args: argparse.Namespace, db: Database) -> None:
    repo = RetreatRepository(db)
    retreat = await _require(repo, args.id)

    if not args.force:
        print("Seguro que quieres eliminar este retiro?")
        print(fmt.details([("Nombre", retreat.name), ("Estado", retreat.state.value)]))
        print("Tambien se eliminaran todas sus transacciones.")
        print("Usa --force para confirmar la eliminacion.")
        return

    if not await repo.delete(retreat.id):
        raise NotFoundError("Retiro", retreat.id)
    print("Retiro eliminado.")


async def buscar(args: argparse.Namespace, db: Database) -> None:
    retreats = await RetreatRepository(db).search_by_name(args.query)
    if not retreats:
        print(f"No se encontraron retiros que coincidan con '{args.query}'.")
        return
    _print_table(retreats)


def _add_retreat_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("-n", "--nombre", required=required)
    parser.add_argument("-d", "--descripcion")
    parser.add_argument(
        "--fecha-inicio",
        dest="fecha_inicio",
        required=required,
        help="YYYY-MM-DD o YYYY-MM-DD HH:MM:SS",
    )
    parser.add_argument(
        "--fecha-fin",
        dest="fecha_fin",
        required=required,
        help="YYYY-MM-DD o YYYY-MM-DD HH:MM:SS",
    )
    parser.add_argument("-u", "--ubicacion")
    parser.add_argument("-p", "--participantes", type=int, required=required)


def register(subparsers: argparse._SubParsersAction) -> None:
    """Add the "retiro" command tree."""
    parser = subparsers.add_parser("retiro", help="Gestion de retiros")
    commands = parser.add_subparsers(dest="action", required=True)

    create = commands.add_parser("crear", help="Crear un nuevo retiro")
    _add_retreat_fields(create, required=True)
    create.set_defaults(handler=crear)

    listing = commands.add_parser("listar", help="Listar retiros")
    listing.add_argument("-e", "--estado", choices=STATE_CHOICES)
    listing.set_defaults(handler=listar)

    show = commands.add_parser("mostrar", help="Mostrar un retiro")
    show.add_argument("id")
    show.set_defaults(handler=mostrar)

    edit = commands.add_parser("actualizar", help="Actualizar un retiro")
    edit.add_argument("id")
    _add_retreat_fields(edit, required=False)
    edit.set_defaults(handler=actualizar)

    state = commands.add_parser("estado", help="Cambiar el estado de un retiro")
    state.add_argument("id")
    state.add_argument("estado", choices=STATE_CHOICES)
    state.set_defaults(handler=estado)

    remove = commands.add_parser("eliminar", help="Eliminar un retiro y sus transacciones")
    remove.add_argument("id")
    remove.add_argument("-f", "--force", action="store_true")
    remove.set_defaults(handler=eliminar)

    search = commands.add_parser("buscar", help="Buscar retiros por nombre")
    search.add_argument("query")
    search.set_defaults(handler=buscar)
