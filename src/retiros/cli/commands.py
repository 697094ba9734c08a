"""
Argument parsing and dispatch for the ``retiros`` command line.

Each subcommand module registers its parsers and stores an async
``handler(args, db)`` on the namespace; ``run_command`` opens the database
and awaits it.
"""

import argparse
import logging
import sys
from typing import List, Optional

from retiros.cli import categoria, estadisticas, retiro, transaccion
from retiros.config import VERSION
from retiros.core.database import Database
from retiros.core.exceptions import NotFoundError, RetirosError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retiros",
        description="Gestion financiera de retiros: categorias, retiros y transacciones",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "--database-url",
        help="Database URL (default: $DATABASE_URL or sqlite:./retiros.db)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    categoria.register(subparsers)
    retiro.register(subparsers)
    transaccion.register(subparsers)
    estadisticas.register(subparsers)
    subparsers.add_parser("servidor", help="Run the MCP server over stdio")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


async def run_command(args: argparse.Namespace) -> int:
    """
    Run one subcommand against the configured database.

    Returns:
        Process exit code: 0 on success, 1 when a ledger error was reported
    """
    try:
        async with Database(args.database_url) as db:
            await db.init_schema()
            await args.handler(args, db)
    except NotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except RetirosError as e:
        logger.debug(f"Command {args.command} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
