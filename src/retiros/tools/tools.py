"""
MCP tool definitions for the retreat ledger.

These are the desktop-app commands: thin wrappers that parse JSON arguments,
call one repository operation and return JSON-ready dicts.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from retiros.config import DEFAULT_RECENT_FINISHED, DEFAULT_TOP_CATEGORIES
from retiros.core.database import Database
from retiros.core.exceptions import DateFormatError, InputValidationError, NotFoundError
from retiros.models.enums import CategoryKind, RetreatState, StoredLabel
from retiros.repositories import (
    CategoryRepository,
    RetreatRepository,
    TransactionRepository,
)
from retiros.utils.date_utils import parse_flexible_datetime, parse_user_datetime


def parse_id(value: str, label: str = "ID") -> UUID:
    """
    Parse a user supplied UUID.

    Raises:
        InputValidationError: If the text is not a UUID
    """
    try:
        return UUID(str(value))
    except ValueError:
        raise InputValidationError(f"Invalid {label}: {value}") from None


def parse_label(enum_cls, value: str, label: str) -> StoredLabel:
    """
    Parse a user supplied enum label ("Gasto", "Activo", ...).

    Raises:
        InputValidationError: If the label is not recognized
    """
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise InputValidationError(
            f"Invalid {label}: {value}. Expected one of: {choices}"
        ) from None


def parse_date_argument(value: Union[str, datetime]) -> datetime:
    """Accept RFC 3339, "YYYY-MM-DD HH:MM:SS" or "YYYY-MM-DD"."""
    if isinstance(value, datetime):
        return value
    try:
        return parse_flexible_datetime(value)
    except DateFormatError:
        return parse_user_datetime(value)


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


class RetirosTools:
    """Collection of MCP tools over the retreat ledger."""

    def __init__(self, database: Database):
        """
        Initialize tools with a database handle.

        All three repositories share the handle's connection pool.

        Args:
            database: Database instance
        """
        self.db = database
        self.categories = CategoryRepository(database)
        self.retreats = RetreatRepository(database)
        self.transactions = TransactionRepository(database)

    # =========================================================================
    # Categories
    # =========================================================================

    async def get_categorias(self, tipo: Optional[str] = None) -> Dict[str, Any]:
        """
        List categories ordered by name.

        Args:
            tipo: Optional kind filter ("Ingreso" or "Gasto")

        Returns:
            Dict with category count and list of categories
        """
        if tipo:
            kind = parse_label(CategoryKind, tipo, "tipo")
            categories = await self.categories.get_by_kind(kind)
        else:
            categories = await self.categories.get_all()

        return {
            "count": len(categories),
            "categorias": [_dump(cat) for cat in categories],
        }

    async def create_categoria(self, nombre: str, tipo: str, color: str) -> Dict[str, Any]:
        category = await self.categories.create(
            {"nombre": nombre, "tipo": tipo, "color": color}
        )
        return _dump(category)

    async def update_categoria(
        self, id: str, nombre: str, tipo: str, color: str
    ) -> Dict[str, Any]:
        """
        Overwrite a category.

        Raises:
            NotFoundError: If no category has this id
        """
        category_id = parse_id(id)
        category = await self.categories.update(
            category_id, {"nombre": nombre, "tipo": tipo, "color": color}
        )
        if category is None:
            raise NotFoundError("Categoria", category_id)
        return _dump(category)

    async def delete_categoria(self, id: str) -> Dict[str, Any]:
        category_id = parse_id(id)
        return {"id": str(category_id), "deleted": await self.categories.delete(category_id)}

    # =========================================================================
    # Retreats
    # =========================================================================

    async def get_retiros(self, estado: Optional[str] = None) -> Dict[str, Any]:
        """
        List retreats, most recent start date first.

        Args:
            estado: Optional state filter ("Planificacion", "Activo", "Finalizado")

        Returns:
            Dict with retreat count and list of retreats
        """
        if estado:
            state = parse_label(RetreatState, estado, "estado")
            retreats = await self.retreats.get_by_state(state)
        else:
            retreats = await self.retreats.get_all()

        return {
            "count": len(retreats),
            "retiros": [_dump(retreat) for retreat in retreats],
        }

    @staticmethod
    def _retreat_fields(
        nombre: str,
        fecha_inicio: Union[str, datetime],
        fecha_fin: Union[str, datetime],
        numero_participantes: int,
        descripcion: Optional[str],
        ubicacion: Optional[str],
    ) -> Dict[str, Any]:
        return {
            "nombre": nombre,
            "descripcion": descripcion,
            "fecha_inicio": parse_date_argument(fecha_inicio),
            "fecha_fin": parse_date_argument(fecha_fin),
            "ubicacion": ubicacion,
            "numero_participantes": numero_participantes,
        }

    async def create_retiro(
        self,
        nombre: str,
        fecha_inicio: str,
        fecha_fin: str,
        numero_participantes: int,
        descripcion: Optional[str] = None,
        ubicacion: Optional[str] = None,
    ) -> Dict[str, Any]:
        retreat = await self.retreats.create(
            self._retreat_fields(
                nombre, fecha_inicio, fecha_fin, numero_participantes, descripcion, ubicacion
            )
        )
        return _dump(retreat)

    async def update_retiro(
        self,
        id: str,
        nombre: str,
        fecha_inicio: str,
        fecha_fin: str,
        numero_participantes: int,
        descripcion: Optional[str] = None,
        ubicacion: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Overwrite the editable fields of a retreat (state is kept).

        Raises:
            NotFoundError: If no retreat has this id
        """
        retreat_id = parse_id(id)
        retreat = await self.retreats.update(
            retreat_id,
            self._retreat_fields(
                nombre, fecha_inicio, fecha_fin, numero_participantes, descripcion, ubicacion
            ),
        )
        if retreat is None:
            raise NotFoundError("Retiro", retreat_id)
        return _dump(retreat)

    async def update_retiro_estado(self, id: str, estado: str) -> Dict[str, Any]:
        """
        Change the state of a retreat.

        Raises:
            InputValidationError: If the state label is unknown
            NotFoundError: If no retreat has this id
        """
        retreat_id = parse_id(id)
        state = parse_label(RetreatState, estado, "estado")
        retreat = await self.retreats.update_state(retreat_id, state)
        if retreat is None:
            raise NotFoundError("Retiro", retreat_id)
        return _dump(retreat)

    async def delete_retiro(self, id: str) -> Dict[str, Any]:
        retreat_id = parse_id(id)
        return {"id": str(retreat_id), "deleted": await self.retreats.delete(retreat_id)}

    # =========================================================================
    # Transactions
    # =========================================================================

    async def get_transacciones(self, retiro_id: Optional[str] = None) -> Dict[str, Any]:
        """
        List the transactions of a retreat, most recent first.

        Without ``retiro_id`` the list is empty: transactions are only listed
        per retreat.
        """
        if not retiro_id:
            return {"count": 0, "transacciones": []}

        transactions = await self.transactions.get_by_retiro(parse_id(retiro_id, "retiro_id"))
        return {
            "count": len(transactions),
            "transacciones": [_dump(txn) for txn in transactions],
        }

    async def create_transaccion(
        self,
        retiro_id: str,
        categoria_id: str,
        tipo: str,
        monto: float,
        descripcion: str,
        fecha: Optional[str] = None,
    ) -> Dict[str, Any]:
        txn = await self.transactions.create(
            {
                "retiro_id": parse_id(retiro_id, "retiro_id"),
                "categoria_id": parse_id(categoria_id, "categoria_id"),
                "tipo": tipo,
                "monto": monto,
                "descripcion": descripcion,
                "fecha": parse_date_argument(fecha) if fecha else None,
            }
        )
        return _dump(txn)

    async def delete_transaccion(self, id: str) -> Dict[str, Any]:
        transaction_id = parse_id(id)
        return {
            "id": str(transaction_id),
            "deleted": await self.transactions.delete(transaction_id),
        }

    # =========================================================================
    # Balance and statistics
    # =========================================================================

    async def get_balance_retiro(self, retiro_id: str) -> Dict[str, Any]:
        """
        Income, expense, balance and transaction count of one retreat.

        Returns:
            Dict with retiro_id, balance, total_ingresos, total_gastos and
            transacciones_count
        """
        summary = await self.transactions.get_retreat_balance(parse_id(retiro_id, "retiro_id"))
        return {
            "retiro_id": str(summary.retreat_id),
            "balance": round(summary.balance, 2),
            "total_ingresos": round(summary.total_income, 2),
            "total_gastos": round(summary.total_expense, 2),
            "transacciones_count": summary.transaction_count,
        }

    async def _with_balance(self, retreat) -> Dict[str, Any]:
        summary = await self.transactions.get_retreat_balance(retreat.id)
        return {
            **_dump(retreat),
            "total_gastos": round(summary.total_expense, 2),
            "balance": round(summary.balance, 2),
        }

    async def get_estadisticas(
        self,
        top: int = DEFAULT_TOP_CATEGORIES,
        recientes: int = DEFAULT_RECENT_FINISHED,
    ) -> Dict[str, Any]:
        """
        Ledger-wide statistics.

        Args:
            top: Number of expense categories to include
            recientes: Number of recently finished retreats to include

        Returns:
            Dict with global totals, participant total, per-state retreat
            counts, top expense categories, per-retreat averages and recently
            finished retreats with their total_gastos and balance
        """
        global_balance = await self.transactions.calculate_global_balance()
        top_categories = await self.transactions.get_top_categories_by_expense(top)
        averages = await self.transactions.get_retreat_statistics()
        recent = await self.retreats.get_recent_finished(recientes)

        return {
            "global": global_balance.model_dump(mode="json"),
            "participantes_total": await self.retreats.total_participants(),
            "retiros_por_estado": {
                state.value: await self.retreats.count_by_state(state)
                for state in RetreatState
            },
            "categorias_por_tipo": {
                kind.value: await self.categories.count_by_kind(kind)
                for kind in CategoryKind
            },
            "top_categorias_gasto": [cat.model_dump(mode="json") for cat in top_categories],
            "promedios": averages.model_dump(mode="json"),
            "retiros_finalizados_recientes": [
                await self._with_balance(retreat) for retreat in recent
            ],
        }


def create_tool_schemas() -> List[Dict[str, Any]]:
    """
    Create MCP tool schemas for all tools.

    Returns:
        List of tool schema definitions
    """
    id_property = {"type": "string", "description": "Record UUID"}
    category_properties = {
        "nombre": {"type": "string", "description": "Category name (1-100 chars)"},
        "tipo": {"type": "string", "enum": ["Ingreso", "Gasto"]},
        "color": {
            "type": "string",
            "description": "Color as #RRGGBB",
            "pattern": r"^#.{6}$",
        },
    }
    retreat_properties = {
        "nombre": {"type": "string", "description": "Retreat name (1-200 chars)"},
        "descripcion": {"type": "string", "description": "Optional description (max 500 chars)"},
        "fecha_inicio": {
            "type": "string",
            "description": "Start date (RFC 3339, YYYY-MM-DD HH:MM:SS or YYYY-MM-DD)",
        },
        "fecha_fin": {
            "type": "string",
            "description": "End date (RFC 3339, YYYY-MM-DD HH:MM:SS or YYYY-MM-DD)",
        },
        "ubicacion": {"type": "string", "description": "Optional location (max 200 chars)"},
        "numero_participantes": {"type": "integer", "minimum": 1},
    }
    retreat_required = ["nombre", "fecha_inicio", "fecha_fin", "numero_participantes"]

    return [
        {
            "name": "get_categorias",
            "description": "List categories ordered by name, optionally filtered by tipo.",
            "inputSchema": {
                "type": "object",
                "properties": {"tipo": category_properties["tipo"]},
            },
        },
        {
            "name": "create_categoria",
            "description": "Create an income or expense category.",
            "inputSchema": {
                "type": "object",
                "properties": category_properties,
                "required": ["nombre", "tipo", "color"],
            },
        },
        {
            "name": "update_categoria",
            "description": "Overwrite the name, tipo and color of a category.",
            "inputSchema": {
                "type": "object",
                "properties": {"id": id_property, **category_properties},
                "required": ["id", "nombre", "tipo", "color"],
            },
        },
        {
            "name": "delete_categoria",
            "description": "Delete a category. Fails while transactions still use it.",
            "inputSchema": {
                "type": "object",
                "properties": {"id": id_property},
                "required": ["id"],
            },
        },
        {
            "name": "get_retiros",
            "description": "List retreats by start date (latest first), optionally filtered by estado.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "estado": {
                        "type": "string",
                        "enum": ["Planificacion", "Activo", "Finalizado"],
                    },
                },
            },
        },
        {
            "name": "create_retiro",
            "description": "Create a retreat. New retreats start in Planificacion.",
            "inputSchema": {
                "type": "object",
                "properties": retreat_properties,
                "required": retreat_required,
            },
        },
        {
            "name": "update_retiro",
            "description": "Overwrite the editable fields of a retreat. The estado is kept.",
            "inputSchema": {
                "type": "object",
                "properties": {"id": id_property, **retreat_properties},
                "required": ["id", *retreat_required],
            },
        },
        {
            "name": "update_retiro_estado",
            "description": "Change the estado of a retreat. Any estado may follow any other.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "id": id_property,
                    "estado": {
                        "type": "string",
                        "enum": ["Planificacion", "Activo", "Finalizado"],
                    },
                },
                "required": ["id", "estado"],
            },
        },
        {
            "name": "delete_retiro",
            "description": "Delete a retreat together with its transactions.",
            "inputSchema": {
                "type": "object",
                "properties": {"id": id_property},
                "required": ["id"],
            },
        },
        {
            "name": "get_transacciones",
            "description": (
                "List the transactions of a retreat, latest first. "
                "Returns an empty list when retiro_id is omitted."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {"retiro_id": id_property},
            },
        },
        {
            "name": "create_transaccion",
            "description": "Record an income or expense against a retreat.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "retiro_id": id_property,
                    "categoria_id": id_property,
                    "tipo": {"type": "string", "enum": ["Ingreso", "Gasto"]},
                    "monto": {"type": "number", "exclusiveMinimum": 0},
                    "descripcion": {"type": "string", "description": "1-300 chars"},
                    "fecha": {
                        "type": "string",
                        "description": "When it happened (defaults to now)",
                    },
                },
                "required": ["retiro_id", "categoria_id", "tipo", "monto", "descripcion"],
            },
        },
        {
            "name": "delete_transaccion",
            "description": "Delete a transaction.",
            "inputSchema": {
                "type": "object",
                "properties": {"id": id_property},
                "required": ["id"],
            },
        },
        {
            "name": "get_balance_retiro",
            "description": "Income, expenses, balance and transaction count of a retreat.",
            "inputSchema": {
                "type": "object",
                "properties": {"retiro_id": id_property},
                "required": ["retiro_id"],
            },
        },
        {
            "name": "get_estadisticas",
            "description": (
                "Ledger-wide totals, top expense categories, per-retreat averages "
                "and recently finished retreats."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "top": {
                        "type": "integer",
                        "description": f"Number of expense categories (default: {DEFAULT_TOP_CATEGORIES})",
                        "default": DEFAULT_TOP_CATEGORIES,
                    },
                    "recientes": {
                        "type": "integer",
                        "description": f"Number of finished retreats (default: {DEFAULT_RECENT_FINISHED})",
                        "default": DEFAULT_RECENT_FINISHED,
                    },
                },
            },
        },
    ]
