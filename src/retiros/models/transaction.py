"""
Transaction model for money moving in or out of a retreat.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from retiros.models.enums import TransactionKind
from retiros.utils.date_utils import ensure_utc, utc_now


class TransactionCreate(BaseModel):
    """
    Input for recording a transaction.

    ``kind`` is independent of the referenced category's kind; the two are
    not cross-checked.
    """

    model_config = {"strict": True, "populate_by_name": True}

    retreat_id: UUID = Field(alias="retiro_id")
    category_id: UUID = Field(alias="categoria_id")
    kind: TransactionKind = Field(alias="tipo")
    amount: float = Field(alias="monto", gt=0, allow_inf_nan=False)
    description: str = Field(alias="descripcion", min_length=1, max_length=300)
    occurred_at: Optional[datetime] = Field(default=None, alias="fecha")

    @field_validator("occurred_at")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None


class Transaction(BaseModel):
    """
    A recorded income or expense against a retreat.

    Read-only after creation apart from deletion.
    """

    model_config = {"strict": True, "populate_by_name": True}

    id: UUID
    retreat_id: UUID = Field(alias="retiro_id")
    category_id: UUID = Field(alias="categoria_id")
    kind: TransactionKind = Field(alias="tipo")
    amount: float = Field(alias="monto", gt=0, allow_inf_nan=False)
    description: str = Field(alias="descripcion", min_length=1, max_length=300)
    occurred_at: datetime = Field(alias="fecha")
    created_at: datetime
    updated_at: datetime

    @field_validator("occurred_at", "created_at", "updated_at")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @classmethod
    def new(cls, data: TransactionCreate) -> "Transaction":
        """Build a transaction, defaulting ``occurred_at`` to now."""
        now = utc_now()
        return cls(
            id=uuid4(),
            retreat_id=data.retreat_id,
            category_id=data.category_id,
            kind=data.kind,
            amount=data.amount,
            description=data.description,
            occurred_at=data.occurred_at or now,
            created_at=now,
            updated_at=now,
        )
