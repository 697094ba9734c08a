"""
Retreat model.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from retiros.models.enums import RetreatState
from retiros.utils.date_utils import ensure_utc, utc_now


class RetreatCreate(BaseModel):
    """
    Input for creating a retreat or overwriting its editable fields.

    Dates are normalized to UTC. No ordering between start and end is enforced.
    """

    model_config = {"strict": True, "populate_by_name": True}

    name: str = Field(alias="nombre", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, alias="descripcion", max_length=500)
    start_date: datetime = Field(alias="fecha_inicio")
    end_date: datetime = Field(alias="fecha_fin")
    location: Optional[str] = Field(default=None, alias="ubicacion", max_length=200)
    participant_count: int = Field(alias="numero_participantes", ge=1)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Retreat(BaseModel):
    """
    A retreat event and its lifecycle state.

    ``state`` starts at PLANNING and only changes through an explicit state
    update; any state may replace any other.
    """

    model_config = {"strict": True, "populate_by_name": True}

    id: UUID
    name: str = Field(alias="nombre", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, alias="descripcion", max_length=500)
    start_date: datetime = Field(alias="fecha_inicio")
    end_date: datetime = Field(alias="fecha_fin")
    location: Optional[str] = Field(default=None, alias="ubicacion", max_length=200)
    participant_count: int = Field(alias="numero_participantes", ge=1)
    state: RetreatState = Field(default=RetreatState.PLANNING, alias="estado")
    created_at: datetime
    updated_at: datetime

    @field_validator("start_date", "end_date", "created_at", "updated_at")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @classmethod
    def new(cls, data: RetreatCreate) -> "Retreat":
        """Build a retreat in PLANNING state stamped with the current time."""
        now = utc_now()
        return cls(
            id=uuid4(),
            name=data.name,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            location=data.location,
            participant_count=data.participant_count,
            state=RetreatState.PLANNING,
            created_at=now,
            updated_at=now,
        )
