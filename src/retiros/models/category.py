"""
Category model for income and expense classification.
"""

from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from retiros.models.enums import CategoryKind


def _check_color(value: str) -> str:
    if not value.startswith("#"):
        raise ValueError("color must use the #RRGGBB format")
    return value


class CategoryCreate(BaseModel):
    """Input for creating or overwriting a category."""

    model_config = {"strict": True, "populate_by_name": True}

    name: str = Field(alias="nombre", min_length=1, max_length=100)
    kind: CategoryKind = Field(alias="tipo")
    color: str = Field(min_length=7, max_length=7)  # #RRGGBB

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _check_color(v)


class Category(BaseModel):
    """
    A named income or expense category with a display color.
    """

    model_config = {"strict": True, "populate_by_name": True}

    id: UUID
    name: str = Field(alias="nombre", min_length=1, max_length=100)
    kind: CategoryKind = Field(alias="tipo")
    color: str = Field(min_length=7, max_length=7)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _check_color(v)

    @classmethod
    def new(cls, data: CategoryCreate) -> "Category":
        """Build a category with a freshly assigned id."""
        return cls(id=uuid4(), name=data.name, kind=data.kind, color=data.color)
