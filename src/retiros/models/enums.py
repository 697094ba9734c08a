"""
Enumerations stored as text labels.

The labels are part of the on-disk format and must round-trip exactly.
"""

from enum import Enum

from retiros.core.exceptions import DataIntegrityError


class StoredLabel(str, Enum):
    """Base for enums persisted by their label."""

    @classmethod
    def from_label(cls, label: str):
        """
        Map a stored label back to its member.

        Raises:
            DataIntegrityError: If the label is not one of the known values
        """
        try:
            return cls(label)
        except ValueError:
            raise DataIntegrityError(
                f"Invalid {cls.__name__} label: {label!r}"
            ) from None

    def __str__(self) -> str:
        return self.value


class CategoryKind(StoredLabel):
    INCOME = "Ingreso"
    EXPENSE = "Gasto"


class TransactionKind(StoredLabel):
    INCOME = "Ingreso"
    EXPENSE = "Gasto"


class RetreatState(StoredLabel):
    PLANNING = "Planificacion"
    ACTIVE = "Activo"
    FINISHED = "Finalizado"
