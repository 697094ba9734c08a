"""
Aggregation results returned by the transaction repository.
"""

from uuid import UUID

from pydantic import BaseModel, computed_field


class RetreatBalance(BaseModel):
    """Income, expense and transaction count for one retreat."""

    retreat_id: UUID
    total_income: float = 0.0
    total_expense: float = 0.0
    transaction_count: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def balance(self) -> float:
        """Income minus expenses."""
        return self.total_income - self.total_expense


class GlobalBalance(BaseModel):
    """Totals across every retreat."""

    total_income: float = 0.0
    total_expense: float = 0.0
    transaction_count: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def balance(self) -> float:
        """Income minus expenses."""
        return self.total_income - self.total_expense


class CategoryTotal(BaseModel):
    """Summed expense amount for one category."""

    name: str
    color: str
    total: float


class RetreatStatistics(BaseModel):
    """
    Per-retreat averages.

    Each average only counts retreats that have at least one transaction of
    the relevant kind (any kind, for the balance average).
    """

    average_balance: float = 0.0
    average_income: float = 0.0
    average_expense: float = 0.0
    retreats_with_expenses: int = 0
