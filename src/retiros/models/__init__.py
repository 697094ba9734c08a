"""
Pydantic models for the retreat ledger.
"""

from retiros.models.category import Category, CategoryCreate
from retiros.models.enums import CategoryKind, RetreatState, TransactionKind
from retiros.models.retreat import Retreat, RetreatCreate
from retiros.models.stats import (
    CategoryTotal,
    GlobalBalance,
    RetreatBalance,
    RetreatStatistics,
)
from retiros.models.transaction import Transaction, TransactionCreate
from retiros.models.validation import validate_input

__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryKind",
    "Retreat",
    "RetreatCreate",
    "RetreatState",
    "Transaction",
    "TransactionCreate",
    "TransactionKind",
    "RetreatBalance",
    "GlobalBalance",
    "CategoryTotal",
    "RetreatStatistics",
    "validate_input",
]
