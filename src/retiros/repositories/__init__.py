"""
Repositories over the three ledger tables.

Each repository is constructed with the caller's shared engine (or Database).
"""

from retiros.repositories.category import CategoryRepository
from retiros.repositories.retreat import RetreatRepository
from retiros.repositories.transaction import TransactionRepository

__all__ = [
    "CategoryRepository",
    "RetreatRepository",
    "TransactionRepository",
]
