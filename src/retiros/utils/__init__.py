"""
Utility functions for the retreat ledger.
"""

from retiros.utils.date_utils import (
    parse_flexible_datetime,
    parse_user_datetime,
    to_rfc3339,
    utc_now,
)

__all__ = [
    "parse_flexible_datetime",
    "parse_user_datetime",
    "to_rfc3339",
    "utc_now",
]
