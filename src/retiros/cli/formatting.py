"""
Plain-text rendering helpers for the command line.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence

from retiros.config import DESCRIPTION_DISPLAY_WIDTH


def money(amount: float) -> str:
    return f"€{amount:.2f}"


def day(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")


def truncate(text: str, width: int = DESCRIPTION_DISPLAY_WIDTH) -> str:
    """Shorten text to ``width`` characters, ending in "..." when cut."""
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def or_default(value: Optional[str], default: str = "N/A") -> str:
    return value if value else default


def table(headers: Sequence[str], widths: Sequence[int], rows: Iterable[Sequence[str]]) -> str:
    """Render left-aligned fixed-width columns with a rule under the header."""
    def line(cells: Sequence[str]) -> str:
        return " ".join(f"{cell:<{width}}" for cell, width in zip(cells, widths)).rstrip()

    lines = [line(headers), "-" * (sum(widths) + len(widths) - 1)]
    lines.extend(line(row) for row in rows)
    return "\n".join(lines)


def details(pairs: Iterable[Sequence[str]]) -> str:
    """Render "Label: value" lines indented under a heading."""
    return "\n".join(f"   {label}: {value}" for label, value in pairs)
