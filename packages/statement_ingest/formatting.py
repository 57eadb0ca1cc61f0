"""Small text and number helpers shared across the package."""

from __future__ import annotations

import re
import uuid
from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")
_NON_WORD_RE = re.compile(r"[^\w\s]|_")


def normalize_string(text: str | None) -> str:
    """Lowercase, drop punctuation and collapse whitespace.

    >>> normalize_string("  Coffee-Shop   #12 ")
    'coffeeshop 12'
    """

    if not text:
        return ""
    return " ".join(_NON_WORD_RE.sub("", text.lower()).split())


def normalize_amount(amount: Decimal) -> Decimal:
    """Round to the cent, halves away from zero."""

    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    # Two decimals; leading minus for outflows.
    return f"{normalize_amount(amount):.2f}"


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """``-1234.5`` -> ``-$1,234.50``."""

    q = normalize_amount(amount)
    sign = "-" if q < 0 else ""
    return f"{sign}{symbol}{abs(q):,.2f}"


def percentage(part: int, total: int) -> int:
    """``part`` as a whole percentage of ``total`` (halves round up); 0 when empty."""

    if total <= 0:
        return 0
    ratio = Decimal(part) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def new_run_token() -> str:
    """Random token that scopes transaction ids to one ingestion run."""

    return uuid.uuid4().hex[:12]


def transaction_id(run_token: str, row_number: int) -> str:
    return f"txn_{run_token}_{row_number}"


__all__ = [
    "format_amount",
    "format_currency",
    "new_run_token",
    "normalize_amount",
    "normalize_string",
    "percentage",
    "transaction_id",
]
