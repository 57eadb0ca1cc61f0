"""Boundary with an external categorization engine.

The engine itself lives outside this package. Anything with a
``categorize(transaction)`` method returning a :class:`CategoryAssignment` (or
a mapping with the same keys) can be plugged in. Replies are validated with
Pydantic; a failed call or a malformed reply gives the transaction the
placeholder assignment instead of aborting the batch.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import CategoryAssignment, Transaction
from .stats import PLACEHOLDER_ACCOUNT_CODE

UNCATEGORIZED = "Uncategorized"

PLACEHOLDER_ASSIGNMENT = CategoryAssignment(
    account_code=PLACEHOLDER_ACCOUNT_CODE,
    confidence=0.0,
    category=UNCATEGORIZED,
)

_logger = get_logger("statement_ingest.categorization")


@runtime_checkable
class CategorizationEngine(Protocol):
    def categorize(self, transaction: Transaction) -> CategoryAssignment | Mapping[str, Any]: ...


def _coerce(reply: Any) -> CategoryAssignment:
    if isinstance(reply, CategoryAssignment):
        return reply
    return CategoryAssignment.model_validate(reply)


def categorize_transaction(tx: Transaction, engine: CategorizationEngine) -> Transaction:
    """Apply one engine reply to ``tx``; the placeholder on any failure."""

    try:
        assignment = _coerce(engine.categorize(tx))
    except ValidationError as e:
        _logger.warning("Invalid categorization reply for %s: %s", tx.id, e.errors())
        return tx.with_assignment(PLACEHOLDER_ASSIGNMENT, ai=False)
    except Exception as e:  # noqa: BLE001 - engine failures are per-transaction
        _logger.warning("Categorization failed for %s: %s", tx.id, e)
        return tx.with_assignment(PLACEHOLDER_ASSIGNMENT, ai=False)
    return tx.with_assignment(assignment)


def categorize_transactions(
    transactions: Iterable[Transaction], engine: CategorizationEngine
) -> list[Transaction]:
    """Categorize sequentially, preserving order. No retries."""

    out = [categorize_transaction(tx, engine) for tx in transactions]
    fallbacks = sum(1 for tx in out if tx.account_code == PLACEHOLDER_ACCOUNT_CODE)
    _logger.info(
        "Categorized %d transaction(s); %d left as placeholder", len(out), fallbacks
    )
    return out


__all__ = [
    "CategorizationEngine",
    "PLACEHOLDER_ASSIGNMENT",
    "UNCATEGORIZED",
    "categorize_transaction",
    "categorize_transactions",
]
