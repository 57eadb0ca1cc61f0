"""Exact-match duplicate detection within one ingested file.

Two transactions are duplicates when they share the same key: canonical date,
amount rounded to the cent, and the full source description (not the
200-character sanitized one) reduced by
:func:`~statement_ingest.formatting.normalize_string`. There is deliberately no
tolerance for near matches; two identical purchases on the same day collapse
into one.

Public surface:
- ``duplicate_key``: the comparison key for one transaction.
- ``detect_duplicates``: single left-to-right pass producing groups, the
  clean list and the duplicate count.
- ``find_duplicates_of_transaction``: positions in an existing list sharing a
  transaction's key.
- ``format_duplicate_report``: one-line human summary.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TypeAlias

from .formatting import normalize_amount, normalize_string
from .logging_setup import get_logger
from .models import DuplicateDetectionResult, DuplicateGroup, Transaction

DuplicateKey: TypeAlias = tuple[str, Decimal, str]

_logger = get_logger("statement_ingest.duplicates")


def duplicate_key(tx: Transaction) -> DuplicateKey:
    text = tx.original_description or tx.description
    return (tx.date, normalize_amount(tx.amount), normalize_string(text))


def detect_duplicates(transactions: Sequence[Transaction]) -> DuplicateDetectionResult:
    """Group later copies under the first occurrence of each key.

    Survivors keep their original order in ``clean_transactions``; groups are
    ordered by the position of their first duplicate.
    """

    first_seen: dict[DuplicateKey, int] = {}
    dupes: dict[int, list[int]] = {}
    clean: list[Transaction] = []
    for i, tx in enumerate(transactions):
        key = duplicate_key(tx)
        original = first_seen.get(key)
        if original is None:
            first_seen[key] = i
            clean.append(tx)
        else:
            dupes.setdefault(original, []).append(i)

    groups = tuple(
        DuplicateGroup(
            original_index=original,
            duplicate_indexes=tuple(indexes),
            transaction=transactions[original],
        )
        for original, indexes in dupes.items()
    )
    count = sum(len(g.duplicate_indexes) for g in groups)
    if count:
        _logger.info("Found %d duplicate transaction(s) in %d group(s)", count, len(groups))
    return DuplicateDetectionResult(
        duplicate_groups=groups,
        clean_transactions=tuple(clean),
        duplicate_count=count,
    )


def find_duplicates_of_transaction(
    tx: Transaction, existing: Sequence[Transaction]
) -> list[int]:
    """Indexes in ``existing`` whose key equals ``tx``'s (``tx`` itself excluded)."""

    key = duplicate_key(tx)
    return [
        i
        for i, other in enumerate(existing)
        if other is not tx and other.id != tx.id and duplicate_key(other) == key
    ]


def format_duplicate_report(result: DuplicateDetectionResult) -> str:
    count = result.duplicate_count
    if count == 0:
        return "No duplicates detected."
    groups = len(result.duplicate_groups)
    tx_word = "transaction" if count == 1 else "transactions"
    group_word = "group" if groups == 1 else "groups"
    return f"Found {count} duplicate {tx_word} in {groups} {group_word}."


__all__ = [
    "DuplicateKey",
    "detect_duplicates",
    "duplicate_key",
    "find_duplicates_of_transaction",
    "format_duplicate_report",
]
