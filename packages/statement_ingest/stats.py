"""Aggregate counts over categorized transactions."""

from __future__ import annotations

from collections.abc import Sequence

from .formatting import percentage
from .models import CategorizationStats, Transaction

# Account code assigned when the categorization engine could not decide.
PLACEHOLDER_ACCOUNT_CODE = "9999"
HIGH_CONFIDENCE_THRESHOLD = 80
NEEDS_REVIEW_THRESHOLD = 70


def is_categorized(tx: Transaction) -> bool:
    code = (tx.account_code or "").strip()
    return bool(code) and code != PLACEHOLDER_ACCOUNT_CODE


def calculate_categorization_stats(transactions: Sequence[Transaction]) -> CategorizationStats:
    """Count categorized, high-confidence and needs-review transactions.

    Confidence is on a 0–100 scale. Percentages are whole numbers of the
    total and are all 0 for an empty list.
    """

    total = len(transactions)
    categorized = 0
    high = 0
    review = 0
    for tx in transactions:
        done = is_categorized(tx)
        if done:
            categorized += 1
            if tx.confidence >= HIGH_CONFIDENCE_THRESHOLD:
                high += 1
        if not done or tx.confidence < NEEDS_REVIEW_THRESHOLD:
            review += 1
    return CategorizationStats(
        total=total,
        categorized=categorized,
        high_confidence=high,
        needs_review=review,
        categorized_percent=percentage(categorized, total),
        high_confidence_percent=percentage(high, total),
        needs_review_percent=percentage(review, total),
    )


__all__ = [
    "HIGH_CONFIDENCE_THRESHOLD",
    "NEEDS_REVIEW_THRESHOLD",
    "PLACEHOLDER_ACCOUNT_CODE",
    "calculate_categorization_stats",
    "is_categorized",
]
