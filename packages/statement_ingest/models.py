"""Data models for ``statement_ingest``.

Records produced by the ingestion pipeline are frozen dataclasses so a
transaction can never be altered in place once normalization has created it.
Categorization results are applied by building a new record (see
:meth:`Transaction.with_assignment`).

The reply expected from an external categorization engine is modelled with
Pydantic (:class:`CategoryAssignment`) so malformed replies are rejected at the
boundary instead of leaking into downstream stats.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

from .formatting import format_amount

FieldType: TypeAlias = Literal[
    "date",
    "description",
    "amount",
    "balance",
    "reference",
    "category",
    "unknown",
]
"""Semantic role a CSV column can be classified into."""


# ---------------------------------------------------------------------------
# Canonical transaction
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single canonical transaction.

    Attributes
    ----------
    id:
        Identifier generated at normalization time; unique within one run.
    date:
        Calendar date as ``YYYY-MM-DD``.
    description:
        Sanitized display text.
    original_description:
        The source text exactly as read from the CSV cell.
    amount:
        Signed amount; negative values are outflows.

    The remaining fields belong to the categorization engine and the user
    edit flow. Ingestion only initializes them.
    """

    id: str
    date: str
    description: str
    original_description: str
    amount: Decimal
    confidence: float = 0.0
    account_code: str | None = None
    category: str | None = None
    merchant: str | None = None
    is_approved: bool = False
    is_manually_edited: bool = False
    ai_categorized: bool = False

    def with_assignment(self, assignment: CategoryAssignment, *, ai: bool = True) -> Transaction:
        """Return a copy carrying ``assignment``'s categorization fields."""

        return replace(
            self,
            account_code=assignment.account_code,
            confidence=assignment.confidence,
            category=assignment.category,
            merchant=assignment.merchant if assignment.merchant is not None else self.merchant,
            ai_categorized=ai,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "original_description": self.original_description,
            "amount": format_amount(self.amount),
            "confidence": self.confidence,
            "account_code": self.account_code,
            "category": self.category,
            "merchant": self.merchant,
            "is_approved": self.is_approved,
            "is_manually_edited": self.is_manually_edited,
            "ai_categorized": self.ai_categorized,
        }


# ---------------------------------------------------------------------------
# Validation and header analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one file.

    ``errors`` are fatal (the file is rejected); ``warnings`` are surfaced to
    the user while processing continues. Both keep insertion order.
    """

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HeaderClassification:
    """Best semantic match for one header label."""

    field_type: FieldType
    confidence: float
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HeaderMapping:
    """Accepted classifications for a full header row.

    Only classifications scoring above the acceptance threshold are recorded;
    when several headers map to the same type the best-scoring one wins.
    """

    columns: Mapping[FieldType, str] = field(default_factory=dict)
    confidence: Mapping[FieldType, float] = field(default_factory=dict)
    suggestions: Mapping[FieldType, tuple[str, ...]] = field(default_factory=dict)

    def column(self, field_type: FieldType) -> str | None:
        return self.columns.get(field_type)


# ---------------------------------------------------------------------------
# Duplicate detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """First occurrence of a key plus every later transaction sharing it.

    ``confidence`` is always ``1.0``: matching is exact, not probabilistic.
    """

    original_index: int
    duplicate_indexes: tuple[int, ...]
    transaction: Transaction
    confidence: float = 1.0


@dataclass(frozen=True, slots=True)
class DuplicateDetectionResult:
    duplicate_groups: tuple[DuplicateGroup, ...]
    clean_transactions: tuple[Transaction, ...]
    duplicate_count: int


# ---------------------------------------------------------------------------
# Categorization collaborator and stats
# ---------------------------------------------------------------------------


class CategoryAssignment(BaseModel):
    """Validated reply from an external categorization engine.

    ``confidence`` uses a 0–100 scale. Extra keys in a mapping reply are
    ignored so engines can attach their own diagnostics.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    account_code: str
    confidence: float
    category: str
    merchant: str | None = None

    @field_validator("confidence")
    @classmethod
    def _confidence_in_range(cls, v: float) -> float:
        fv = float(v)
        if 0.0 <= fv <= 100.0:
            return fv
        raise ValueError("confidence must be within [0, 100]")

    @field_validator("merchant")
    @classmethod
    def _blank_merchant_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v or None


@dataclass(frozen=True, slots=True)
class CategorizationStats:
    total: int
    categorized: int
    high_confidence: int
    needs_review: int
    categorized_percent: int
    high_confidence_percent: int
    needs_review_percent: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "categorized": self.categorized,
            "high_confidence": self.high_confidence,
            "needs_review": self.needs_review,
            "categorized_percent": self.categorized_percent,
            "high_confidence_percent": self.high_confidence_percent,
            "needs_review_percent": self.needs_review_percent,
        }


__all__ = [
    "FieldType",
    "Transaction",
    "ValidationResult",
    "HeaderClassification",
    "HeaderMapping",
    "DuplicateGroup",
    "DuplicateDetectionResult",
    "CategoryAssignment",
    "CategorizationStats",
]
