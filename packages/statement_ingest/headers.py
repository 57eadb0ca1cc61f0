"""Header classification: map free-form column labels to semantic roles.

Labels are normalized (case, punctuation, abbreviations, common misspellings)
and scored against per-role pattern lists. Scoring goes through
:func:`similarity` only, so the heuristic can be swapped without touching the
classification or detection flow.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from .models import FieldType, HeaderClassification, HeaderMapping

# Scores must exceed this for a classification to be used downstream.
ACCEPT_THRESHOLD = 0.5
# Lower bound for listing a header as a "did you mean" candidate.
NEAR_MISS_THRESHOLD = 0.4

LONG_HEADER_LENGTH = 30

HEADER_PATTERNS: Mapping[FieldType, tuple[str, ...]] = MappingProxyType(
    {
        "date": (
            "date",
            "transaction date",
            "posting date",
            "value date",
            "effective date",
            "date posted",
            "date processed",
            "post date",
            "settlement date",
            "clearing date",
            "book date",
            "entry date",
        ),
        "description": (
            "description",
            "transaction details",
            "details",
            "narration",
            "memo",
            "note",
            "transaction description",
            "payee",
            "merchant",
            "vendor",
            "activity",
            "transaction narrative",
            "transaction memo",
            "transaction note",
            "description of transaction",
            "details of transaction",
        ),
        "amount": (
            "amount",
            "transaction amount",
            "value",
            "transaction value",
            "net amount",
            "total amount",
            "transaction total",
            "amount in cad",
            "amount in usd",
            "amount in foreign currency",
            "cad",
            "usd",
        ),
        "balance": (
            "balance",
            "running balance",
            "account balance",
            "closing balance",
            "ending balance",
            "current balance",
            "balance after transaction",
            "available balance",
            "ledger balance",
            "book balance",
        ),
        "reference": (
            "reference",
            "reference number",
            "transaction id",
            "transaction number",
            "check number",
            "cheque number",
            "reference code",
            "transaction reference",
            "confirmation number",
            "trace number",
            "sequence number",
        ),
        "category": (
            "category",
            "transaction category",
            "account category",
            "type",
            "transaction type",
            "activity type",
            "category code",
            "account type",
        ),
    }
)

# Applied per word, corrections first.
_CORRECTIONS: Mapping[str, str] = MappingProxyType(
    {
        "desciption": "description",
        "desription": "description",
        "descripton": "description",
        "discription": "description",
        "ammount": "amount",
        "amout": "amount",
        "balence": "balance",
        "ballance": "balance",
        "refrence": "reference",
        "referance": "reference",
        "catagory": "category",
        "tranaction": "transaction",
        "tranasction": "transaction",
        "transction": "transaction",
        "transaciton": "transaction",
        "transacton": "transaction",
        "transactin": "transaction",
    }
)

_ABBREVIATIONS: Mapping[str, str] = MappingProxyType(
    {
        "desc": "description",
        "descr": "description",
        "amt": "amount",
        "bal": "balance",
        "ref": "reference",
        "cat": "category",
        "txn": "transaction",
        "trx": "transaction",
        "trans": "transaction",
        "tran": "transaction",
        "dt": "date",
    }
)

_NOISE_SUFFIXES = (" column", " field")

_SYMBOL_RE = re.compile(r"[^\w\s]|_")

_DEBIT_LABELS = frozenset(
    {
        "withdrawal",
        "withdrawals",
        "debit",
        "debits",
        "amount debited",
        "debit amount",
        "money out",
        "paid out",
    }
)
_CREDIT_LABELS = frozenset(
    {
        "deposit",
        "deposits",
        "credit",
        "credits",
        "amount credited",
        "credit amount",
        "money in",
        "paid in",
    }
)

_ROLE_EXAMPLES: Mapping[str, str] = MappingProxyType(
    {
        "date": '"Date", "Transaction Date" or "Posting Date"',
        "description": '"Description", "Transaction Details" or "Memo"',
        "amount": '"Amount", or a "Withdrawal"/"Deposit" pair',
    }
)


# ---------------------------------------------------------------------------
# Normalization and scoring
# ---------------------------------------------------------------------------


def normalize_header(label: str | None) -> str:
    """Canonical comparison form of a header label.

    >>> normalize_header("  Txn_Dt ")
    'transaction date'
    >>> normalize_header("Desc. Column")
    'description'
    """

    if not label:
        return ""
    s = _SYMBOL_RE.sub(" ", label.lower())
    words = []
    for word in s.split():
        word = _CORRECTIONS.get(word, word)
        words.append(_ABBREVIATIONS.get(word, word))
    normalized = " ".join(words)
    for suffix in _NOISE_SUFFIXES:
        if normalized.endswith(suffix) and len(normalized) > len(suffix):
            normalized = normalized[: -len(suffix)].strip()
    return normalized


def similarity(a: str, b: str) -> float:
    """Crude similarity between two normalized labels, in ``[0, 1]``.

    Exact match scores 1.0, containment in either direction 0.7, otherwise
    the share of ``a``'s characters that occur in ``b`` over the longer
    length.
    """

    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.7
    overlap = sum(1 for ch in a if ch in b)
    return overlap / max(len(a), len(b))


def _score(normalized: str, field_type: FieldType) -> float:
    return max((similarity(normalized, p) for p in HEADER_PATTERNS[field_type]), default=0.0)


def classify_header(label: str | None) -> HeaderClassification:
    """Best-scoring field type for ``label``; ties keep the first seen."""

    normalized = normalize_header(label)
    best = HeaderClassification(field_type="unknown", confidence=0.0)
    if not normalized:
        return best
    for field_type, patterns in HEADER_PATTERNS.items():
        for pattern in patterns:
            score = similarity(normalized, pattern)
            if score > best.confidence:
                best = HeaderClassification(
                    field_type=field_type,
                    confidence=score,
                    alternatives=tuple(p for p in patterns if p != pattern),
                )
    return best


def map_headers(headers: Sequence[str]) -> HeaderMapping:
    """Classify a whole header row, keeping the best header per field type."""

    columns: dict[FieldType, str] = {}
    confidence: dict[FieldType, float] = {}
    suggestions: dict[FieldType, tuple[str, ...]] = {}
    for header in headers:
        result = classify_header(header)
        if result.field_type == "unknown" or result.confidence <= ACCEPT_THRESHOLD:
            continue
        ft = result.field_type
        if ft in confidence and confidence[ft] >= result.confidence:
            continue
        columns[ft] = header
        confidence[ft] = result.confidence
        suggestions[ft] = result.alternatives
    return HeaderMapping(columns=columns, confidence=confidence, suggestions=suggestions)


def find_split_amount_columns(headers: Sequence[str]) -> tuple[str, str] | None:
    """Return ``(withdrawal, deposit)`` labels when both kinds of column exist."""

    withdrawal: str | None = None
    deposit: str | None = None
    for header in headers:
        normalized = normalize_header(header)
        if withdrawal is None and normalized in _DEBIT_LABELS:
            withdrawal = header
        elif deposit is None and normalized in _CREDIT_LABELS:
            deposit = header
    if withdrawal is None or deposit is None:
        return None
    return withdrawal, deposit


def near_miss_headers(headers: Sequence[str], field_type: FieldType) -> list[str]:
    """Unclassified headers that resemble ``field_type``.

    Sorted by descending resemblance; used to point users at the column they
    probably meant.
    """

    scored: list[tuple[float, int, str]] = []
    for i, header in enumerate(headers):
        normalized = normalize_header(header)
        if not normalized:
            continue
        score = _score(normalized, field_type)
        if score < NEAR_MISS_THRESHOLD:
            continue
        if classify_header(header).confidence > ACCEPT_THRESHOLD:
            continue
        scored.append((-score, i, header))
    return [header for _, _, header in sorted(scored)]


def role_examples(field_type: str) -> str:
    return _ROLE_EXAMPLES.get(field_type, f'"{field_type.title()}"')


# ---------------------------------------------------------------------------
# User-facing formatting advice
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HeaderSuggestions:
    suggestions: tuple[str, ...]
    warnings: tuple[str, ...]
    recommended_headers: tuple[str, ...] = ("Date", "Description", "Amount")


def header_formatting_suggestions(headers: Sequence[str]) -> HeaderSuggestions:
    """Advice for making a header row easier to recognize."""

    mapping = map_headers(headers)
    split = find_split_amount_columns(headers)
    suggestions: list[str] = []
    warnings: list[str] = []

    if mapping.column("date") is None:
        suggestions.append('Add a "Date" column for transaction dates')
        warnings.append("Date column is required for proper transaction processing")
    if mapping.column("description") is None:
        suggestions.append('Add a "Description" column for transaction details')
        warnings.append("Description column is required for categorization")
    if mapping.column("amount") is None and split is None:
        suggestions.append('Add an "Amount" column for transaction values')
        warnings.append("Amount column is required for financial calculations")

    for field_type, standard in (
        ("date", "Date"),
        ("description", "Description"),
        ("amount", "Amount"),
    ):
        current = mapping.column(field_type)
        if current is not None and current != standard:
            suggestions.append(
                f'Consider renaming "{current}" to "{standard}" for better compatibility'
            )

    for header in headers:
        if header not in (header.lower(), header.upper(), header.capitalize()) and not (
            header.istitle()
        ):
            suggestions.append(f'Consider using consistent casing for "{header}"')
        if _SYMBOL_RE.search(header.replace("_", "")):
            suggestions.append(
                f'Remove special characters from "{header}" for better compatibility'
            )
        if len(header) > LONG_HEADER_LENGTH:
            suggestions.append(
                f'Consider shortening "{header}" (currently {len(header)} characters)'
            )

    if mapping.column("balance") is None:
        suggestions.append('Consider adding a "Balance" column for running balance information')
    if mapping.column("reference") is None:
        suggestions.append(
            'Consider adding a "Reference" column for transaction IDs or check numbers'
        )

    return HeaderSuggestions(suggestions=tuple(suggestions), warnings=tuple(warnings))


__all__ = [
    "ACCEPT_THRESHOLD",
    "HEADER_PATTERNS",
    "HeaderSuggestions",
    "classify_header",
    "find_split_amount_columns",
    "header_formatting_suggestions",
    "map_headers",
    "near_miss_headers",
    "normalize_header",
    "role_examples",
    "similarity",
]
