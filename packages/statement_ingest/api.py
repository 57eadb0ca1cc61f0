"""Public ingestion API for ``statement_ingest``.

Typical use::

    result = parse_csv(csv_text, filename="statement.csv")
    if result.validation.is_valid:
        for tx in result.transactions:
            ...

Bad data never raises: a rejected file comes back with
``validation.is_valid == False`` and the reasons in ``validation.errors``;
skipped rows and data-quality observations are listed in
``validation.warnings``. Only I/O errors from :func:`parse_csv_file`
propagate.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta
from io import StringIO
from pathlib import Path

from .bank_formats import UNKNOWN_FORMAT
from .categorization import CategorizationEngine, categorize_transactions
from .detection import (
    SAMPLE_ROW_COUNT,
    DetectedFormat,
    describe_detection_failure,
    detect_bank_format,
)
from .duplicates import detect_duplicates
from .logging_setup import get_logger
from .models import (
    CategorizationStats,
    DuplicateDetectionResult,
    Transaction,
    ValidationResult,
)
from .normalizers import normalize_rows
from .stats import calculate_categorization_stats

LARGE_DATASET_THRESHOLD = 1000
EARLIEST_PLAUSIBLE_DATE = date(1970, 1, 1)
FUTURE_DATE_WINDOW = timedelta(days=365)

NO_HEADERS_ERROR = "No headers found in CSV file"
NO_TRANSACTIONS_ERROR = "No valid transactions found in CSV"
UNREADABLE_CSV_ERROR = "Could not read CSV"

TEMPLATE_HEADERS = ("Date", "Description", "Amount", "Balance", "Reference")
_TEMPLATE_ROWS = (
    ("2024-01-15", "Coffee Shop Purchase", "5.50", "1234.56", "TXN001"),
    ("2024-01-16", "Gas Station", "45.00", "1189.56", "TXN002"),
    ("2024-01-17", "Grocery Store", "125.75", "1063.81", "TXN003"),
)

_logger = get_logger("statement_ingest.api")


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Everything one ingestion call produces.

    ``bank_format`` is the registered format name or ``"Unknown"``.
    ``duplicate_result`` and ``stats`` are only filled by
    :func:`parse_and_categorize_csv`.
    """

    transactions: tuple[Transaction, ...]
    validation: ValidationResult
    bank_format: str
    detected: DetectedFormat
    duplicate_result: DuplicateDetectionResult | None = None
    stats: CategorizationStats | None = None


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------


def read_csv_rows(csv_text: str) -> list[list[str]]:
    """Split CSV text into rows of cells.

    Follows RFC 4180 quoting via :mod:`csv`; a leading BOM is dropped and
    rows whose cells are all blank are skipped. Raises ``csv.Error`` for text
    the reader cannot tokenize (e.g. a cell over ``csv.field_size_limit()``).
    """

    text = csv_text.removeprefix("\ufeff")
    with StringIO(text, newline="") as f:
        return [row for row in csv.reader(f) if any(cell.strip() for cell in row)]


def _row_dict(labels: Sequence[str], cells: Sequence[str]) -> dict[str, str]:
    # First occurrence wins for repeated labels; missing cells read as "".
    out: dict[str, str] = {}
    for i, label in enumerate(labels):
        if label not in out:
            out[label] = cells[i] if i < len(cells) else ""
    return out


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _quality_warnings(
    transactions: Sequence[Transaction],
    detected: DetectedFormat,
    today: date,
) -> list[str]:
    warnings: list[str] = []
    latest = today + FUTURE_DATE_WINDOW
    odd_dates = sum(
        1
        for tx in transactions
        if not EARLIEST_PLAUSIBLE_DATE <= date.fromisoformat(tx.date) <= latest
    )
    if odd_dates:
        warnings.append(
            f"{odd_dates} transaction(s) have unusual dates outside the expected range"
        )

    missing = sum(1 for tx in transactions if not tx.description)
    if missing:
        warnings.append(f"{missing} transaction(s) have missing descriptions")

    zero = sum(1 for tx in transactions if tx.amount == 0)
    if zero:
        warnings.append(f"{zero} transaction(s) have zero amounts")

    duplicates = detect_duplicates(transactions).duplicate_count
    if duplicates:
        warnings.append(f"{duplicates} potential duplicate transaction(s) found")

    if len(transactions) > LARGE_DATASET_THRESHOLD:
        warnings.append(
            f"Large dataset ({len(transactions)} transactions) may impact performance"
        )

    if detected.strategy == "generic":
        for column, standard in (
            (detected.date_column, "Date"),
            (detected.description_column, "Description"),
            (detected.amount_column, "Amount"),
        ):
            if column is not None and column != standard:
                warnings.append(
                    f'Consider using standard header "{standard}" instead of "{column}"'
                )
    return warnings


def _rejected(
    detected: DetectedFormat, errors: Sequence[str], warnings: Sequence[str] = ()
) -> IngestResult:
    return IngestResult(
        transactions=(),
        validation=ValidationResult(
            is_valid=False, errors=tuple(errors), warnings=tuple(warnings)
        ),
        bank_format=detected.name,
        detected=detected,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_csv(
    csv_text: str, *, filename: str | None = None, today: date | None = None
) -> IngestResult:
    """Detect the format of ``csv_text`` and normalize its rows.

    ``filename`` is only used as a detection hint. ``today`` anchors the
    plausible-date window (defaults to the current date).
    """

    unknown = DetectedFormat(name=UNKNOWN_FORMAT, strategy="none")
    try:
        rows = read_csv_rows(csv_text)
    except csv.Error as e:
        _logger.info("Rejected %s: %s", filename or "input", e)
        return _rejected(unknown, [f"{UNREADABLE_CSV_ERROR}: {e}"])
    if not rows:
        _logger.info("Rejected %s: empty file", filename or "input")
        return _rejected(unknown, [NO_HEADERS_ERROR])

    headers = [cell.strip() for cell in rows[0]]
    data = rows[1:]
    detected = detect_bank_format(headers, data[:SAMPLE_ROW_COUNT], filename)
    if not detected.is_known:
        return _rejected(detected, describe_detection_failure(headers))

    if detected.header_row_is_data:
        data = rows
    labels = detected.headers or tuple(headers)
    transactions, warnings = normalize_rows((_row_dict(labels, r) for r in data), detected)

    if not transactions:
        _logger.info("Rejected %s: no rows survived normalization", filename or "input")
        return _rejected(detected, [NO_TRANSACTIONS_ERROR], warnings)

    warnings.extend(_quality_warnings(transactions, detected, today or date.today()))
    _logger.info(
        "Parsed %d transaction(s) as %s with %d warning(s)",
        len(transactions),
        detected.name,
        len(warnings),
    )
    return IngestResult(
        transactions=tuple(transactions),
        validation=ValidationResult(is_valid=True, warnings=tuple(warnings)),
        bank_format=detected.name,
        detected=detected,
    )


def parse_csv_file(path: str | Path, *, today: date | None = None) -> IngestResult:
    """Read ``path`` as UTF-8 (BOM tolerated) and :func:`parse_csv` it.

    ``OSError`` and ``UnicodeDecodeError`` propagate to the caller.
    """

    p = Path(path)
    text = p.read_text(encoding="utf-8-sig")
    return parse_csv(text, filename=p.name, today=today)


def parse_and_categorize_csv(
    csv_text: str,
    *,
    engine: CategorizationEngine,
    filename: str | None = None,
    dedupe: bool = True,
    today: date | None = None,
) -> IngestResult:
    """Parse, drop duplicates, categorize through ``engine`` and compute stats.

    With ``dedupe`` (default) only the clean, duplicate-free list is sent to
    the engine and returned; otherwise every parsed transaction is.
    """

    parsed = parse_csv(csv_text, filename=filename, today=today)
    duplicate_result = detect_duplicates(parsed.transactions)
    if not parsed.transactions:
        return replace(
            parsed,
            duplicate_result=duplicate_result,
            stats=calculate_categorization_stats(()),
        )

    selected = duplicate_result.clean_transactions if dedupe else parsed.transactions
    categorized = categorize_transactions(selected, engine)
    return replace(
        parsed,
        transactions=tuple(categorized),
        duplicate_result=duplicate_result,
        stats=calculate_categorization_stats(categorized),
    )


def generate_csv_template() -> str:
    """A small, standard-header CSV users can copy."""

    lines = [",".join(TEMPLATE_HEADERS)]
    lines.extend(",".join(row) for row in _TEMPLATE_ROWS)
    return "\n".join(lines)


__all__ = [
    "IngestResult",
    "LARGE_DATASET_THRESHOLD",
    "UNREADABLE_CSV_ERROR",
    "detect_duplicates",
    "generate_csv_template",
    "parse_and_categorize_csv",
    "parse_csv",
    "parse_csv_file",
    "read_csv_rows",
]
