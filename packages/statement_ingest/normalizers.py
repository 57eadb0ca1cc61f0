"""Raw CSV rows -> canonical :class:`~statement_ingest.models.Transaction`.

Each row produces an explicit :class:`RowResult`: either a transaction or the
reason the row was skipped. Data problems never raise; :func:`normalize_rows`
turns skipped rows into ``"Row N skipped: <reason>"`` warnings and carries on.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .detection import DetectedFormat
from .formatting import new_run_token, transaction_id
from .logging_setup import get_logger
from .models import Transaction
from .parsers import parse_amount, parse_date, sanitize_text

# Labels tried, in order, when the detected column is empty for a row.
DATE_FALLBACK_LABELS = ("Transaction Date", "Date", "Txn Date", "Posting Date")
DESCRIPTION_FALLBACK_LABELS = (
    "Transaction Details",
    "Memo",
    "Note",
    "Narration",
    "Details",
    "Description 2",
)
AMOUNT_FALLBACK_LABELS = ("Debit", "Credit", "Value")

_logger = get_logger("statement_ingest.normalizers")


@dataclass(frozen=True, slots=True)
class RowResult:
    """Outcome for one data row: a transaction or a skip reason."""

    row_number: int
    transaction: Transaction | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.transaction is not None


# ---------------------------------------------------------------------------
# Cell resolution
# ---------------------------------------------------------------------------


def _cell(row: Mapping[str, str], label: str | None) -> str:
    if label is None:
        return ""
    return (row.get(label) or "").strip()


def _resolve(row: Mapping[str, str], primary: str | None, fallbacks: Sequence[str]) -> str:
    value = _cell(row, primary)
    if value:
        return value
    for label in fallbacks:
        if label == primary:
            continue
        value = _cell(row, label)
        if value:
            return value
    return ""


def _is_blank(row: Mapping[str, str]) -> bool:
    return all((v or "").strip() == "" for v in row.values())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_row(
    row: Mapping[str, str],
    detected: DetectedFormat,
    row_number: int,
    *,
    id_prefix: str,
) -> RowResult:
    """Normalize one row keyed by header label.

    For withdrawal/deposit layouts a non-empty withdrawal becomes an outflow
    (negated) and otherwise a non-empty deposit is used as-is; rows with
    neither (opening-balance lines) are skipped.
    """

    raw_date = _resolve(row, detected.date_column, DATE_FALLBACK_LABELS)
    raw_description = _resolve(row, detected.description_column, DESCRIPTION_FALLBACK_LABELS)

    withdrawal = False
    if detected.has_split_amount:
        raw_amount = _cell(row, detected.withdrawal_column)
        if raw_amount:
            withdrawal = True
        else:
            raw_amount = _cell(row, detected.deposit_column)
        if not raw_amount:
            return RowResult(row_number, reason="no withdrawal or deposit amount")
    else:
        raw_amount = _resolve(row, detected.amount_column, AMOUNT_FALLBACK_LABELS)

    if not raw_date:
        return RowResult(row_number, reason="missing date")
    if not raw_description:
        return RowResult(row_number, reason="missing description")
    if not raw_amount:
        return RowResult(row_number, reason="missing amount")

    parsed_date = parse_date(raw_date, prefer=detected.date_notation)
    if parsed_date is None:
        return RowResult(row_number, reason=f"invalid date {raw_date!r}")
    amount = parse_amount(raw_amount)
    if amount is None:
        return RowResult(row_number, reason=f"invalid amount {raw_amount!r}")
    if withdrawal:
        amount = -abs(amount)

    tx = Transaction(
        id=transaction_id(id_prefix, row_number),
        date=parsed_date.isoformat(),
        description=sanitize_text(raw_description),
        original_description=raw_description,
        amount=amount,
    )
    return RowResult(row_number, transaction=tx)


def normalize_rows(
    rows: Iterable[Mapping[str, str]],
    detected: DetectedFormat,
    *,
    id_prefix: str | None = None,
) -> tuple[list[Transaction], list[str]]:
    """Normalize every row, returning ``(transactions, warnings)``.

    Row numbers are 1-based over the data records in ``rows``, so they count
    records rather than physical lines: :func:`~statement_ingest.api.read_csv_rows`
    has already dropped blank lines and a quoted cell may span several lines.
    Rows whose cells are all blank are skipped without a warning.
    """

    prefix = id_prefix or new_run_token()
    transactions: list[Transaction] = []
    warnings: list[str] = []
    for row_number, row in enumerate(rows, start=1):
        if _is_blank(row):
            continue
        result = normalize_row(row, detected, row_number, id_prefix=prefix)
        if result.transaction is not None:
            transactions.append(result.transaction)
        else:
            warnings.append(f"Row {row_number} skipped: {result.reason}")
    if warnings:
        _logger.debug("Skipped %d row(s) during normalization", len(warnings))
    return transactions, warnings


__all__ = [
    "AMOUNT_FALLBACK_LABELS",
    "DATE_FALLBACK_LABELS",
    "DESCRIPTION_FALLBACK_LABELS",
    "RowResult",
    "normalize_row",
    "normalize_rows",
]
