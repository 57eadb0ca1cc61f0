"""Bank format detection from a header row and a few sample rows.

Strategies are tried in a fixed order and the first success wins:

1. ``identifier``       every identifier label of a registered format is
                        present among the (normalized) headers.
2. ``content_pattern``  a format's content patterns hit the sample rows and
                        the headers still classify into usable columns.
3. ``fuzzy_columns``    every identifier label has a header of the same
                        semantic type with similarity above 0.7; a sample
                        date must parse under the format's notation.
4. ``generic``          headers classify into date, description and amount
                        (or a withdrawal/deposit pair) on their own.
5. ``structural``       the header row is really a data row; column roles
                        are inferred from its values.

When nothing matches the result is ``Unknown`` with strategy ``none``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, TypeAlias

from .bank_formats import BANK_FORMATS, UNKNOWN_FORMAT, BankFormatDescriptor, DateNotation
from .headers import (
    classify_header,
    find_split_amount_columns,
    map_headers,
    near_miss_headers,
    normalize_header,
    role_examples,
    similarity,
)
from .logging_setup import get_logger
from .parsers import looks_like_amount, looks_like_date, parse_date_with_notation

DetectionStrategy: TypeAlias = Literal[
    "identifier",
    "content_pattern",
    "fuzzy_columns",
    "generic",
    "structural",
    "none",
]

SAMPLE_ROW_COUNT = 5
FUZZY_MATCH_THRESHOLD = 0.7

_logger = get_logger("statement_ingest.detection")


@dataclass(frozen=True, slots=True)
class DetectedFormat:
    """Outcome of format detection.

    Column attributes hold the ACTUAL labels to read from each row (for
    structural inference these are the synthetic labels in ``headers``).
    Either ``amount_column`` or the withdrawal/deposit pair is set for a
    known format; all are ``None`` for ``Unknown``.
    """

    name: str
    strategy: DetectionStrategy
    date_column: str | None = None
    description_column: str | None = None
    amount_column: str | None = None
    withdrawal_column: str | None = None
    deposit_column: str | None = None
    date_notation: DateNotation | None = None
    headers: tuple[str, ...] = ()
    header_row_is_data: bool = False

    @property
    def is_known(self) -> bool:
        return self.name != UNKNOWN_FORMAT

    @property
    def has_split_amount(self) -> bool:
        return self.withdrawal_column is not None and self.deposit_column is not None


# ---------------------------------------------------------------------------
# Candidate ordering and helpers
# ---------------------------------------------------------------------------


def _candidates(filename: str | None) -> list[BankFormatDescriptor]:
    hint = (filename or "").lower().replace("_", " ")
    raw = (filename or "").lower()
    order = {name: i for i, name in enumerate(BANK_FORMATS)}

    def key(fmt: BankFormatDescriptor) -> tuple[int, int, int]:
        hinted = any(h in hint or h in raw for h in fmt.filename_hints)
        return (0 if hinted else 1, -len(fmt.identifier), order[fmt.name])

    return sorted(BANK_FORMATS.values(), key=key)


def _header_index(headers: Sequence[str]) -> dict[str, str]:
    # normalized label -> first actual label carrying it
    index: dict[str, str] = {}
    for h in headers:
        index.setdefault(normalize_header(h), h)
    return index


def _sample_text(rows: Sequence[Sequence[str]]) -> str:
    return " ".join(cell for row in rows for cell in row if cell)


def _first_value(
    headers: Sequence[str], rows: Sequence[Sequence[str]], column: str
) -> str | None:
    try:
        pos = list(headers).index(column)
    except ValueError:
        return None
    for row in rows:
        if pos < len(row) and row[pos].strip():
            return row[pos]
    return None


def _from_descriptor(
    fmt: BankFormatDescriptor,
    strategy: DetectionStrategy,
    headers: Sequence[str],
    resolve: dict[str, str],
) -> DetectedFormat:
    """Build a result for ``fmt`` using ``resolve`` (descriptor label -> actual)."""

    def actual(label: str | None) -> str | None:
        return None if label is None else resolve.get(label, label)

    return DetectedFormat(
        name=fmt.name,
        strategy=strategy,
        date_column=actual(fmt.date_column),
        description_column=actual(fmt.description_column),
        amount_column=actual(fmt.amount_column),
        withdrawal_column=actual(fmt.withdrawal_column),
        deposit_column=actual(fmt.deposit_column),
        date_notation=fmt.date_notation,
        headers=tuple(headers),
    )


def _from_mapping(
    name: str, strategy: DetectionStrategy, headers: Sequence[str], notation: DateNotation | None
) -> DetectedFormat | None:
    """Result built from header classification alone, or ``None``."""

    mapping = map_headers(headers)
    date_col = mapping.column("date")
    desc_col = mapping.column("description")
    if date_col is None or desc_col is None:
        return None
    amount_col = mapping.column("amount")
    if amount_col is not None:
        return DetectedFormat(
            name=name,
            strategy=strategy,
            date_column=date_col,
            description_column=desc_col,
            amount_column=amount_col,
            date_notation=notation,
            headers=tuple(headers),
        )
    split = find_split_amount_columns(headers)
    if split is None:
        return None
    return DetectedFormat(
        name=name,
        strategy=strategy,
        date_column=date_col,
        description_column=desc_col,
        withdrawal_column=split[0],
        deposit_column=split[1],
        date_notation=notation,
        headers=tuple(headers),
    )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _match_identifier(
    headers: Sequence[str], candidates: Sequence[BankFormatDescriptor]
) -> DetectedFormat | None:
    index = _header_index(headers)
    for fmt in candidates:
        wanted = [normalize_header(label) for label in fmt.identifier]
        if all(w in index for w in wanted):
            resolve = {label: index[normalize_header(label)] for label in fmt.identifier}
            return _from_descriptor(fmt, "identifier", headers, resolve)
    return None


def _match_content(
    headers: Sequence[str],
    sample_rows: Sequence[Sequence[str]],
    candidates: Sequence[BankFormatDescriptor],
) -> DetectedFormat | None:
    text = _sample_text(sample_rows[:SAMPLE_ROW_COUNT])
    if not text:
        return None
    for fmt in candidates:
        if not fmt.patterns or not any(p.search(text) for p in fmt.patterns):
            continue
        _logger.debug("Content pattern for %s matched sample rows", fmt.name)
        detected = _from_mapping(fmt.name, "content_pattern", headers, fmt.date_notation)
        if detected is not None:
            return detected
        _logger.debug("Headers do not resolve required columns for %s", fmt.name)
    return None


def _fuzzy_resolve(fmt: BankFormatDescriptor, headers: Sequence[str]) -> dict[str, str] | None:
    classified = [(h, normalize_header(h), classify_header(h).field_type) for h in headers]
    resolve: dict[str, str] = {}
    for label in fmt.identifier:
        target = normalize_header(label)
        target_type = classify_header(label).field_type
        best: tuple[float, str] | None = None
        for actual, normalized, field_type in classified:
            if field_type != target_type:
                continue
            score = similarity(normalized, target)
            if score > FUZZY_MATCH_THRESHOLD and (best is None or score > best[0]):
                best = (score, actual)
        if best is None:
            return None
        resolve[label] = best[1]
    return resolve


def _match_fuzzy(
    headers: Sequence[str],
    sample_rows: Sequence[Sequence[str]],
    candidates: Sequence[BankFormatDescriptor],
) -> DetectedFormat | None:
    for fmt in candidates:
        resolve = _fuzzy_resolve(fmt, headers)
        if resolve is None:
            continue
        if sample_rows:
            value = _first_value(headers, sample_rows, resolve[fmt.date_column])
            if value is not None and parse_date_with_notation(value, fmt.date_notation) is None:
                _logger.debug(
                    "Fuzzy match for %s rejected: %r is not %s",
                    fmt.name,
                    value,
                    fmt.date_notation,
                )
                continue
        return _from_descriptor(fmt, "fuzzy_columns", headers, resolve)
    return None


def _match_structural(
    headers: Sequence[str], sample_rows: Sequence[Sequence[str]]
) -> DetectedFormat | None:
    cells = [c.strip() for c in headers]
    date_pos = next((i for i, c in enumerate(cells) if looks_like_date(c)), None)
    if date_pos is None:
        return None
    rest = [i for i in range(len(cells)) if i != date_pos]
    amount_pos = next((i for i in rest if looks_like_amount(cells[i])), None)
    if amount_pos is None:
        amount_pos = next((i for i in rest if looks_like_amount(cells[i], strict=False)), None)
    if amount_pos is None:
        return None
    text_positions = [
        i
        for i in rest
        if i != amount_pos
        and cells[i]
        and not looks_like_amount(cells[i], strict=False)
        and not looks_like_date(cells[i])
    ]
    if not text_positions:
        return None
    desc_pos = max(text_positions, key=lambda i: (len(cells[i]), -i))

    labels: list[str] = []
    for i in range(len(cells)):
        if i == date_pos:
            labels.append("Date")
        elif i == amount_pos:
            labels.append("Amount")
        elif i == desc_pos:
            labels.append("Description")
        else:
            labels.append(f"Column {i + 1}")

    text = _sample_text([headers, *sample_rows[:SAMPLE_ROW_COUNT]])
    transfer = BANK_FORMATS["InternetBanking"]
    name = transfer.name if any(p.search(text) for p in transfer.patterns) else "Generic"
    return DetectedFormat(
        name=name,
        strategy="structural",
        date_column="Date",
        description_column="Description",
        amount_column="Amount",
        headers=tuple(labels),
        header_row_is_data=True,
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def detect_bank_format(
    headers: Sequence[str],
    sample_rows: Sequence[Sequence[str]] | None = None,
    filename: str | None = None,
) -> DetectedFormat:
    """Detect the bank format of a CSV from its first row and sample data.

    ``sample_rows`` are the data rows following ``headers`` (only the first
    ``SAMPLE_ROW_COUNT`` are consulted). ``filename`` lets formats with file
    name hints be tried first.
    """

    headers = [h if h is not None else "" for h in headers]
    samples = list(sample_rows or [])[:SAMPLE_ROW_COUNT]
    candidates = _candidates(filename)

    steps = (
        lambda: _match_identifier(headers, candidates),
        lambda: _match_content(headers, samples, candidates),
        lambda: _match_fuzzy(headers, samples, candidates),
        lambda: _from_mapping("Generic", "generic", headers, None),
        lambda: _match_structural(headers, samples),
    )
    for step in steps:
        detected = step()
        if detected is not None:
            _logger.info(
                "Detected bank format %s via %s (file=%s)",
                detected.name,
                detected.strategy,
                filename or "-",
            )
            return detected

    _logger.info("Bank format not recognized for headers %s", list(headers))
    return DetectedFormat(name=UNKNOWN_FORMAT, strategy="none", headers=tuple(headers))


def describe_detection_failure(headers: Sequence[str]) -> list[str]:
    """Errors explaining why ``headers`` could not be mapped to a format."""

    mapping = map_headers(headers)
    errors: list[str] = []
    for role in ("date", "description", "amount"):
        article = "an" if role[0] in "aeiou" else "a"
        if mapping.column(role) is not None:
            continue
        if role == "amount" and find_split_amount_columns(headers) is not None:
            continue
        near = near_miss_headers(headers, role)
        if near:
            names = ", ".join(f'"{h}"' for h in near)
            errors.append(f"Could not identify {article} {role} column. Closest headers: {names}")
        else:
            errors.append(
                f"Could not identify {article} {role} column. Expected a header such as "
                f"{role_examples(role)}"
            )
    errors.append(
        "CSV format not recognized. Expected headers like: Date, Description, Amount "
        "(or a supported bank export)"
    )
    return errors


__all__ = [
    "DetectedFormat",
    "DetectionStrategy",
    "SAMPLE_ROW_COUNT",
    "describe_detection_failure",
    "detect_bank_format",
]
