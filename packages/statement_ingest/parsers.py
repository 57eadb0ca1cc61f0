"""Stateless parsers for CSV cell values (dates, amounts, free text).

Parsers never raise for malformed input: they return ``None`` and leave it to
the caller to record why a row was skipped.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from dateutil import parser as date_parser

from .bank_formats import DateNotation

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

# Order matters: the first notation producing a real calendar date wins.
DATE_NOTATIONS: tuple[DateNotation, ...] = (
    "MM/DD/YYYY",
    "YYYY-MM-DD",
    "DD/MM/YYYY",
    "DD-MM-YYYY",
    "MM-DD-YYYY",
    "YYYY/MM/DD",
    "DD.MM.YYYY",
    "MM.DD.YYYY",
    "DD MMM",
)

_STRPTIME_FORMATS: Mapping[DateNotation, tuple[str, ...]] = {
    "MM/DD/YYYY": ("%m/%d/%Y",),
    "YYYY-MM-DD": ("%Y-%m-%d",),
    "DD/MM/YYYY": ("%d/%m/%Y",),
    "DD-MM-YYYY": ("%d-%m-%Y",),
    "MM-DD-YYYY": ("%m-%d-%Y",),
    "YYYY/MM/DD": ("%Y/%m/%d",),
    "DD.MM.YYYY": ("%d.%m.%Y",),
    "MM.DD.YYYY": ("%m.%d.%Y",),
    # Year-less; the year is appended before parsing.
    "DD MMM": ("%d %b %Y", "%d %B %Y"),
}

_BARE_NUMBER_RE = re.compile(r"^[+-]?[\d,]*\.?\d+$")
_FOUR_DIGIT_YEAR_RE = re.compile(r"\d{4}")

_DATE_SHAPES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}$"),
    re.compile(r"^\d{4}[/.-]\d{1,2}[/.-]\d{1,2}(?:[T ]\d{1,2}:\d{2}(?::\d{2})?)?$"),
    re.compile(r"^\d{1,2}[ -][A-Za-z]{3,9}\.?(?:[ -]\d{2,4})?$"),
    re.compile(r"^[A-Za-z]{3,9}\.? \d{1,2},? \d{4}$"),
)


def parse_date_with_notation(
    value: str | None, notation: DateNotation, *, today: date | None = None
) -> date | None:
    """Parse ``value`` strictly under one notation; ``None`` when it does not fit."""

    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if "YYYY" in notation and not _FOUR_DIGIT_YEAR_RE.search(s):
        # strptime would read "24" as year 24 AD
        return None
    if notation == "DD MMM":
        year = (today or date.today()).year
        s = f"{s.rstrip('.')} {year}"
    for fmt in _STRPTIME_FORMATS[notation]:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_date(
    value: str | None,
    *,
    prefer: DateNotation | None = None,
    today: date | None = None,
) -> date | None:
    """Parse a date by trying each known notation in turn.

    ``prefer`` is tried before the fixed cascade (used when the bank format
    declares its notation). When every notation fails, a generic
    interpretation is attempted as a last resort; bare numbers are never
    accepted there.
    """

    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    notations = DATE_NOTATIONS if prefer is None else (prefer, *DATE_NOTATIONS)
    for notation in notations:
        parsed = parse_date_with_notation(s, notation, today=today)
        if parsed is not None:
            return parsed

    if _BARE_NUMBER_RE.match(s):
        return None
    default = datetime((today or date.today()).year, 1, 1)
    try:
        return date_parser.parse(s, default=default).date()
    except (ValueError, OverflowError):
        return None


def looks_like_date(value: str | None) -> bool:
    """Whether ``value`` has a date shape and actually parses as one."""

    if value is None:
        return False
    s = value.strip()
    if not s or not any(p.match(s) for p in _DATE_SHAPES):
        return False
    return parse_date(s) is not None


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

AMOUNT_LIMIT = Decimal("10000000")

_CURRENCY_SYMBOLS = "$€£¥₹"
_CURRENCY_CODE_RE = re.compile(
    r"^(?:CAD|USD|EUR|GBP|INR|AUD)\s*|\s*(?:CAD|USD|EUR|GBP|INR|AUD)$", re.I
)
_SUFFIX_RE = re.compile(r"\s*(DR|CR)\.?$", re.I)
_AMOUNT_SHAPE_RE = re.compile(
    r"^[+-]?\s*\(?\s*[+-]?\s*[$€£¥₹]?\s*\d[\d,]*(?:\.\d+)?\s*\)?(?:\s*(?:CR|DR))?$", re.I
)
_DECIMAL_HINT_RE = re.compile(r"[.+\-()]|CR$|DR$", re.I)


def parse_amount(value: str | None) -> Decimal | None:
    """Parse a signed amount from loosely formatted bank text.

    Handles quotes, currency symbols/codes, thousands separators, leading
    signs, parenthesized negatives and trailing ``DR``/``CR`` markers. ``DR``
    is stripped; ``CR`` negates the value. Returns ``None`` for anything that
    is not a finite number within ``AMOUNT_LIMIT``.
    """

    if value is None:
        return None
    s = value.replace('"', "").replace("'", "").strip()
    if not s:
        return None

    suffix: str | None = None
    m = _SUFFIX_RE.search(s)
    if m:
        suffix = m.group(1).upper()
        s = s[: m.start()].strip()
    s = _CURRENCY_CODE_RE.sub("", s).strip()

    negative = False
    # Strip leading sign, currency symbol and surrounding parentheses in any
    # order until stable, so "-($1,234.56)" and "$(1,234.56)" both work.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s[:1] and s[0] in _CURRENCY_SYMBOLS:
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = re.sub(r"[,\s]", "", s)
    if not s:
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    if not d.is_finite():
        return None

    if negative:
        d = -abs(d)
    if suffix == "CR":
        d = -d
    if abs(d) > AMOUNT_LIMIT:
        return None
    return d


def looks_like_amount(value: str | None, *, strict: bool = True) -> bool:
    """Whether ``value`` looks like a money amount.

    With ``strict`` the value must also carry a sign, decimal point,
    parentheses or a DR/CR marker, so plain integers (cheque or reference
    numbers) are not mistaken for amounts.
    """

    if value is None:
        return False
    s = value.strip()
    if not s or not _AMOUNT_SHAPE_RE.match(s):
        return False
    if strict and not _DECIMAL_HINT_RE.search(s):
        return False
    return parse_amount(s) is not None


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

DESCRIPTION_MAX_LENGTH = 200

_DISALLOWED_TEXT_RE = re.compile(r"[^\w\s\-&'.,#]")


def sanitize_text(text: str | None) -> str:
    """Collapse whitespace, drop unusual punctuation and cap the length."""

    if not text:
        return ""
    cleaned = " ".join(text.split())
    cleaned = _DISALLOWED_TEXT_RE.sub("", cleaned)
    return cleaned[:DESCRIPTION_MAX_LENGTH].strip()


__all__ = [
    "AMOUNT_LIMIT",
    "DATE_NOTATIONS",
    "DESCRIPTION_MAX_LENGTH",
    "looks_like_amount",
    "looks_like_date",
    "parse_amount",
    "parse_date",
    "parse_date_with_notation",
    "sanitize_text",
]
