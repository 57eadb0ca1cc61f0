"""Registry of known bank CSV layouts.

Each entry names the columns a bank export uses for the date, description and
amount (or a withdrawal/deposit pair), the date notation the bank writes, and
the header labels that must all be present for a positive identification.
Formats may also carry content patterns (text that shows up in the rows of
that institution's statements) and file-name hints.

The registry is an immutable mapping; detection and normalization only read
from it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, TypeAlias

DateNotation: TypeAlias = Literal[
    "MM/DD/YYYY",
    "YYYY-MM-DD",
    "DD/MM/YYYY",
    "DD-MM-YYYY",
    "MM-DD-YYYY",
    "YYYY/MM/DD",
    "DD.MM.YYYY",
    "MM.DD.YYYY",
    "DD MMM",
]

UNKNOWN_FORMAT = "Unknown"


@dataclass(frozen=True, slots=True)
class BankFormatDescriptor:
    """Column layout and date notation for one bank export.

    Exactly one of ``amount_column`` or the ``withdrawal_column`` /
    ``deposit_column`` pair is set.
    """

    name: str
    date_column: str
    description_column: str
    date_notation: DateNotation
    identifier: tuple[str, ...]
    amount_column: str | None = None
    withdrawal_column: str | None = None
    deposit_column: str | None = None
    patterns: tuple[re.Pattern[str], ...] = ()
    filename_hints: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        split = self.withdrawal_column is not None or self.deposit_column is not None
        if split and (self.withdrawal_column is None or self.deposit_column is None):
            raise ValueError(f"{self.name}: withdrawal and deposit columns must be set together")
        if split == (self.amount_column is not None):
            raise ValueError(
                f"{self.name}: set either amount_column or the withdrawal/deposit pair"
            )

    @property
    def has_split_amount(self) -> bool:
        return self.withdrawal_column is not None


def _patterns(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(s, re.IGNORECASE) for s in sources)


_FORMATS: tuple[BankFormatDescriptor, ...] = (
    BankFormatDescriptor(
        name="Generic",
        date_column="Date",
        description_column="Description",
        amount_column="Amount",
        date_notation="YYYY-MM-DD",
        identifier=("Date", "Description", "Amount"),
    ),
    # Date / Amount / Description / Balance exports
    BankFormatDescriptor(
        name="Generic_DADB",
        date_column="Date",
        description_column="Description",
        amount_column="Amount",
        date_notation="YYYY-MM-DD",
        identifier=("Date", "Amount", "Description", "Balance"),
    ),
    BankFormatDescriptor(
        name="RBC",
        date_column="Transaction Date",
        description_column="Description 1",
        amount_column="CAD$",
        date_notation="MM/DD/YYYY",
        identifier=(
            "Account Type",
            "Account Number",
            "Transaction Date",
            "Description 1",
            "CAD$",
        ),
    ),
    BankFormatDescriptor(
        name="TD",
        date_column="Date",
        description_column="Description",
        withdrawal_column="Withdrawals",
        deposit_column="Deposits",
        date_notation="MM/DD/YYYY",
        identifier=("Date", "Description", "Withdrawals", "Deposits", "Balance"),
    ),
    BankFormatDescriptor(
        name="Scotia",
        date_column="Date",
        description_column="Transaction Details",
        amount_column="Amount",
        date_notation="DD/MM/YYYY",
        identifier=("Date", "Transaction Details", "Amount"),
    ),
    BankFormatDescriptor(
        name="Scotia_DayToDay",
        date_column="Date",
        description_column="Description",
        amount_column="Amount",
        date_notation="YYYY-MM-DD",
        identifier=(
            "Date",
            "Description",
            "Sub-description",
            "Type of Transaction",
            "Amount",
        ),
    ),
    BankFormatDescriptor(
        name="BMO",
        date_column="Date Posted",
        description_column="Description",
        amount_column="Transaction Amount",
        date_notation="MM/DD/YYYY",
        identifier=(
            "First Bank Card",
            "Transaction Type",
            "Date Posted",
            "Transaction Amount",
            "Description",
        ),
    ),
    BankFormatDescriptor(
        name="CIBC",
        date_column="Date",
        description_column="Description",
        withdrawal_column="Debit",
        deposit_column="Credit",
        date_notation="YYYY-MM-DD",
        identifier=("Date", "Description", "Debit", "Credit"),
    ),
    # Files like "5000 BT Records.csv"
    BankFormatDescriptor(
        name="BT_Records",
        date_column="Date",
        description_column="Description",
        amount_column="Amount",
        date_notation="DD/MM/YYYY",
        identifier=("Date", "Reference", "Description", "Amount"),
        filename_hints=("bt records", "bt_records"),
    ),
    BankFormatDescriptor(
        name="InternetBanking",
        date_column="Date",
        description_column="Description",
        withdrawal_column="Withdrawal",
        deposit_column="Deposit",
        date_notation="YYYY-MM-DD",
        identifier=("Date", "Description", "Withdrawal", "Deposit"),
        patterns=_patterns(
            r"Internet\s*Banking",
            r"Online\s*Banking",
            r"\bE-?TRANSFER\b",
            r"\bINTERAC\b",
        ),
    ),
    BankFormatDescriptor(
        name="ElectronicTransfer",
        date_column="Date",
        description_column="Description",
        amount_column="Amount",
        date_notation="YYYY-MM-DD",
        identifier=("Date", "Description", "Transaction Type", "Amount"),
        patterns=_patterns(
            r"Electronic\s*Funds\s*Transfer",
            r"MISC\s*PAYMENT",
            r"LOAN\s*PAYMENT",
            r"PRE-AUTH\s*DEBIT",
            r"GOVERNMENT\s*CANADA",
        ),
    ),
)

BANK_FORMATS: MappingProxyType[str, BankFormatDescriptor] = MappingProxyType(
    {f.name: f for f in _FORMATS}
)


def is_bank_format(name: str) -> bool:
    return name in BANK_FORMATS


def get_bank_format(name: str) -> BankFormatDescriptor:
    """Return the registered descriptor for ``name``.

    Raises ``ValueError`` for names that are not registered (including
    ``"Unknown"``).
    """

    try:
        return BANK_FORMATS[name]
    except KeyError:
        raise ValueError(
            f"unknown bank format: {name!r}. Known: {', '.join(BANK_FORMATS)}"
        ) from None


__all__ = [
    "BANK_FORMATS",
    "UNKNOWN_FORMAT",
    "BankFormatDescriptor",
    "DateNotation",
    "get_bank_format",
    "is_bank_format",
]
