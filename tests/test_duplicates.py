from __future__ import annotations

from decimal import Decimal

from statement_ingest.duplicates import (
    detect_duplicates,
    duplicate_key,
    find_duplicates_of_transaction,
    format_duplicate_report,
)
from statement_ingest.models import Transaction


def _tx(
    i: int, description: str = "Coffee Shop", amount: str = "-5.50", date: str = "2024-01-15"
) -> Transaction:
    return Transaction(
        id=f"txn_t_{i}",
        date=date,
        description=description,
        original_description=description,
        amount=Decimal(amount),
    )


def test_identical_transactions_collapse_to_first() -> None:
    txs = [_tx(0), _tx(1), _tx(2, description="Salary", amount="2000.00")]
    result = detect_duplicates(txs)

    assert result.duplicate_count == 1
    assert [t.id for t in result.clean_transactions] == ["txn_t_0", "txn_t_2"]
    (group,) = result.duplicate_groups
    assert group.original_index == 0
    assert group.duplicate_indexes == (1,)
    assert group.transaction is txs[0]
    assert group.confidence == 1.0


def test_every_extra_copy_is_counted() -> None:
    txs = [_tx(0), _tx(1, description="Other"), _tx(2), _tx(3), _tx(4, description="Other")]
    result = detect_duplicates(txs)

    assert result.duplicate_count == 3
    assert [(g.original_index, g.duplicate_indexes) for g in result.duplicate_groups] == [
        (0, (2, 3)),
        (1, (4,)),
    ]
    assert [t.id for t in result.clean_transactions] == ["txn_t_0", "txn_t_1"]


def test_punctuation_and_case_do_not_matter() -> None:
    result = detect_duplicates([_tx(0, "COFFEE SHOP."), _tx(1, "coffee   shop")])
    assert result.duplicate_count == 1


def test_one_cent_difference_is_not_a_duplicate() -> None:
    result = detect_duplicates([_tx(0, amount="-5.50"), _tx(1, amount="-5.51")])
    assert result.duplicate_count == 0
    assert len(result.clean_transactions) == 2


def test_amounts_compare_after_rounding_to_cents() -> None:
    assert duplicate_key(_tx(0, amount="5.505")) == duplicate_key(_tx(1, amount="5.51"))
    assert duplicate_key(_tx(0, amount="5.5")) == duplicate_key(_tx(1, amount="5.50"))


def test_different_dates_are_not_duplicates() -> None:
    result = detect_duplicates([_tx(0, date="2024-01-15"), _tx(1, date="2024-01-16")])
    assert result.duplicate_count == 0


def test_empty_input() -> None:
    result = detect_duplicates([])
    assert result.duplicate_count == 0
    assert result.duplicate_groups == ()
    assert result.clean_transactions == ()


def test_find_duplicates_of_transaction() -> None:
    existing = [_tx(0), _tx(1, description="Other"), _tx(2)]
    assert find_duplicates_of_transaction(_tx(9), existing) == [0, 2]
    # A transaction is never reported as its own duplicate.
    assert find_duplicates_of_transaction(existing[0], existing) == [2]


def test_format_duplicate_report() -> None:
    assert format_duplicate_report(detect_duplicates([_tx(0)])) == "No duplicates detected."
    assert (
        format_duplicate_report(detect_duplicates([_tx(0), _tx(1)]))
        == "Found 1 duplicate transaction in 1 group."
    )
    assert (
        format_duplicate_report(
            detect_duplicates([_tx(0), _tx(1), _tx(2, "Other"), _tx(3, "Other")])
        )
        == "Found 2 duplicate transactions in 2 groups."
    )


def test_long_descriptions_compare_past_the_sanitized_cap() -> None:
    prefix = "Transfer to savings " * 12
    a = Transaction(
        id="txn_t_0",
        date="2024-01-15",
        description=prefix[:200],
        original_description=prefix + "ref 1001",
        amount=Decimal("-50.00"),
    )
    b = Transaction(
        id="txn_t_1",
        date="2024-01-15",
        description=prefix[:200],
        original_description=prefix + "ref 1002",
        amount=Decimal("-50.00"),
    )

    result = detect_duplicates([a, b])

    assert result.duplicate_count == 0
    assert duplicate_key(a) != duplicate_key(b)
