from __future__ import annotations

import pytest

from statement_ingest.headers import (
    ACCEPT_THRESHOLD,
    classify_header,
    find_split_amount_columns,
    header_formatting_suggestions,
    map_headers,
    near_miss_headers,
    normalize_header,
    similarity,
)


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Date", "date"),
        ("  Txn_Dt ", "transaction date"),
        ("AMT", "amount"),
        ("Desc.", "description"),
        ("Desciption", "description"),
        ("Running  Bal", "running balance"),
        ("Ref #", "reference"),
        ("Amount Column", "amount"),
        ("CAD$", "cad"),
        ("Sub-description", "sub description"),
        ("", ""),
    ],
)
def test_normalize_header(label: str, expected: str) -> None:
    assert normalize_header(label) == expected


def test_abbreviations_expand_whole_words_only() -> None:
    # "category" must not be mangled by the "cat" abbreviation.
    assert normalize_header("Category") == "category"
    assert normalize_header("Debit") == "debit"


def test_similarity_rules() -> None:
    assert similarity("date", "date") == 1.0
    assert similarity("date", "transaction date") == 0.7
    assert similarity("transaction date", "date") == 0.7
    assert similarity("abc", "xyz") == 0.0
    assert similarity("", "date") == 0.0
    assert similarity("amuont", "amount") == 1.0
    assert similarity("ab", "abcd") == 0.7


def test_classify_exact_pattern() -> None:
    result = classify_header("Posting Date")
    assert result.field_type == "date"
    assert result.confidence == 1.0
    assert "posting date" not in result.alternatives
    assert "date" in result.alternatives


@pytest.mark.parametrize(
    ("label", "field_type"),
    [
        ("Transaction Details", "description"),
        ("Payee", "description"),
        ("Memo", "description"),
        ("Amount", "amount"),
        ("Value", "amount"),
        ("Running Balance", "balance"),
        ("Cheque Number", "reference"),
        ("Category", "category"),
        ("Txn Date", "date"),
        ("Amt", "amount"),
    ],
)
def test_classify_common_labels(label: str, field_type: str) -> None:
    result = classify_header(label)
    assert result.field_type == field_type
    assert result.confidence > ACCEPT_THRESHOLD


def test_classify_unrecognizable_label() -> None:
    assert classify_header("").field_type == "unknown"
    assert classify_header("Col1").confidence <= ACCEPT_THRESHOLD


def test_map_headers_keeps_best_header_per_type() -> None:
    mapping = map_headers(["Transaction Date", "Date", "Description", "Amount", "Balance"])
    assert mapping.column("date") == "Transaction Date"
    assert mapping.confidence["date"] == 1.0
    assert mapping.column("description") == "Description"
    assert mapping.column("amount") == "Amount"
    assert mapping.column("balance") == "Balance"
    assert mapping.column("reference") is None


def test_map_headers_drops_low_scores() -> None:
    assert dict(map_headers(["Col1", "Col2", "Col3"]).columns) == {}


def test_find_split_amount_columns() -> None:
    assert find_split_amount_columns(["Date", "Withdrawals", "Deposits"]) == (
        "Withdrawals",
        "Deposits",
    )
    assert find_split_amount_columns(["Date", "Debit", "Credit"]) == ("Debit", "Credit")
    assert find_split_amount_columns(["Date", "Money Out", "Money In"]) == (
        "Money Out",
        "Money In",
    )
    assert find_split_amount_columns(["Date", "Debit"]) is None


def test_near_miss_excludes_accepted_headers() -> None:
    assert near_miss_headers(["Date", "Description"], "date") == []
    assert near_miss_headers(["Col1", "Col2"], "amount") == []


def test_formatting_suggestions_for_standard_headers() -> None:
    advice = header_formatting_suggestions(["Date", "Description", "Amount"])
    assert advice.warnings == ()
    assert advice.recommended_headers == ("Date", "Description", "Amount")
    assert advice.suggestions == (
        'Consider adding a "Balance" column for running balance information',
        'Consider adding a "Reference" column for transaction IDs or check numbers',
    )


def test_formatting_suggestions_for_nonstandard_headers() -> None:
    advice = header_formatting_suggestions(["Txn Date", "Memo", "Value", "Balance", "Ref"])
    assert advice.warnings == ()
    assert 'Consider renaming "Txn Date" to "Date" for better compatibility' in advice.suggestions
    assert 'Consider renaming "Memo" to "Description" for better compatibility' in advice.suggestions
    assert 'Consider renaming "Value" to "Amount" for better compatibility' in advice.suggestions
    assert not any("Balance" in s for s in advice.suggestions)


def test_formatting_suggestions_for_missing_roles() -> None:
    advice = header_formatting_suggestions(["Col1", "Col2", "tRaNs$ DaTe"])
    assert "Description column is required for categorization" in advice.warnings
    assert "Amount column is required for financial calculations" in advice.warnings
    assert 'Remove special characters from "tRaNs$ DaTe" for better compatibility' in (
        advice.suggestions
    )
    assert 'Consider using consistent casing for "tRaNs$ DaTe"' in advice.suggestions


def test_near_miss_lists_unaccepted_lookalikes() -> None:
    assert near_miss_headers(["Date", "Info", "Amount"], "description") == ["Info"]
