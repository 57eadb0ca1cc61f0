from __future__ import annotations

from decimal import Decimal

import pytest

from statement_ingest.categorization import (
    PLACEHOLDER_ASSIGNMENT,
    CategorizationEngine,
    categorize_transactions,
)
from statement_ingest.models import CategoryAssignment, Transaction
from tests.helpers.engine_stub import EngineStub, fixed_reply


def _txs(n: int) -> list[Transaction]:
    return [
        Transaction(
            id=f"txn_c_{i}",
            date="2024-01-15",
            description=f"Merchant {i}",
            original_description=f"Merchant {i}",
            amount=Decimal("-10.00"),
        )
        for i in range(n)
    ]


def test_stub_satisfies_engine_protocol() -> None:
    assert isinstance(EngineStub(fixed_reply()), CategorizationEngine)


def test_replies_are_applied_in_order() -> None:
    engine = EngineStub(fixed_reply(account_code="5100", confidence=92, category="Meals"))
    txs = _txs(3)

    out = categorize_transactions(txs, engine)

    assert [t.id for t in engine.calls] == ["txn_c_0", "txn_c_1", "txn_c_2"]
    assert [t.id for t in out] == ["txn_c_0", "txn_c_1", "txn_c_2"]
    assert all(t.account_code == "5100" for t in out)
    assert all(t.confidence == 92.0 for t in out)
    assert all(t.category == "Meals" and t.ai_categorized for t in out)
    # Inputs are never mutated.
    assert txs[0].account_code is None


def test_engine_failure_gets_placeholder() -> None:
    def mapping(tx: Transaction):
        if tx.id == "txn_c_1":
            return RuntimeError("engine down")
        return {"account_code": "6000", "confidence": 85, "category": "Office"}

    out = categorize_transactions(_txs(3), EngineStub(mapping))

    assert [t.account_code for t in out] == ["6000", "9999", "6000"]
    assert out[1].confidence == 0.0
    assert out[1].category == "Uncategorized"
    assert not out[1].ai_categorized


@pytest.mark.parametrize(
    "reply",
    [
        {"account_code": "6000", "confidence": 150, "category": "Office"},
        {"account_code": "6000", "category": "Office"},
        "6000",
        None,
    ],
)
def test_invalid_replies_get_placeholder(reply: object) -> None:
    (out,) = categorize_transactions(_txs(1), EngineStub(lambda _tx: reply))
    assert out.account_code == PLACEHOLDER_ASSIGNMENT.account_code
    assert out.confidence == 0.0


def test_assignment_model_cleans_reply() -> None:
    reply = {
        "account_code": " 5100 ",
        "confidence": "77.5",
        "category": "Meals",
        "merchant": "  ",
        "debug": {"tokens": 12},
    }
    (out,) = categorize_transactions(_txs(1), EngineStub(lambda _tx: reply))
    assert out.account_code == "5100"
    assert out.confidence == 77.5
    assert out.merchant is None


def test_assignment_instances_pass_through() -> None:
    assignment = CategoryAssignment(
        account_code="4000", confidence=99, category="Income", merchant="ACME"
    )
    (out,) = categorize_transactions(_txs(1), EngineStub(lambda _tx: assignment))
    assert out.merchant == "ACME"
    assert out.account_code == "4000"
