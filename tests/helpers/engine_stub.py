"""Test helper standing in for an external categorization engine.

Tests supply a ``mapping`` callable from a transaction to the reply the engine
should give (a mapping, a ``CategoryAssignment``, or an exception instance to
raise). Every call is recorded so tests can assert on order and count.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from statement_ingest.models import Transaction


class EngineStub:
    def __init__(self, mapping: Callable[[Transaction], Any]) -> None:
        self._mapping = mapping
        self.calls: list[Transaction] = []

    def categorize(self, transaction: Transaction) -> Any:
        self.calls.append(transaction)
        reply = self._mapping(transaction)
        if isinstance(reply, BaseException):
            raise reply
        return reply


def fixed_reply(
    account_code: str = "5100", confidence: float = 90.0, category: str = "Meals"
) -> Callable[[Transaction], dict[str, Any]]:
    def _reply(_tx: Transaction) -> dict[str, Any]:
        return {"account_code": account_code, "confidence": confidence, "category": category}

    return _reply
