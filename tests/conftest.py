"""Shared fixtures for the ledger test-suite.

Every test gets its own in-memory store so no ledger state leaks between
tests, and the environment is scrubbed of ``BUDGETBUDDY_*`` overrides.
"""

from __future__ import annotations

import logging
from typing import Optional

import pytest

import ledger.config
from ledger.dispatcher import LedgerController
from ledger.exceptions import PersistenceError
from ledger.notifications import CollectingNotifier
from ledger.services import LedgerStore
from ledger.storage import MemoryStore


class FailingStore(MemoryStore):
    """Memory store whose writes can be switched to fail."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fail_writes = False
        self.fail_reads = False

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise PersistenceError("backing store unavailable")
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceError("backing store is read-only")
        super().set(key, value)


SALARY = {
    "title": "Salary",
    "amount": 5000,
    "category": "Job",
    "date": "2024-01-01",
    "type": "income",
}
COFFEE = {
    "title": "Coffee",
    "amount": 50,
    "category": "Food",
    "date": "2024-01-02",
    "type": "expense",
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BUDGETBUDDY_DATA_DIR",
        "BUDGETBUDDY_ENV",
        "BUDGETBUDDY_ALLOWED_ORIGINS",
        "BUDGETBUDDY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch: pytest.MonkeyPatch):
    """Drop handlers the CLI attaches so they never outlive a captured stream."""
    logger = logging.getLogger("ledger")
    handlers, level = list(logger.handlers), logger.level
    monkeypatch.setattr(ledger.config, "_configured", False)
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def ledger_store(memory_store: MemoryStore) -> LedgerStore:
    return LedgerStore(memory_store)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def controller(ledger_store: LedgerStore, notifier: CollectingNotifier) -> LedgerController:
    return LedgerController(ledger_store, notifier=notifier)
