"""Core business logic package for the BudgetBuddy ledger."""

from .dispatcher import (
    DeleteTransaction,
    DispatchResult,
    LedgerController,
    SetFilterType,
    SetSearchText,
    SubmitTransaction,
)
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .models import Transaction, TransactionType
from .services import LedgerStore
from .storage import FileStore, KeyValueStore, MemoryStore
from .view import FilterType, LedgerView, Totals, ViewState, build_view

__all__ = [
    "DeleteTransaction",
    "DispatchResult",
    "FileStore",
    "FilterType",
    "KeyValueStore",
    "LedgerController",
    "LedgerStore",
    "LedgerView",
    "MemoryStore",
    "PersistenceError",
    "RecordNotFoundError",
    "SetFilterType",
    "SetSearchText",
    "SubmitTransaction",
    "Totals",
    "Transaction",
    "TransactionType",
    "ValidationError",
    "ViewState",
    "build_view",
]
