"""Framework-agnostic ledger store."""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .exceptions import PersistenceError
from .models import Transaction, TransactionType
from .storage import KeyValueStore
from .validators import (
    TRANSACTION_TYPES,
    parse_amount,
    signed_amount,
    validate_date,
    validate_enum,
    validate_required_str,
)

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"

_BASE36_DIGITS = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits)) or "0"


def new_transaction_id() -> str:
    """Return a fresh id: a base36 timestamp followed by a random suffix.

    The random part keeps ids distinct when several are minted within the
    same clock tick.
    """
    return _base36(time.time_ns()) + secrets.token_hex(8)


def serialize_ledger(transactions: List[Transaction]) -> str:
    return json.dumps([transaction.to_dict() for transaction in transactions])


def deserialize_ledger(raw: str) -> List[Transaction]:
    """Parse a stored ledger, raising PersistenceError when it is unusable."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceError("Corrupted ledger data") from exc
    if not isinstance(payload, list):
        raise PersistenceError("Expected list payload for the ledger")

    transactions: List[Transaction] = []
    seen = set()
    for record in payload:
        try:
            transaction = Transaction.from_dict(record)
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise PersistenceError(f"Malformed transaction record: {record!r}") from exc
        if transaction.id in seen:
            raise PersistenceError(f"Duplicate transaction id {transaction.id}")
        seen.add(transaction.id)
        transactions.append(transaction)
    return transactions


class LedgerStore:
    """Owns the canonical transaction list and mirrors it to a key-value store."""

    def __init__(self, store: KeyValueStore, key: str = TRANSACTIONS_KEY) -> None:
        self._store = store
        self._key = key
        self._transactions: List[Transaction] = []
        self.load()  # Hydrate in-memory ledger from persistence on construction.

    # Public API -----------------------------------------------------------
    def load(self) -> List[Transaction]:
        """Restore the ledger from persistence, falling back to an empty ledger."""
        try:
            raw = self._store.get(self._key)
            transactions = deserialize_ledger(raw) if raw is not None else []
        except PersistenceError as exc:
            logger.warning("Could not restore ledger, starting empty: %s", exc)
            transactions = []
        self._transactions = transactions
        return list(transactions)

    def add(
        self,
        title: object,
        amount: object,
        category: object,
        date: object,
        type: object,
    ) -> Transaction:
        data = self._validate_payload(
            {"title": title, "amount": amount, "category": category, "date": date, "type": type}
        )
        transaction = Transaction(**data)
        self._transactions.append(transaction)
        logger.debug("Added transaction %s (%s)", transaction.id, transaction.title)
        self._persist()
        return transaction

    def add_from_payload(self, payload: Dict[str, Any]) -> Transaction:
        """Convenience wrapper accepting the form fields as a mapping."""
        return self.add(
            payload.get("title"),
            payload.get("amount"),
            payload.get("category"),
            payload.get("date"),
            payload.get("type"),
        )

    def remove(self, transaction_id: str) -> bool:
        remaining = [tx for tx in self._transactions if tx.id != transaction_id]
        if len(remaining) == len(self._transactions):
            return False
        self._transactions = remaining
        logger.debug("Removed transaction %s", transaction_id)
        self._persist()
        return True

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def transactions(self) -> Tuple[Transaction, ...]:
        """Return an immutable snapshot of the ledger in insertion order."""
        return tuple(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.transactions())

    def __contains__(self, transaction_id: object) -> bool:
        return any(tx.id == transaction_id for tx in self._transactions)

    # Internal helpers -----------------------------------------------------
    def _persist(self) -> None:
        # Always rewrite the full ledger; the in-memory list stays authoritative on failure.
        try:
            self._store.set(self._key, serialize_ledger(self._transactions))
        except PersistenceError:
            logger.error("Failed to persist ledger under key %r", self._key)
            raise
        except Exception as exc:
            logger.error("Failed to persist ledger under key %r", self._key)
            raise PersistenceError("Unexpected error while saving transactions") from exc

    def _validate_payload(self, payload: Dict[str, object]) -> Dict[str, object]:
        transaction_type = TransactionType(
            validate_enum(payload.get("type"), "type", TRANSACTION_TYPES)
        )
        return {
            "id": self._unique_id(),
            "title": validate_required_str(payload.get("title"), "title"),
            "amount": signed_amount(parse_amount(payload.get("amount"), "amount"), transaction_type),
            "category": validate_required_str(payload.get("category"), "category"),
            "date": validate_date(payload.get("date"), "date"),
            "type": transaction_type,
        }

    def _unique_id(self) -> str:
        candidate = new_transaction_id()
        while candidate in self:
            candidate = new_transaction_id()
        return candidate
