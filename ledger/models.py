"""Data models for the ledger domain."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

from .exceptions import ValidationError

__all__ = ["Transaction", "TransactionType", "parse_date"]


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date; no other ISO 8601 spelling is accepted."""
    value = value.strip()
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    return date.fromisoformat(value)


@dataclass(frozen=True)
class Transaction:
    id: str
    title: str
    amount: Decimal
    category: str
    date: date
    type: TransactionType

    def __post_init__(self) -> None:
        if not self.amount.is_finite():
            raise ValidationError("amount must be a finite number")
        # The sign of the amount must always agree with the type.
        if self.amount == 0:
            raise ValidationError("amount must not be zero")
        if (self.amount > 0) != (self.type is TransactionType.INCOME):
            raise ValidationError(
                f"amount {self.amount} does not match transaction type {self.type.value}"
            )

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the transaction to JSON-friendly natives."""
        return {
            "id": self.id,
            "title": self.title,
            "amount": str(self.amount),
            "category": self.category,
            "date": self.date.isoformat(),
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Hydrate a Transaction from JSON-native data."""
        return cls(
            id=data["id"],
            title=data["title"],
            amount=Decimal(str(data["amount"])),
            category=data["category"],
            date=parse_date(data["date"]),
            type=TransactionType(data["type"]),
        )
