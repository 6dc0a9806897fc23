"""Derived projections over the ledger: filtering, searching, sorting and totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import MAX_PREC, Decimal, localcontext
from enum import Enum
from typing import Iterable, Tuple

from .models import Transaction

__all__ = [
    "FilterType",
    "LedgerView",
    "Totals",
    "ViewState",
    "build_view",
    "compute_totals",
    "visible_transactions",
]

EMPTY_PLACEHOLDER = "No transactions to show."


class FilterType(str, Enum):
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


@dataclass
class ViewState:
    """Ephemeral filter and search criteria; never persisted."""

    filter_type: FilterType = FilterType.ALL
    search_text: str = ""

    @property
    def needle(self) -> str:
        return self.search_text.strip().lower()


@dataclass(frozen=True)
class Totals:
    income: Decimal = Decimal("0.00")
    expense: Decimal = Decimal("0.00")

    @property
    def balance(self) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = MAX_PREC
            return self.income + self.expense

    def to_dict(self) -> dict:
        return {
            "balance": f"{self.balance:.2f}",
            "income": f"{self.income:.2f}",
            "expense": f"{self.expense:.2f}",
        }


@dataclass(frozen=True)
class LedgerView:
    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)
    totals: Totals = field(default_factory=Totals)

    @property
    def is_empty(self) -> bool:
        """An empty visible sequence is rendered as a placeholder, not an empty list."""
        return not self.transactions


def visible_transactions(
    ledger: Iterable[Transaction], state: ViewState
) -> Tuple[Transaction, ...]:
    """Filter, search and sort a snapshot of ``ledger`` for display."""
    view = tuple(ledger)
    if state.filter_type is not FilterType.ALL:
        view = tuple(tx for tx in view if tx.type.value == state.filter_type.value)

    needle = state.needle
    if needle:
        view = tuple(
            tx for tx in view
            if needle in tx.title.lower() or needle in tx.category.lower()
        )

    # sorted() is stable with reverse=True, so equal dates keep ledger order.
    return tuple(sorted(view, key=lambda tx: tx.date, reverse=True))


def compute_totals(ledger: Iterable[Transaction]) -> Totals:
    """Aggregate the whole ledger; filters never apply here."""
    income = Decimal("0.00")
    expense = Decimal("0.00")
    with localcontext() as ctx:
        # Sums are exact; amounts may carry more digits than the default context.
        ctx.prec = MAX_PREC
        for transaction in ledger:
            if transaction.amount > 0:
                income += transaction.amount
            elif transaction.amount < 0:
                expense += transaction.amount
    return Totals(income=income, expense=expense)


def build_view(ledger: Iterable[Transaction], state: ViewState) -> LedgerView:
    snapshot = tuple(ledger)
    return LedgerView(
        transactions=visible_transactions(snapshot, state),
        totals=compute_totals(snapshot),
    )
