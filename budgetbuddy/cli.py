"""Console interface for the BudgetBuddy ledger."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ledger.config import Settings, configure_logging
from ledger.dispatcher import (
    DeleteTransaction,
    LedgerController,
    SetFilterType,
    SetSearchText,
    SubmitTransaction,
)
from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.formatting import format_amount, format_total
from ledger.models import Transaction, TransactionType, parse_date
from ledger.notifications import Notification, Severity
from ledger.preferences import Theme, ThemePreference
from ledger.services import LedgerStore
from ledger.storage import FileStore
from ledger.view import EMPTY_PLACEHOLDER, FilterType, LedgerView


def _parse_date(value: str) -> str:
    try:
        parse_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _format_transaction(transaction: Transaction) -> str:
    return (
        f"[{transaction.id}] {transaction.date.isoformat()} {format_amount(transaction.amount)}\n"
        f"  {transaction.title} | Category: {transaction.category} | Type: {transaction.type.value}\n"
    )


def _format_totals(view: LedgerView) -> str:
    totals = view.totals
    return (
        f"Balance: {format_total(totals.balance)} | "
        f"Income: {format_total(totals.income)} | "
        f"Expense: {format_total(abs(totals.expense))}"
    )


def _print_notifications(notifications: List[Notification]) -> None:
    for notification in notifications:
        stream = sys.stderr if notification.severity is Severity.ERROR else sys.stdout
        print(notification.message, file=stream)


def _load_controller(data_dir: Path) -> tuple[LedgerController, ThemePreference]:
    backend = FileStore(data_dir)
    controller = LedgerController(LedgerStore(backend))
    return controller, ThemePreference(backend)


def handle_add(args: argparse.Namespace, controller: LedgerController) -> int:
    result = controller.dispatch(SubmitTransaction({
        "title": args.title,
        "amount": args.amount,
        "category": args.category,
        "date": args.date,
        "type": args.type,
    }))
    _print_notifications(result.notifications)
    result.raise_for_error()
    print(_format_transaction(result.transaction))
    return 0


def handle_list(args: argparse.Namespace, controller: LedgerController) -> int:
    controller.dispatch(SetFilterType(FilterType(args.type)))
    view = controller.dispatch(SetSearchText(args.search or "")).view
    if view.is_empty:
        print(EMPTY_PLACEHOLDER)
    else:
        print(f"Showing {len(view.transactions)} transactions:")
        for transaction in view.transactions:
            print(_format_transaction(transaction))
    print(_format_totals(view))
    return 0


def handle_delete(args: argparse.Namespace, controller: LedgerController) -> int:
    result = controller.dispatch(DeleteTransaction(args.id))
    _print_notifications(result.notifications)
    result.raise_for_error()
    if not result.removed:
        raise RecordNotFoundError(f"Transaction {args.id} not found")
    return 0


def handle_summary(args: argparse.Namespace, controller: LedgerController) -> int:
    print(_format_totals(controller.view()))
    return 0


def handle_theme(args: argparse.Namespace, preference: ThemePreference) -> int:
    if args.choice == "toggle":
        theme = preference.toggle()
    elif args.choice:
        theme = preference.save(Theme(args.choice))
    else:
        theme = preference.load()
    print(f"Theme: {theme.value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="BudgetBuddy ledger CLI")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory holding the ledger store (default: $BUDGETBUDDY_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: $BUDGETBUDDY_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Record a new transaction")
    add_parser.add_argument("title")
    add_parser.add_argument("amount")
    add_parser.add_argument("category")
    add_parser.add_argument("date", type=_parse_date)
    add_parser.add_argument("type", choices=[member.value for member in TransactionType])

    list_parser = subparsers.add_parser("list", help="List transactions, most recent first")
    list_parser.add_argument(
        "--type",
        default=FilterType.ALL.value,
        choices=[member.value for member in FilterType],
    )
    list_parser.add_argument("--search", help="Case-insensitive match on title or category")

    delete_parser = subparsers.add_parser("delete", help="Delete a transaction")
    delete_parser.add_argument("id")

    subparsers.add_parser("summary", help="Show balance, income and expense totals")

    theme_parser = subparsers.add_parser("theme", help="Show or change the theme preference")
    theme_parser.add_argument(
        "choice",
        nargs="?",
        choices=[member.value for member in Theme] + ["toggle"],
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)

    try:
        controller, preference = _load_controller(args.data_dir or settings.data_dir)
        if args.command == "add":
            return handle_add(args, controller)
        if args.command == "list":
            return handle_list(args, controller)
        if args.command == "delete":
            return handle_delete(args, controller)
        if args.command == "summary":
            return handle_summary(args, controller)
        if args.command == "theme":
            return handle_theme(args, preference)
        parser.error(f"Unknown command: {args.command}")  # pragma: no cover - argparse should prevent this
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
