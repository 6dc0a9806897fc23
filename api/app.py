"""Flask REST API exposing the ledger controller."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ledger.config import Settings
from ledger.dispatcher import (
    DeleteTransaction,
    LedgerController,
    SubmitTransaction,
)
from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.formatting import format_amount, format_total
from ledger.notifications import LoggingNotifier, Notification
from ledger.preferences import Theme, ThemePreference
from ledger.services import LedgerStore
from ledger.storage import FileStore, KeyValueStore
from ledger.view import EMPTY_PLACEHOLDER, FilterType, LedgerView, Totals, ViewState, build_view


def _transaction_payload(transaction) -> Dict[str, Any]:
    payload = transaction.to_dict()
    payload["display_amount"] = format_amount(transaction.amount)
    return payload


def _totals_payload(totals: Totals) -> Dict[str, Any]:
    return {
        **totals.to_dict(),
        "display": {
            "balance": format_total(totals.balance),
            "income": format_total(totals.income),
            "expense": format_total(abs(totals.expense)),
        },
    }


def _view_payload(view: LedgerView) -> Dict[str, Any]:
    return {
        "items": [_transaction_payload(tx) for tx in view.transactions],
        "empty": view.is_empty,
        "placeholder": EMPTY_PLACEHOLDER if view.is_empty else None,
        "totals": _totals_payload(view.totals),
    }


def _notifications_payload(notifications: Iterable[Notification]) -> list:
    return [notification.to_dict() for notification in notifications]


def create_app(
    data_dir: Optional[Path] = None,
    store: Optional[KeyValueStore] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    backend = store if store is not None else FileStore(Path(data_dir or settings.data_dir))
    controller = LedgerController(LedgerStore(backend), notifier=LoggingNotifier())
    theme = ThemePreference(backend)
    # Requests run on worker threads; the ledger list is only touched under this lock.
    ledger_lock = threading.Lock()

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _filter_type(raw: Optional[str]) -> FilterType:
        value = (raw or FilterType.ALL.value).strip().lower()
        try:
            return FilterType(value)
        except ValueError as exc:
            allowed = ", ".join(member.value for member in FilterType)
            raise ValidationError(f"type must be one of: {allowed}") from exc

    @app.get("/transactions")
    def list_transactions():
        state = ViewState(
            filter_type=_filter_type(request.args.get("type")),
            search_text=request.args.get("q", ""),
        )
        with ledger_lock:
            snapshot = controller.store.transactions()
        return _success(_view_payload(build_view(snapshot, state)))

    @app.post("/transactions")
    def create_transaction():
        payload = _json_body()
        with ledger_lock:
            result = controller.dispatch(SubmitTransaction(payload))
        if isinstance(result.error, ValidationError):
            return jsonify({
                "error": "Validation error",
                "details": str(result.error),
                "notifications": _notifications_payload(result.notifications),
            }), 400
        body = {
            "item": _transaction_payload(result.transaction),
            "notifications": _notifications_payload(result.notifications),
            "persisted": result.ok,
        }
        if not result.ok:
            app.logger.error("Transaction %s kept in memory only: %s", result.transaction.id, result.error)
        return _success(body, 201)

    @app.delete("/transactions/<transaction_id>")
    def delete_transaction(transaction_id: str):
        with ledger_lock:
            result = controller.dispatch(DeleteTransaction(transaction_id))
        if not result.removed:
            raise RecordNotFoundError(f"Transaction {transaction_id} not found")
        if not result.ok:
            app.logger.error("Deletion of %s kept in memory only: %s", transaction_id, result.error)
            return _success({
                "notifications": _notifications_payload(result.notifications),
                "persisted": False,
            })
        return _success({}, 204)

    @app.get("/summary")
    def summary():
        with ledger_lock:
            totals = controller.view().totals
        return _success(_totals_payload(totals))

    @app.get("/theme")
    def get_theme():
        return _success({"theme": theme.load().value})

    @app.put("/theme")
    def put_theme():
        payload = _json_body()
        raw = str(payload.get("theme", "")).strip().lower()
        try:
            selected = Theme(raw)
        except ValueError as exc:
            raise ValidationError("theme must be one of: dark, light") from exc
        return _success({"theme": theme.save(selected).value})

    @app.post("/theme/toggle")
    def toggle_theme():
        return _success({"theme": theme.toggle().value})

    return app
