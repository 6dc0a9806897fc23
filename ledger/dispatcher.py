"""Single entry point translating user intents into ledger and view changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

from .exceptions import PersistenceError, ValidationError
from .models import Transaction
from .notifications import Notification, Notifier, Severity
from .services import LedgerStore
from .view import FilterType, LedgerView, ViewState, build_view

logger = logging.getLogger(__name__)

MSG_ADDED = "Transaction added!"
MSG_DELETED = "Transaction deleted."
MSG_INVALID = "Please fill all fields correctly!"
MSG_NOT_SAVED = "Change kept for this session but could not be saved; it may be lost on restart."


@dataclass(frozen=True)
class SubmitTransaction:
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteTransaction:
    transaction_id: str


@dataclass(frozen=True)
class SetFilterType:
    value: FilterType


@dataclass(frozen=True)
class SetSearchText:
    value: str


Intent = Union[SubmitTransaction, DeleteTransaction, SetFilterType, SetSearchText]
Renderer = Callable[[LedgerView], None]


@dataclass
class DispatchResult:
    view: LedgerView
    transaction: Optional[Transaction] = None
    removed: bool = False
    error: Optional[Exception] = None
    notifications: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class LedgerController:
    """Applies intents to the ledger store and view state, then re-renders.

    The notifier and renderer are optional; when absent, the corresponding
    events are simply dropped.
    """

    def __init__(
        self,
        store: LedgerStore,
        state: Optional[ViewState] = None,
        notifier: Optional[Notifier] = None,
        renderer: Optional[Renderer] = None,
    ) -> None:
        self.store = store
        self.state = state if state is not None else ViewState()
        self.notifier = notifier
        self.renderer = renderer

    def view(self) -> LedgerView:
        return build_view(self.store.transactions(), self.state)

    def dispatch(self, intent: Intent) -> DispatchResult:
        result = DispatchResult(view=LedgerView())
        if isinstance(intent, SubmitTransaction):
            self._submit(intent, result)
        elif isinstance(intent, DeleteTransaction):
            self._delete(intent, result)
        elif isinstance(intent, SetFilterType):
            self.state.filter_type = FilterType(intent.value)
        elif isinstance(intent, SetSearchText):
            self.state.search_text = intent.value or ""
        else:
            raise TypeError(f"Unsupported intent: {intent!r}")

        result.view = self.view()
        if self.renderer is not None:
            self.renderer(result.view)
        return result

    def _submit(self, intent: SubmitTransaction, result: DispatchResult) -> None:
        before = len(self.store)
        try:
            result.transaction = self.store.add_from_payload(dict(intent.fields))
        except ValidationError as exc:
            logger.info("Rejected transaction: %s", exc)
            result.error = exc
            self._notify(result, MSG_INVALID, Severity.ERROR)
            return
        except PersistenceError as exc:
            # The transaction stays in memory; only durability is in doubt.
            if len(self.store) > before:
                result.transaction = self.store.transactions()[-1]
            result.error = exc
            self._notify(result, MSG_ADDED, Severity.SUCCESS)
            self._notify(result, MSG_NOT_SAVED, Severity.ERROR)
            return
        self._notify(result, MSG_ADDED, Severity.SUCCESS)

    def _delete(self, intent: DeleteTransaction, result: DispatchResult) -> None:
        try:
            result.removed = self.store.remove(intent.transaction_id)
        except PersistenceError as exc:
            result.removed = True
            result.error = exc
            self._notify(result, MSG_DELETED, Severity.INFO)
            self._notify(result, MSG_NOT_SAVED, Severity.ERROR)
            return
        if result.removed:
            self._notify(result, MSG_DELETED, Severity.INFO)

    def _notify(self, result: DispatchResult, message: str, severity: Severity) -> None:
        notification = Notification(message=message, severity=severity)
        result.notifications.append(notification)
        if self.notifier is not None:
            self.notifier.notify(notification)
