"""Tests for the LedgerStore: validation, sign handling, ids and persistence."""

import json
from decimal import Decimal

import pytest

from conftest import COFFEE, SALARY, FailingStore
from ledger.exceptions import PersistenceError, ValidationError
from ledger.models import TransactionType
from ledger.services import (
    TRANSACTIONS_KEY,
    LedgerStore,
    deserialize_ledger,
    new_transaction_id,
    serialize_ledger,
)
from ledger.storage import MemoryStore


class TestAdd:
    """Tests for LedgerStore.add."""

    def test_add_returns_normalised_transaction(self, ledger_store):
        transaction = ledger_store.add_from_payload(SALARY)
        assert transaction.title == "Salary"
        assert transaction.amount == Decimal("5000.00")
        assert transaction.type is TransactionType.INCOME
        assert transaction.date.isoformat() == "2024-01-01"
        assert ledger_store.transactions() == (transaction,)

    @pytest.mark.parametrize(
        "raw_amount, transaction_type, expected",
        [
            ("50", "expense", Decimal("-50.00")),
            ("-50", "expense", Decimal("-50.00")),
            ("75.5", "income", Decimal("75.50")),
            ("-75.5", "income", Decimal("75.50")),
        ],
    )
    def test_sign_follows_type_regardless_of_input_sign(
        self, ledger_store, raw_amount, transaction_type, expected
    ):
        transaction = ledger_store.add("Entry", raw_amount, "Misc", "2024-03-01", transaction_type)
        assert transaction.amount == expected
        assert (transaction.amount > 0) == (transaction.type is TransactionType.INCOME)

    def test_title_and_category_are_trimmed(self, ledger_store):
        transaction = ledger_store.add("  Rent ", "900", " Home ", "2024-02-01", "expense")
        assert transaction.title == "Rent"
        assert transaction.category == "Home"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("title", ""),
            ("title", "   "),
            ("amount", "twelve"),
            ("amount", ""),
            ("category", ""),
            ("date", ""),
            ("date", "01/02/2024"),
            ("date", "20240101"),
            ("date", "2024-W01-1"),
            ("type", ""),
            ("type", "transfer"),
        ],
    )
    def test_invalid_fields_raise_without_mutation(self, ledger_store, memory_store, field, value):
        ledger_store.add_from_payload(SALARY)
        stored_before = memory_store.get(TRANSACTIONS_KEY)
        payload = {**COFFEE, field: value}

        with pytest.raises(ValidationError):
            ledger_store.add_from_payload(payload)

        assert len(ledger_store) == 1
        assert memory_store.get(TRANSACTIONS_KEY) == stored_before

    def test_missing_field_is_a_validation_error(self, ledger_store):
        payload = dict(COFFEE)
        del payload["category"]
        with pytest.raises(ValidationError):
            ledger_store.add_from_payload(payload)
        assert len(ledger_store) == 0

    def test_add_persists_the_full_ledger(self, ledger_store, memory_store):
        first = ledger_store.add_from_payload(SALARY)
        second = ledger_store.add_from_payload(COFFEE)
        stored = json.loads(memory_store.get(TRANSACTIONS_KEY))
        assert [record["id"] for record in stored] == [first.id, second.id]
        assert stored[1] == {
            "id": second.id,
            "title": "Coffee",
            "amount": "-50.00",
            "category": "Food",
            "date": "2024-01-02",
            "type": "expense",
        }


class TestIds:
    """Tests for transaction id generation."""

    def test_ids_are_unique_under_rapid_additions(self, ledger_store):
        ids = {
            ledger_store.add(f"Item {n}", n + 1, "Bulk", "2024-01-01", "expense").id
            for n in range(500)
        }
        assert len(ids) == 500

    def test_ids_are_unique_when_clock_does_not_move(self, monkeypatch):
        monkeypatch.setattr("ledger.services.time.time_ns", lambda: 1_700_000_000_000_000_000)
        ids = {new_transaction_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_id_combines_time_and_random_parts(self, monkeypatch):
        monkeypatch.setattr("ledger.services.time.time_ns", lambda: 36 ** 3)
        transaction_id = new_transaction_id()
        assert transaction_id.startswith("1000")
        assert len(transaction_id) == 4 + 16


class TestRemove:
    """Tests for LedgerStore.remove."""

    def test_remove_existing(self, ledger_store, memory_store):
        salary = ledger_store.add_from_payload(SALARY)
        coffee = ledger_store.add_from_payload(COFFEE)

        assert ledger_store.remove(salary.id) is True
        assert ledger_store.transactions() == (coffee,)
        stored = json.loads(memory_store.get(TRANSACTIONS_KEY))
        assert [record["id"] for record in stored] == [coffee.id]

    def test_remove_unknown_id_is_a_noop(self, ledger_store, memory_store):
        ledger_store.add_from_payload(SALARY)
        ledger_store.add_from_payload(COFFEE)
        before = ledger_store.transactions()
        stored_before = memory_store.get(TRANSACTIONS_KEY)

        assert ledger_store.remove("nonexistent-id") is False
        assert ledger_store.transactions() == before
        assert memory_store.get(TRANSACTIONS_KEY) == stored_before

    def test_lookup_helpers(self, ledger_store):
        salary = ledger_store.add_from_payload(SALARY)
        assert salary.id in ledger_store
        assert ledger_store.get(salary.id) == salary
        assert ledger_store.get("missing") is None
        assert list(ledger_store) == [salary]


class TestLoad:
    """Tests for restoring the ledger from the key-value store."""

    def test_missing_value_yields_empty_ledger(self, memory_store):
        assert LedgerStore(memory_store).transactions() == ()

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{\"id\": 1}",
            "[{\"id\": \"a\"}]",
            "[{\"id\": \"a\", \"title\": \"T\", \"amount\": \"-5\", \"category\": \"C\", "
            "\"date\": \"2024-01-01\", \"type\": \"income\"}]",
            "[1, 2]",
            "[{\"id\": \"a\", \"title\": \"T\", \"amount\": Infinity, \"category\": \"C\", "
            "\"date\": \"2024-01-01\", \"type\": \"income\"}]",
            "null",
        ],
    )
    def test_corrupted_value_yields_empty_ledger(self, raw):
        store = LedgerStore(MemoryStore({TRANSACTIONS_KEY: raw}))
        assert store.transactions() == ()

    def test_duplicate_ids_are_treated_as_corruption(self):
        record = {
            "id": "dup",
            "title": "T",
            "amount": "5",
            "category": "C",
            "date": "2024-01-01",
            "type": "income",
        }
        raw = json.dumps([record, record])
        assert LedgerStore(MemoryStore({TRANSACTIONS_KEY: raw})).transactions() == ()

    def test_read_failure_yields_empty_ledger(self):
        backend = FailingStore()
        backend.fail_reads = True
        assert LedgerStore(backend).load() == []

    def test_round_trip_restores_same_ledger(self, ledger_store, memory_store):
        ledger_store.add_from_payload(SALARY)
        ledger_store.add_from_payload(COFFEE)
        ledger_store.add("Refund", "19.99", "Shopping", "2024-01-02", "income")

        restored = LedgerStore(memory_store)
        assert restored.transactions() == ledger_store.transactions()

    def test_load_is_idempotent(self, ledger_store):
        ledger_store.add_from_payload(SALARY)
        first = ledger_store.load()
        second = ledger_store.load()
        assert first == second
        assert len(ledger_store) == 1

    def test_serialize_round_trip_of_empty_ledger(self):
        assert deserialize_ledger(serialize_ledger([])) == []

    def test_deserialize_raises_on_garbage(self):
        with pytest.raises(PersistenceError):
            deserialize_ledger("[")


class TestWriteFailures:
    """A failing store must not corrupt the in-memory ledger."""

    def test_failed_write_keeps_added_transaction_in_memory(self, failing_store):
        store = LedgerStore(failing_store)
        failing_store.fail_writes = True

        with pytest.raises(PersistenceError):
            store.add_from_payload(SALARY)

        assert len(store) == 1
        assert store.transactions()[0].title == "Salary"

    def test_failed_write_keeps_removal_in_memory(self, failing_store):
        store = LedgerStore(failing_store)
        salary = store.add_from_payload(SALARY)
        failing_store.fail_writes = True

        with pytest.raises(PersistenceError):
            store.remove(salary.id)

        assert len(store) == 0
        # The persisted mirror still holds the old state.
        assert LedgerStore(failing_store).transactions() == (salary,)

    def test_unexpected_store_errors_are_wrapped(self):
        class BrokenStore(MemoryStore):
            def set(self, key, value):
                raise RuntimeError("disk on fire")

        store = LedgerStore(BrokenStore())
        with pytest.raises(PersistenceError):
            store.add_from_payload(SALARY)
        assert len(store) == 1


class TestStoredPrecision:
    """Amounts written by other clients survive later writes unchanged."""

    def test_sub_cent_amounts_survive_add_and_reload(self):
        records = [
            {"id": "a", "title": "Interest", "amount": "0.004", "category": "Bank",
             "date": "2024-01-01", "type": "income"},
            {"id": "b", "title": "Salary", "amount": 5000, "category": "Job",
             "date": "2024-01-02", "type": "income"},
        ]
        backend = MemoryStore({TRANSACTIONS_KEY: json.dumps(records)})
        store = LedgerStore(backend)
        assert len(store) == 2

        store.add_from_payload(COFFEE)

        restored = LedgerStore(backend)
        assert len(restored) == 3
        assert restored.get("a").amount == Decimal("0.004")
        assert restored.get("b").amount == Decimal("5000")

    def test_large_amount_is_stored_exactly(self, ledger_store, memory_store):
        transaction = ledger_store.add("Windfall", "1e30", "Misc", "2024-01-01", "income")
        assert transaction.amount == Decimal(10) ** 30

        assert LedgerStore(memory_store).get(transaction.id).amount == Decimal(10) ** 30

    def test_amount_beyond_double_range_is_rejected(self, ledger_store):
        with pytest.raises(ValidationError):
            ledger_store.add("Windfall", "1e400", "Misc", "2024-01-01", "income")
        assert len(ledger_store) == 0


def test_long_title_and_category_are_accepted(ledger_store):
    transaction = ledger_store.add("x" * 101, "10", "y" * 200, "2024-01-01", "expense")
    assert len(transaction.title) == 101
    assert len(transaction.category) == 200
