"""Tests for the state store, its mutators and the order journal."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import orjson
import pytest

from pingpong.contracts import Direction
from pingpong.store import (
    StateStore,
    StoreState,
    StrategyStatus,
    add_order,
    force_execute,
    mark_order_executed,
    request_reset,
    update_status,
)
from pingpong.store import store as store_module
from pingpong.store.journal import dump_journal_json, load_journal, save_journal
from tests.fakes import make_order

if TYPE_CHECKING:
    from pathlib import Path


class TestMutators:
    """Tests for pure state mutators."""

    def test_add_order(self) -> None:
        order = make_order()

        state = add_order(order)(StoreState())

        assert state.orders == {order.id: order}

    def test_add_order_does_not_touch_input(self) -> None:
        initial = StoreState()

        add_order(make_order())(initial)

        assert initial.orders == {}

    def test_duplicate_id_rejected(self) -> None:
        order = make_order().mark_executed(1, 2)
        state = StoreState(orders={order.id: order})

        with pytest.raises(ValueError, match="already exists"):
            add_order(make_order())(state)

    def test_second_open_order_rejected(self) -> None:
        state = add_order(make_order(order_id="o1"))(StoreState())

        with pytest.raises(ValueError, match="already has an open order"):
            add_order(make_order(order_id="o2"))(state)

    def test_open_order_of_other_strategy_allowed(self) -> None:
        state = add_order(make_order(order_id="o1"))(StoreState())

        state = add_order(make_order(order_id="o2", strategy_id="other"))(state)

        assert list(state.orders) == ["o1", "o2"]

    def test_mark_order_executed(self) -> None:
        state = add_order(make_order(order_id="o1"))(StoreState())

        state = mark_order_executed("o1", 95_000000000, 42)(state)

        assert state.orders["o1"].is_executed
        assert state.orders["o1"].executed_at == 42

    def test_mark_unknown_order(self) -> None:
        with pytest.raises(KeyError):
            mark_order_executed("missing", 1, 1)(StoreState())

    def test_status_signals(self) -> None:
        state = force_execute()(StoreState())
        state = request_reset()(state)

        assert state.status.should_execute is True
        assert state.status.should_reset is True
        assert state.status.value == "idle"

        state = update_status(should_execute=False, value="running")(state)

        assert state.status.should_execute is False
        assert state.status.should_reset is True
        assert state.status.value == "running"


class TestStateStore:
    """Tests for committed mutations."""

    @pytest.mark.asyncio
    async def test_set_state_commits(self) -> None:
        store = StateStore()
        order = make_order()

        new_state = await store.set_state(add_order(order))

        assert store.get_state() is new_state
        assert store.commits == 1
        assert store.get_state().orders[order.id] == order

    @pytest.mark.asyncio
    async def test_failed_mutator_leaves_state_unchanged(self) -> None:
        store = StateStore()
        await store.set_state(add_order(make_order(order_id="o1")))
        before = store.get_state()

        with pytest.raises(ValueError):
            await store.set_state(add_order(make_order(order_id="o2")))

        assert store.get_state() is before
        assert store.commits == 1

    @pytest.mark.asyncio
    async def test_combined_mutation_is_atomic(self) -> None:
        """A mutator failing halfway commits nothing."""
        store = StateStore()
        await store.set_state(add_order(make_order(order_id="o1")))

        def commit(state: StoreState) -> StoreState:
            state = mark_order_executed("o1", 1, 2)(state)
            return mark_order_executed("missing", 1, 2)(state)

        with pytest.raises(KeyError):
            await store.set_state(commit)

        assert store.get_state().orders["o1"].is_open


class TestJournal:
    """Tests for the on-disk order journal."""

    def test_dump_is_sorted_json(self) -> None:
        order = make_order()
        state = StoreState(orders={order.id: order}, status=StrategyStatus(reset_at=7))

        payload = orjson.loads(dump_journal_json(state))

        assert list(payload) == ["orders", "reset_at", "schema_version"]
        assert payload["schema_version"] == "1.0.0"
        assert payload["reset_at"] == 7
        assert payload["orders"][0]["id"] == "order-1"
        assert payload["orders"][0]["size"] == "10.000000"

    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        orders = [
            make_order(order_id="o1").mark_executed(95_000000000, 10),
            make_order(Direction.SELL, order_id="o2", size_int=95_000000000),
        ]
        state = StoreState(
            orders={order.id: order for order in orders},
            status=StrategyStatus(value="running", should_execute=True, reset_at=5),
        )

        save_journal(path, state)
        loaded = load_journal(path)

        assert list(loaded.orders.values()) == orders
        # Only reset_at survives; signals and the status value are per-process
        assert loaded.status == StrategyStatus(reset_at=5)
        assert not (tmp_path / "orders.json.tmp").exists()

    def test_journal_without_reset_at(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        path.write_bytes(orjson.dumps({"schema_version": "1.0.0", "orders": []}))

        assert load_journal(path) == StoreState()

    def test_unknown_schema_version(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        path.write_bytes(orjson.dumps({"schema_version": "0.1", "orders": []}))

        with pytest.raises(ValueError, match="schema_version"):
            load_journal(path)

    def test_invalid_reset_at(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        path.write_bytes(orjson.dumps({"schema_version": "1.0.0", "reset_at": "soon"}))

        with pytest.raises(ValueError, match="reset_at"):
            load_journal(path)

    @pytest.mark.asyncio
    async def test_store_writes_journal_on_order_changes(self, tmp_path: Path) -> None:
        path = tmp_path / "state" / "orders.json"
        store = StateStore(journal_path=path)

        await store.set_state(force_execute())
        assert not path.exists()

        await store.set_state(add_order(make_order(order_id="o1")))
        await store.set_state(mark_order_executed("o1", 95_000000000, 10))

        restored = StateStore.from_journal(path)
        assert restored.get_state().orders == store.get_state().orders
        assert restored.get_state().orders["o1"].out_amount_int == 95_000000000

    @pytest.mark.asyncio
    async def test_store_writes_journal_on_reset(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        store = StateStore(journal_path=path)

        await store.set_state(update_status(should_reset=False, reset_at=1_234))

        restored = StateStore.from_journal(path)
        assert restored.get_state().status.reset_at == 1_234

    def test_from_missing_journal(self, tmp_path: Path) -> None:
        store = StateStore.from_journal(tmp_path / "orders.json")

        assert store.get_state().orders == {}
        assert store.get_state().status.reset_at is None


class TestJournalFailure:
    """Tests for commits whose journal write fails."""

    @pytest.mark.asyncio
    async def test_failed_write_keeps_commit(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        def failing_save(path: Path, state: StoreState) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(store_module, "save_journal", failing_save)
        store = StateStore(journal_path=tmp_path / "orders.json")

        state = await store.set_state(add_order(make_order(order_id="o1")))

        assert store.get_state() is state
        assert store.get_state().orders["o1"].is_open
        assert store.commits == 1
        assert store.journal_stale is True
        assert "Journal write failed" in caplog.text

    @pytest.mark.asyncio
    async def test_next_commit_rewrites_stale_journal(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        path = tmp_path / "orders.json"
        calls: list[int] = []

        def flaky_save(journal_path: Path, state: StoreState) -> None:
            calls.append(len(state.orders))
            if len(calls) == 1:
                raise OSError("disk full")
            save_journal(journal_path, state)

        monkeypatch.setattr(store_module, "save_journal", flaky_save)
        store = StateStore(journal_path=path)
        await store.set_state(add_order(make_order(order_id="o1")))

        # A status-only change still flushes the stale journal
        await store.set_state(force_execute())

        assert calls == [1, 1]
        assert store.journal_stale is False
        assert list(load_journal(path).orders) == ["o1"]

    @pytest.mark.asyncio
    async def test_write_runs_off_the_event_loop(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        threads: list[int] = []

        def recording_save(path: Path, state: StoreState) -> None:
            threads.append(threading.get_ident())
            save_journal(path, state)

        monkeypatch.setattr(store_module, "save_journal", recording_save)
        store = StateStore(journal_path=tmp_path / "orders.json")

        await store.set_state(add_order(make_order(order_id="o1")))

        assert threads
        assert threads[0] != threading.get_ident()
