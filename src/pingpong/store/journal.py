"""Order journal: JSON snapshot of the order ledger on disk.

Holds the orders and the last reset timestamp. Written after committed
mutations that change either, replaced atomically so a crash never leaves a
partial file. Transient user signals (force, reset request) are not journaled.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import orjson

from pingpong.contracts import Order
from pingpong.contracts.base import SCHEMA_VERSION
from pingpong.store.state import StoreState, StrategyStatus

if TYPE_CHECKING:
    from pathlib import Path


def dump_journal_json(state: StoreState) -> bytes:
    """Serialize the durable part of ``state`` to canonical JSON bytes (sorted keys)."""
    payload = {
        "schema_version": SCHEMA_VERSION,
        "reset_at": state.status.reset_at,
        "orders": [order.model_dump(mode="json") for order in state.orders.values()],
    }
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2)


def save_journal(path: Path, state: StoreState) -> None:
    """Write the journal atomically (temp file + rename)."""
    data = dump_journal_json(state)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp_path, path)


def load_journal(path: Path) -> StoreState:
    """Load a journal file into an idle StoreState, orders in journal order.

    Raises:
        ValueError: unknown schema version or malformed content.
    """
    with open(path, "rb") as f:
        payload = orjson.loads(f.read())

    version = payload.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ValueError(f"unsupported journal schema_version {version!r}")

    reset_at = payload.get("reset_at")
    if reset_at is not None and (isinstance(reset_at, bool) or not isinstance(reset_at, int)):
        raise ValueError(f"invalid journal reset_at {reset_at!r}")

    orders = [Order.model_validate(item) for item in payload.get("orders", [])]
    return StoreState(
        orders={order.id: order for order in orders},
        status=StrategyStatus(reset_at=reset_at),
    )
