"""State store with serialized writers.

A single mutation point for the order ledger: set_state() applies a pure
Mutator under an asyncio.Lock, so at most one writer touches the ledger at a
time. Readers get the current immutable snapshot without locking.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pingpong.store.journal import load_journal, save_journal
from pingpong.store.state import Mutator, StoreState

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class StateStore:
    """Holds the current StoreState and commits mutations atomically.

    If ``journal_path`` is set, the durable part of the state (orders and
    ``reset_at``) is written to it after every commit that changes it. The
    write runs in a worker thread. A failed write never undoes a commit: the
    in-memory state stays authoritative and the journal is rewritten on the
    next commit.
    """

    def __init__(
        self,
        initial: StoreState | None = None,
        *,
        journal_path: Path | None = None,
    ) -> None:
        self._state = initial or StoreState()
        self._journal_path = journal_path
        self._journal_stale = False
        self._lock = asyncio.Lock()
        self._commits = 0

    @classmethod
    def from_journal(cls, journal_path: Path) -> StateStore:
        """Create a store, restoring orders and reset_at from ``journal_path`` if it exists."""
        if not journal_path.exists():
            return cls(journal_path=journal_path)
        state = load_journal(journal_path)
        logger.info(
            "Restored orders from journal",
            extra={
                "journal": str(journal_path),
                "orders": len(state.orders),
                "reset_at": state.status.reset_at,
            },
        )
        return cls(state, journal_path=journal_path)

    def get_state(self) -> StoreState:
        """Current snapshot."""
        return self._state

    @property
    def commits(self) -> int:
        """Number of committed mutations."""
        return self._commits

    @property
    def journal_stale(self) -> bool:
        """True while the journal on disk lags the in-memory state."""
        return self._journal_stale

    async def set_state(self, mutator: Mutator) -> StoreState:
        """Apply ``mutator`` to the current snapshot and commit the result.

        Exceptions raised by the mutator propagate and leave the state
        unchanged. Journal write failures are logged and never raised.
        """
        async with self._lock:
            old_state = self._state
            new_state = mutator(old_state)
            self._state = new_state
            self._commits += 1
            if self._journal_path is not None and (
                self._journal_stale
                or new_state.orders is not old_state.orders
                or new_state.status.reset_at != old_state.status.reset_at
            ):
                await self._write_journal(self._journal_path, new_state)
            return new_state

    async def _write_journal(self, path: Path, state: StoreState) -> None:
        try:
            await asyncio.to_thread(save_journal, path, state)
        except Exception:
            self._journal_stale = True
            logger.error(
                "Journal write failed, state kept in memory",
                extra={"journal": str(path), "orders": len(state.orders)},
                exc_info=True,
            )
            return
        if self._journal_stale:
            logger.info("Journal caught up", extra={"journal": str(path)})
        self._journal_stale = False
