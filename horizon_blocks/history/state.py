"""Process-wide view of what the history store currently retains.

Requests only ever read the current snapshot. The refresher builds a new
``LedgerState`` and swaps it in whole, so no locking is required.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import bittensor as bt
from sqlalchemy import text

_SELECT_HISTORY_BOUNDS = text("""
    SELECT
        COALESCE(MIN(sequence), 0) AS elder,
        COALESCE(MAX(sequence), 0) AS latest
    FROM history_ledgers
""")

_SELECT_CORE_LATEST = text("SELECT COALESCE(MAX(ledgerseq), 0) AS latest FROM ledgerheaders")


@dataclass(frozen=True)
class LedgerState:
    """Snapshot of retained ledger sequences."""

    history_elder: int = 0
    history_latest: int = 0
    core_latest: int = 0

    def lag(self) -> int:
        """How many ledgers history ingestion trails the core node by."""
        return max(0, self.core_latest - self.history_latest)


async def load_ledger_state(history_db: Any, core_db: Any = None) -> LedgerState:
    """Read the current retained range from the databases.

    Without a core database the core is assumed to be level with history.
    """
    rows = await history_db.read(_SELECT_HISTORY_BOUNDS, mappings=True)
    elder = int(rows[0]["elder"]) if rows else 0
    latest = int(rows[0]["latest"]) if rows else 0

    core_latest = latest
    if core_db is not None:
        core_rows = await core_db.read(_SELECT_CORE_LATEST, mappings=True)
        if core_rows:
            core_latest = int(core_rows[0]["latest"])

    return LedgerState(history_elder=elder, history_latest=latest, core_latest=core_latest)


class LedgerStateTracker:
    """Holds the current ``LedgerState`` and refreshes it periodically."""

    def __init__(self, history_db: Any, core_db: Any = None, interval: float = 5.0):
        self.history_db = history_db
        self.core_db = core_db
        self.interval = interval
        self._state = LedgerState()
        self._task: asyncio.Task | None = None

    def current(self) -> LedgerState:
        return self._state

    async def refresh(self) -> LedgerState:
        self._state = await load_ledger_state(self.history_db, self.core_db)
        bt.logging.debug({
            "ledger_state": {
                "elder": self._state.history_elder,
                "latest": self._state.history_latest,
                "core_latest": self._state.core_latest,
            }
        })
        return self._state

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.interval)
                await self.refresh()
            except asyncio.CancelledError:
                break
            except Exception as e:
                # Keep serving the last known snapshot
                bt.logging.warning({"ledger_state_refresh_error": str(e)})

    def start(self) -> None:
        if self._task is None and self.interval > 0:
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None


__all__ = ["LedgerState", "LedgerStateTracker", "load_ledger_state"]
