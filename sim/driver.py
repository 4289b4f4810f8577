"""Cycle driver - runs one arc lifecycle pass per simulation cycle.

Each cycle: load ledger -> collect active arcs -> advance_all -> record the
run and its story hooks in history.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path

from ledger.history import HistoryDB
from ledger.store import InMemoryArcStore, JsonArcStore
from narrative import CycleContext, CycleResults, Hook, LifecycleRules, advance_all

from .config import load_config

logger = logging.getLogger(__name__)


def cycle_rng(seed: str | int, cycle: int) -> random.Random:
    """RNG for one cycle; the same (seed, cycle) always yields the same stream."""
    return random.Random(f"{seed}:{cycle}")


class CycleDriver:
    """Drives the arc lifecycle engine against the configured ledger."""

    def __init__(self, config: dict | None = None, dry_run: bool = False):
        self._cfg = config or load_config()
        self._dry_run = dry_run

        root = Path(__file__).resolve().parent.parent
        storage = self._cfg.get("storage", {})

        self._ledger_path = root / storage.get("ledger_file", "data/event_arc_ledger.json")
        self._db_path = root / storage.get("history_db", "data/history.db")
        self._seed = str(self._cfg.get("simulation", {}).get("seed", 0))
        self._rules = LifecycleRules.from_config(self._cfg)
        self._dry_store: InMemoryArcStore | None = None
        self.last_hooks: list[Hook] = []

    @property
    def seed(self) -> str:
        return self._seed

    def _open_store(self) -> InMemoryArcStore:
        if not self._dry_run:
            return JsonArcStore(self._ledger_path)
        # Dry runs chain cycles on one in-memory copy of the ledger.
        if self._dry_store is None:
            if self._ledger_path.exists():
                self._dry_store = JsonArcStore(self._ledger_path).copy()
            else:
                self._dry_store = InMemoryArcStore()
        return self._dry_store

    async def run_cycle(self, cycle: int) -> CycleResults:
        """One complete lifecycle pass for ``cycle``."""
        store = self._open_store()
        active = store.active_refs()
        ctx = CycleContext(
            cycle=cycle,
            rng=cycle_rng(self._seed, cycle),
            store=store,
            rules=self._rules,
        )
        logger.info("=== Cycle %d === %d active arcs", cycle, len(active))

        results = advance_all(active, ctx)
        self.last_hooks = list(ctx.hooks)

        for error in results.errors:
            logger.warning("Cycle %d: %s", cycle, error)

        if self._dry_run:
            logger.info("Dry run: ledger and history left untouched")
            return results

        async with HistoryDB(self._db_path) as db:
            await db.log_cycle_run(cycle, results, seed=self._seed)
            await db.log_hooks(cycle, ctx.hooks)

        return results

    async def run_cycles(self, start: int, count: int = 1) -> list[CycleResults]:
        """Consecutive passes starting at ``start``; stops on a configuration error."""
        all_results = []
        for cycle in range(start, start + count):
            results = await self.run_cycle(cycle)
            all_results.append(results)
            if results.aborted:
                logger.error("Stopping after cycle %d: pass was aborted", cycle)
                break
        return all_results
