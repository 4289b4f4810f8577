"""Tests for the cycle run / story hook history."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ledger.history import HistoryDB
from narrative import Arc, CycleResults, phase_transition_hook, resolution_hook


def _hooks() -> list:
    arc = Arc(arc_id="A1", name="Harbor Strike", arc_type="labor", tension=7.1)
    other = Arc(arc_id="A2", name="Bake Sale", tension=0.4)
    return [
        phase_transition_hook(arc, "building", "climax"),
        resolution_hook(other, "tension_resolved"),
    ]


def test_hooks_roundtrip(tmp_path: Path):
    db_path = tmp_path / "history.db"

    async def _run() -> None:
        async with HistoryDB(db_path) as db:
            count = await db.log_hooks(14, _hooks())
            assert count == 2
            rows = await db.get_recent_hooks(limit=10)
            assert [r["arc_id"] for r in rows] == ["A1", "A2"]
            assert rows[0]["hook_type"] == "ARC_PHASE_TRANSITION"
            assert rows[0]["new_phase"] == "climax"
            assert rows[0]["severity"] == 7
            assert rows[1]["resolution_trigger"] == "tension_resolved"
            assert rows[1]["old_phase"] == ""

    asyncio.run(_run())


def test_hooks_filter_by_arc(tmp_path: Path):
    db_path = tmp_path / "history.db"

    async def _run() -> None:
        async with HistoryDB(db_path) as db:
            await db.log_hooks(14, _hooks())
            rows = await db.get_recent_hooks(limit=10, arc_id="A2")
            assert len(rows) == 1
            assert rows[0]["hook_type"] == "ARC_RESOLVED"

    asyncio.run(_run())


def test_empty_hook_list_is_noop(tmp_path: Path):
    db_path = tmp_path / "history.db"

    async def _run() -> None:
        async with HistoryDB(db_path) as db:
            assert await db.log_hooks(3, []) == 0
            assert await db.get_recent_hooks() == []

    asyncio.run(_run())


def test_cycle_runs_newest_first(tmp_path: Path):
    db_path = tmp_path / "history.db"

    async def _run() -> None:
        async with HistoryDB(db_path) as db:
            await db.log_cycle_run(1, CycleResults(processed=2, tension_decayed=2), seed="7")
            await db.log_cycle_run(
                2,
                CycleResults(processed=2, advanced=1, errors=["Arc not found in ledger: X"]),
                seed="7",
            )
            runs = await db.get_cycle_runs(limit=5)
            assert [r["cycle"] for r in runs] == [2, 1]
            assert runs[0]["advanced"] == 1
            assert runs[0]["errors"] == ["Arc not found in ledger: X"]
            assert runs[1]["errors"] == []
            assert runs[1]["seed"] == "7"

    asyncio.run(_run())
