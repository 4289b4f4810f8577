"""Append-only history of lifecycle passes and the hooks they emitted (SQLite)."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from narrative.models import CycleResults, Hook

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cycle_runs (
    id TEXT PRIMARY KEY,
    cycle INTEGER,
    seed TEXT,
    processed INTEGER,
    advanced INTEGER,
    resolved INTEGER,
    tension_decayed INTEGER,
    errors TEXT,              -- JSON list
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS story_hooks (
    id TEXT PRIMARY KEY,
    cycle INTEGER,
    seq INTEGER,              -- emission order within the cycle
    hook_type TEXT,           -- "ARC_PHASE_TRANSITION" | "ARC_RESOLVED"
    arc_id TEXT,
    arc_type TEXT,
    old_phase TEXT,
    new_phase TEXT,
    resolution_trigger TEXT,
    tension REAL,
    severity INTEGER,
    description TEXT,
    created_at TEXT
);
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class HistoryDB:
    """Append-only record of every cycle pass."""

    def __init__(self, db_path: str | Path):
        self._path = Path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self._path))
        await self._db.executescript(_SCHEMA)
        await self._db.commit()
        logger.debug("History DB ready at %s", self._path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()

    async def __aenter__(self) -> HistoryDB:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ── Logging ─────────────────────────────────────────────────

    async def log_cycle_run(self, cycle: int, results: CycleResults, seed: str = "") -> str:
        row_id = str(uuid.uuid4())
        await self._db.execute(
            "INSERT INTO cycle_runs (id, cycle, seed, processed, advanced, resolved, "
            "tension_decayed, errors, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                row_id,
                cycle,
                seed,
                results.processed,
                results.advanced,
                results.resolved,
                results.tension_decayed,
                json.dumps(results.errors),
                _now_iso(),
            ),
        )
        await self._db.commit()
        return row_id

    async def log_hooks(self, cycle: int, hooks: list[Hook]) -> int:
        if not hooks:
            return 0
        created_at = _now_iso()
        await self._db.executemany(
            "INSERT INTO story_hooks (id, cycle, seq, hook_type, arc_id, arc_type, old_phase, "
            "new_phase, resolution_trigger, tension, severity, description, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (
                    str(uuid.uuid4()),
                    cycle,
                    seq,
                    hook.hook_type,
                    hook.arc_id,
                    hook.arc_type,
                    hook.old_phase or "",
                    hook.new_phase or "",
                    hook.resolution_trigger or "",
                    hook.tension,
                    hook.severity,
                    hook.description,
                    created_at,
                )
                for seq, hook in enumerate(hooks)
            ],
        )
        await self._db.commit()
        return len(hooks)

    # ── Queries ─────────────────────────────────────────────────

    async def get_recent_hooks(self, limit: int = 20, arc_id: str = "") -> list[dict]:
        query = "SELECT * FROM story_hooks"
        params: list[Any] = []
        if arc_id:
            query += " WHERE arc_id = ?"
            params.append(arc_id)
        query += " ORDER BY cycle DESC, seq ASC LIMIT ?"
        params.append(limit)

        cursor = await self._db.execute(query, tuple(params))
        cols = [d[0] for d in cursor.description]
        rows = await cursor.fetchall()
        return [dict(zip(cols, row)) for row in rows]

    async def get_cycle_runs(self, limit: int = 10) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM cycle_runs ORDER BY cycle DESC, created_at DESC LIMIT ?", (limit,)
        )
        cols = [d[0] for d in cursor.description]
        rows = await cursor.fetchall()
        result = []
        for row in rows:
            payload = dict(zip(cols, row))
            payload["errors"] = json.loads(payload["errors"] or "[]")
            result.append(payload)
        return result
