"""Arc ledger storage.

The ledger is a table of arc rows keyed by ``ArcId``. ``InMemoryArcStore``
keeps it in a dict; ``JsonArcStore`` writes it through to a JSON file after
every mutation.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from narrative.models import RESOLVED, ArcRef

from .errors import ArcNotFoundError, ArcStoreError
from .schema import DEFAULT_COLUMNS

logger = logging.getLogger(__name__)


class ArcStore(Protocol):
    def columns(self) -> list[str]: ...

    def load(self, arc_id: str) -> dict[str, Any]: ...

    def save(self, arc_id: str, fields: dict[str, Any]) -> None: ...


class InMemoryArcStore:
    """Ledger rows held in memory, keyed by ArcId."""

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        columns: list[str] | None = None,
    ):
        self._columns = list(columns if columns is not None else DEFAULT_COLUMNS)
        self._rows: dict[str, dict[str, Any]] = {}
        for row in rows or []:
            arc_id = str(row.get("ArcId") or "")
            if not arc_id:
                logger.warning("Skipping ledger row without ArcId: %r", row)
                continue
            self._rows[arc_id] = dict(row)

    # ── Reads ───────────────────────────────────────────────────

    def columns(self) -> list[str]:
        return list(self._columns)

    def load(self, arc_id: str) -> dict[str, Any]:
        row = self._rows.get(arc_id)
        if row is None:
            raise ArcNotFoundError(arc_id)
        return copy.deepcopy(row)

    def rows(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(row) for row in self._rows.values()]

    def active_refs(self) -> list[ArcRef]:
        """Every arc not yet resolved, in ledger order."""
        refs = []
        for row in self._rows.values():
            phase = str(row.get("Phase") or "").strip().lower()
            if phase == RESOLVED:
                continue
            refs.append(
                ArcRef.from_dict({
                    "arcId": row.get("ArcId"),
                    "type": row.get("Type"),
                    "name": row.get("Name"),
                    "tension": row.get("Tension"),
                    "phase": phase,
                    "neighborhood": row.get("Neighborhood"),
                })
            )
        return refs

    # ── Writes ──────────────────────────────────────────────────

    def save(self, arc_id: str, fields: dict[str, Any]) -> None:
        row = self._rows.get(arc_id)
        if row is None:
            raise ArcNotFoundError(arc_id)
        unknown = [name for name in fields if name not in self._columns]
        if unknown:
            raise ArcStoreError(f"Unknown ledger columns for {arc_id}: {', '.join(unknown)}")
        if not fields:
            return
        previous = dict(row)
        row.update(fields)
        try:
            self._persist()
        except ArcStoreError:
            row.clear()
            row.update(previous)
            raise

    def insert(self, row: dict[str, Any]) -> None:
        arc_id = str(row.get("ArcId") or "")
        if not arc_id:
            raise ArcStoreError("Ledger row needs an ArcId")
        if arc_id in self._rows:
            raise ArcStoreError(f"Arc already in ledger: {arc_id}")
        self._rows[arc_id] = {col: row.get(col, "") for col in self._columns}
        try:
            self._persist()
        except ArcStoreError:
            del self._rows[arc_id]
            raise

    def add_column(self, name: str, default: Any = "") -> None:
        if name in self._columns:
            return
        self._columns.append(name)
        for row in self._rows.values():
            row.setdefault(name, default)
        self._persist()

    def remove_column(self, name: str) -> None:
        if name not in self._columns:
            return
        self._columns.remove(name)
        for row in self._rows.values():
            row.pop(name, None)
        self._persist()

    def copy(self) -> InMemoryArcStore:
        return InMemoryArcStore(rows=self.rows(), columns=self.columns())

    def _persist(self) -> None:
        try:
            self._flush()
        except (OSError, TypeError, ValueError) as e:
            raise ArcStoreError(f"Could not write ledger: {e}") from e

    def _flush(self) -> None:
        """Persist pending changes; nothing to do in memory."""


class JsonArcStore(InMemoryArcStore):
    """Ledger persisted as ``{"columns": [...], "rows": [...]}``."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        if self._path.exists():
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            super().__init__(rows=raw.get("rows", []), columns=raw.get("columns"))
            logger.debug("Loaded %d ledger rows from %s", len(self._rows), self._path)
        else:
            super().__init__()
            self._flush()
            logger.info("Created empty ledger at %s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"columns": self._columns, "rows": list(self._rows.values())}
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
