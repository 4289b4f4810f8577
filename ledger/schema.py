"""Ledger columns and the lifecycle column migration.

Ledgers created before lifecycle automation only carry the descriptive
columns plus Phase and Tension. ``add_lifecycle_columns`` brings them up to
date; ``remove_lifecycle_columns`` rolls the change back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

BASE_COLUMNS = ["ArcId", "Type", "Name", "Neighborhood", "Phase", "Tension"]

# (column, default for existing rows)
LIFECYCLE_COLUMNS: list[tuple[str, Any]] = [
    ("AutoAdvance", "yes"),
    ("PhaseStartCycle", ""),
    ("PhaseDuration", 0),
    ("NextPhaseTransition", ""),
    ("TensionDecay", 0.1),
]

RESOLUTION_COLUMNS: list[tuple[str, Any]] = [
    ("ResolutionTrigger", ""),
    ("ResolutionCycle", ""),
    ("ResolutionNotes", ""),
]

DEFAULT_COLUMNS = (
    BASE_COLUMNS
    + [name for name, _ in LIFECYCLE_COLUMNS]
    + [name for name, _ in RESOLUTION_COLUMNS]
)

# Without these the engine cannot tell which arcs it owns.
REQUIRED_COLUMNS = ("AutoAdvance", "Phase")

# Older ledgers record the resolution trigger under this column.
LEGACY_COLUMN_ALIASES = {"ResolutionTrigger": "ResolutionType"}


class MutableSchema(Protocol):
    def columns(self) -> list[str]: ...

    def add_column(self, name: str, default: Any = "") -> None: ...

    def remove_column(self, name: str) -> None: ...


@dataclass
class MigrationReport:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def missing_required_columns(columns: list[str]) -> list[str]:
    return [name for name in REQUIRED_COLUMNS if name not in columns]


def fields_for_columns(fields: dict[str, Any], columns: list[str]) -> dict[str, Any]:
    """Keep only the fields the ledger has a column for.

    A field whose column is missing is written to its legacy alias when the
    ledger has one; otherwise it is dropped.
    """
    present = set(columns)
    kept: dict[str, Any] = {}
    for name, value in fields.items():
        if name in present:
            kept[name] = value
            continue
        alias = LEGACY_COLUMN_ALIASES.get(name)
        if alias in present:
            kept[alias] = value
    return kept


def add_lifecycle_columns(store: MutableSchema, dry_run: bool = False) -> MigrationReport:
    """Add any lifecycle/resolution column the ledger is missing."""
    report = MigrationReport(dry_run=dry_run)
    existing = set(store.columns())

    for name, default in LIFECYCLE_COLUMNS + RESOLUTION_COLUMNS:
        if name in existing:
            report.skipped.append(name)
            continue
        report.added.append(name)
        if not dry_run:
            store.add_column(name, default)

    logger.info(
        "Lifecycle migration%s: added=%d skipped=%d",
        " (dry run)" if dry_run else "",
        len(report.added),
        len(report.skipped),
    )
    return report


def remove_lifecycle_columns(store: MutableSchema, dry_run: bool = False) -> MigrationReport:
    """Drop the lifecycle/resolution columns again."""
    report = MigrationReport(dry_run=dry_run)
    existing = set(store.columns())

    for name, _ in LIFECYCLE_COLUMNS + RESOLUTION_COLUMNS:
        if name not in existing:
            report.skipped.append(name)
            continue
        report.removed.append(name)
        if not dry_run:
            store.remove_column(name)

    logger.info(
        "Lifecycle rollback%s: removed=%d skipped=%d",
        " (dry run)" if dry_run else "",
        len(report.removed),
        len(report.skipped),
    )
    return report
