"""Tests for the arc ledger stores and schema migration."""

import json
from pathlib import Path

import pytest

from ledger import (
    ArcNotFoundError,
    ArcStoreError,
    InMemoryArcStore,
    JsonArcStore,
    add_lifecycle_columns,
    remove_lifecycle_columns,
)
from ledger.schema import (
    BASE_COLUMNS,
    DEFAULT_COLUMNS,
    fields_for_columns,
    missing_required_columns,
)


def _rows() -> list[dict]:
    return [
        {"ArcId": "A1", "Name": "Harbor Strike", "Phase": "building", "Tension": 6.0, "AutoAdvance": "yes"},
        {"ArcId": "A2", "Name": "Old Feud", "Phase": "Resolved", "Tension": 0.4, "AutoAdvance": "yes"},
        {"ArcId": "A3", "Name": "Bake Sale", "Phase": "seed", "Tension": 2.0, "AutoAdvance": "no"},
    ]


class TestInMemoryArcStore:
    def test_load_returns_copy(self):
        store = InMemoryArcStore(_rows())
        row = store.load("A1")
        row["Tension"] = 99
        assert store.load("A1")["Tension"] == 6.0

    def test_load_missing_raises_lookup_error(self):
        store = InMemoryArcStore(_rows())
        with pytest.raises(ArcNotFoundError):
            store.load("nope")
        with pytest.raises(LookupError):
            store.load("nope")

    def test_save_updates_row(self):
        store = InMemoryArcStore(_rows())
        store.save("A1", {"Phase": "climax", "PhaseStartCycle": 14})
        row = store.load("A1")
        assert row["Phase"] == "climax"
        assert row["PhaseStartCycle"] == 14

    def test_save_rejects_unknown_column(self):
        store = InMemoryArcStore(_rows())
        with pytest.raises(ArcStoreError):
            store.save("A1", {"Mood": "grim"})

    def test_save_unknown_arc(self):
        store = InMemoryArcStore(_rows())
        with pytest.raises(ArcNotFoundError):
            store.save("ghost", {"Phase": "seed"})

    def test_rows_without_id_are_dropped(self):
        store = InMemoryArcStore([{"Name": "orphan"}, {"ArcId": "A1"}])
        assert [r["ArcId"] for r in store.rows()] == ["A1"]

    def test_active_refs_skip_resolved(self):
        store = InMemoryArcStore(_rows())
        refs = store.active_refs()
        assert [r.arc_id for r in refs] == ["A1", "A3"]
        assert refs[0].name == "Harbor Strike"
        assert refs[0].tension == 6.0

    def test_insert_fills_columns(self):
        store = InMemoryArcStore()
        store.insert({"ArcId": "N1", "Phase": "seed", "Tension": 3.0})
        row = store.load("N1")
        assert set(row) == set(DEFAULT_COLUMNS)
        assert row["AutoAdvance"] == ""
        with pytest.raises(ArcStoreError):
            store.insert({"ArcId": "N1"})

    def test_copy_is_independent(self):
        store = InMemoryArcStore(_rows())
        clone = store.copy()
        clone.save("A1", {"Tension": 1.0})
        assert store.load("A1")["Tension"] == 6.0


class TestJsonArcStore:
    def test_creates_empty_ledger(self, tmp_path: Path):
        path = tmp_path / "data" / "ledger.json"
        store = JsonArcStore(path)
        assert path.exists()
        assert store.columns() == DEFAULT_COLUMNS
        assert store.rows() == []

    def test_writes_through(self, tmp_path: Path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"columns": DEFAULT_COLUMNS, "rows": _rows()}))

        store = JsonArcStore(path)
        store.save("A1", {"Tension": 5.82, "PhaseDuration": 3})

        reopened = JsonArcStore(path)
        assert reopened.load("A1")["Tension"] == 5.82
        assert reopened.load("A1")["PhaseDuration"] == 3

    def test_empty_save_does_not_touch_file(self, tmp_path: Path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"columns": DEFAULT_COLUMNS, "rows": _rows()}))
        before = path.read_text()
        JsonArcStore(path).save("A1", {})
        assert path.read_text() == before

    def test_failed_write_rolls_back_row(self, tmp_path: Path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"columns": DEFAULT_COLUMNS, "rows": _rows()}))
        store = JsonArcStore(path)
        path.unlink()
        path.mkdir()

        with pytest.raises(ArcStoreError, match="Could not write ledger"):
            store.save("A1", {"Phase": "climax", "Tension": 1.0})
        row = store.load("A1")
        assert row["Phase"] == "building"
        assert row["Tension"] == 6.0

    def test_failed_insert_leaves_no_row(self, tmp_path: Path):
        path = tmp_path / "ledger.json"
        store = JsonArcStore(path)
        path.unlink()
        path.mkdir()

        with pytest.raises(ArcStoreError):
            store.insert({"ArcId": "N1", "Phase": "seed"})
        with pytest.raises(ArcNotFoundError):
            store.load("N1")


class TestMigration:
    def _legacy(self) -> InMemoryArcStore:
        return InMemoryArcStore(
            [{"ArcId": "L1", "Phase": "opening", "Tension": 4.0}],
            columns=list(BASE_COLUMNS),
        )

    def test_legacy_ledger_is_missing_required_columns(self):
        assert missing_required_columns(BASE_COLUMNS) == ["AutoAdvance"]
        assert missing_required_columns(DEFAULT_COLUMNS) == []

    def test_add_lifecycle_columns(self):
        store = self._legacy()
        report = add_lifecycle_columns(store)
        assert len(report.added) == 8
        assert report.skipped == []
        row = store.load("L1")
        assert row["AutoAdvance"] == "yes"
        assert row["TensionDecay"] == 0.1
        assert row["PhaseDuration"] == 0
        assert row["ResolutionNotes"] == ""

    def test_add_is_idempotent(self):
        store = self._legacy()
        add_lifecycle_columns(store)
        report = add_lifecycle_columns(store)
        assert report.added == []
        assert len(report.skipped) == 8
        assert report.changed is False

    def test_dry_run_changes_nothing(self):
        store = self._legacy()
        report = add_lifecycle_columns(store, dry_run=True)
        assert len(report.added) == 8
        assert store.columns() == BASE_COLUMNS

    def test_rollback(self):
        store = self._legacy()
        add_lifecycle_columns(store)
        report = remove_lifecycle_columns(store)
        assert len(report.removed) == 8
        assert store.columns() == BASE_COLUMNS
        assert "AutoAdvance" not in store.load("L1")

    def test_migration_persists_to_json(self, tmp_path: Path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"columns": BASE_COLUMNS, "rows": [{"ArcId": "L1", "Phase": "seed"}]}))
        add_lifecycle_columns(JsonArcStore(path))
        raw = json.loads(path.read_text())
        assert "AutoAdvance" in raw["columns"]
        assert raw["rows"][0]["AutoAdvance"] == "yes"


class TestFieldsForColumns:
    def test_drops_fields_without_a_column(self):
        columns = BASE_COLUMNS + ["AutoAdvance"]
        kept = fields_for_columns({"Phase": "resolved", "ResolutionNotes": "done"}, columns)
        assert kept == {"Phase": "resolved"}

    def test_trigger_falls_back_to_resolution_type(self):
        columns = BASE_COLUMNS + ["AutoAdvance", "ResolutionType"]
        kept = fields_for_columns({"ResolutionTrigger": "time_expired"}, columns)
        assert kept == {"ResolutionType": "time_expired"}

    def test_prefers_trigger_column_when_present(self):
        kept = fields_for_columns({"ResolutionTrigger": "time_expired"}, DEFAULT_COLUMNS + ["ResolutionType"])
        assert kept == {"ResolutionTrigger": "time_expired"}
