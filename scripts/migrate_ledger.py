"""Add (or roll back) the lifecycle columns on the arc ledger.

Usage:
    python scripts/migrate_ledger.py
    python scripts/migrate_ledger.py --dry-run
    python scripts/migrate_ledger.py --rollback

Run once on ledgers created before lifecycle automation; the engine refuses
to process a ledger without AutoAdvance and Phase columns.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from ledger.schema import add_lifecycle_columns, remove_lifecycle_columns
from ledger.store import JsonArcStore
from sim.config import load_config


@click.command()
@click.option("--ledger", "ledger_file", type=click.Path(), default=None, help="Ledger JSON file")
@click.option("--rollback", is_flag=True, help="Remove the lifecycle columns instead")
@click.option("--dry-run", is_flag=True, help="Report changes without writing")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
def migrate(ledger_file: str | None, rollback: bool, dry_run: bool, config_dir: str | None) -> None:
    """Bring the arc ledger schema up to date."""

    if ledger_file is None:
        cfg = load_config(config_dir)
        root = Path(__file__).resolve().parent.parent
        ledger_file = str(root / cfg.get("storage", {}).get("ledger_file", "data/event_arc_ledger.json"))

    path = Path(ledger_file)
    if not path.exists():
        click.echo(f"Ledger not found: {path}", err=True)
        sys.exit(1)

    store = JsonArcStore(path)
    click.echo(f"\nLedger: {path} ({len(store.columns())} columns, {len(store.rows())} arcs)")

    if rollback:
        report = remove_lifecycle_columns(store, dry_run=dry_run)
        verb = "Would remove" if dry_run else "Removed"
        changed = report.removed
    else:
        report = add_lifecycle_columns(store, dry_run=dry_run)
        verb = "Would add" if dry_run else "Added"
        changed = report.added

    for name in changed:
        click.echo(f"  {verb}: {name}")
    for name in report.skipped:
        click.echo(f"  Skipped: {name}")

    if not report.changed:
        click.echo("\nNothing to do.")
    elif dry_run:
        click.echo("\nDry run — run again without --dry-run to apply.")
    else:
        click.echo(f"\nLedger now has {len(store.columns())} columns.")


if __name__ == "__main__":
    migrate()
