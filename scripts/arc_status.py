"""Show arc ledger state and recent story hooks.

Usage:
    python scripts/arc_status.py
    python scripts/arc_status.py --hooks 50
    python scripts/arc_status.py --arc ARC-0042
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from ledger.history import HistoryDB
from ledger.store import JsonArcStore
from narrative import Arc
from sim.config import load_config


async def _recent(db_path: Path, limit: int, arc_id: str) -> tuple[list[dict], list[dict]]:
    async with HistoryDB(db_path) as db:
        runs = await db.get_cycle_runs(limit=5)
        hooks = await db.get_recent_hooks(limit=limit, arc_id=arc_id)
    return runs, hooks


@click.command()
@click.option("--hooks", "hook_limit", type=int, default=20, help="Number of recent hooks to show")
@click.option("--arc", "arc_id", default="", help="Only show this arc")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
def status(hook_limit: int, arc_id: str, config_dir: str | None) -> None:
    """Print the arc ledger and recent lifecycle history."""

    cfg = load_config(config_dir)
    root = Path(__file__).resolve().parent.parent
    storage = cfg.get("storage", {})
    ledger_path = root / storage.get("ledger_file", "data/event_arc_ledger.json")
    db_path = root / storage.get("history_db", "data/history.db")

    if not ledger_path.exists():
        click.echo(f"Ledger not found: {ledger_path}", err=True)
        sys.exit(1)

    store = JsonArcStore(ledger_path)
    arcs = [Arc.from_row(row) for row in store.rows()]
    if arc_id:
        arcs = [a for a in arcs if a.arc_id == arc_id]

    click.echo(f"\n  {'ARC':<14} {'PHASE':<11} {'TENSION':>7} {'START':>6} {'NEXT':>6}  AUTO  NAME")
    for arc in arcs:
        click.echo(
            f"  {arc.arc_id:<14} {arc.phase:<11} {arc.tension:>7.2f} "
            f"{arc.phase_start_cycle:>6} {arc.next_phase_transition:>6}  "
            f"{'yes' if arc.auto_advance else 'no':<4}  {arc.name}"
        )
        if arc.is_resolved and arc.resolution_notes:
            click.echo(f"  {'':<14} {arc.resolution_notes}")

    if not db_path.exists():
        click.echo("\n  No history yet.")
        return

    runs, hooks = asyncio.run(_recent(db_path, hook_limit, arc_id))
    click.echo("\n  Recent cycles:")
    for run in runs:
        errors = f" ({len(run['errors'])} errors)" if run["errors"] else ""
        click.echo(
            f"    {run['cycle']}: processed={run['processed']} advanced={run['advanced']} "
            f"resolved={run['resolved']} decayed={run['tension_decayed']}{errors}"
        )
    click.echo("\n  Recent hooks:")
    for hook in hooks:
        click.echo(f"    cycle {hook['cycle']} [{hook['severity']}] {hook['description']}")


if __name__ == "__main__":
    status()
