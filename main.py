"""Entry point for the arc lifecycle engine.

Usage:
    python main.py --cycle 42                # Advance every active arc for cycle 42
    python main.py --cycle 42 --count 5      # Cycles 42-46, one pass each
    python main.py --cycle 42 --dry-run      # Simulate without touching the ledger
    python main.py --cycle 42 --verbose      # Verbose logging
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from sim.config import load_config
from sim.driver import CycleDriver


def _setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s — %(name)s — %(levelname)s — %(message)s"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=fmt, handlers=handlers)

    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


async def _run(driver: CycleDriver, start: int, count: int) -> bool:
    all_results = await driver.run_cycles(start, count)
    for offset, results in enumerate(all_results):
        click.echo(f"  Cycle {start + offset}: {results.summary()}")
        for error in results.errors:
            click.echo(f"    ! {error}", err=True)
    if driver.last_hooks:
        click.echo("\n  Story hooks (last cycle):")
        for hook in driver.last_hooks:
            click.echo(f"    [{hook.severity}] {hook.hook_type}: {hook.description}")
    return not any(r.aborted for r in all_results)


@click.command()
@click.option("--cycle", type=int, required=True, help="Cycle number to process")
@click.option("--count", type=click.IntRange(min=1), default=1, help="Number of consecutive cycles")
@click.option("--seed", default=None, help="Override simulation.seed")
@click.option("--dry-run", is_flag=True, help="Simulate without writing ledger or history")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
def main(
    cycle: int,
    count: int,
    seed: str | None,
    dry_run: bool,
    verbose: bool,
    config_dir: str | None,
) -> None:
    """Advance narrative arcs through their lifecycle, one pass per cycle."""

    cfg = load_config(config_dir)
    if seed is not None:
        cfg.setdefault("simulation", {})["seed"] = seed

    log_file = cfg.get("storage", {}).get("log_file")
    _setup_logging(verbose=verbose, log_file=log_file)

    if dry_run:
        click.echo("DRY RUN — ledger and history will not be written.\n")

    driver = CycleDriver(config=cfg, dry_run=dry_run)
    if not asyncio.run(_run(driver, cycle, count)):
        sys.exit(1)


if __name__ == "__main__":
    main()
