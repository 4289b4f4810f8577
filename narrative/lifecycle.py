"""Arc lifecycle pass: decay, resolve or advance every active arc once per cycle.

Per arc: load the ledger row -> decay tension -> check resolution triggers
-> otherwise check phase advancement -> commit changed columns in a single
save -> append hooks. Failures on one arc never stop the others; a ledger
without lifecycle columns aborts the whole pass before anything is written.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any

from ledger.errors import ArcStoreError, ConfigurationError
from ledger.schema import fields_for_columns, missing_required_columns

from .decay import decay_tension
from .hooks import phase_transition_hook, resolution_hook
from .models import RESOLVED, Arc, ArcRef, CycleContext, CycleResults, Hook
from .progression import next_phase, schedule_next_transition, should_advance
from .resolution import check_resolution, resolution_notes

logger = logging.getLogger(__name__)


@dataclass
class _ArcOutcome:
    advanced: bool = False
    resolved: bool = False
    tension_decayed: bool = False
    hooks: list[Hook] = field(default_factory=list)


def _ref_id(ref: Any) -> str:
    if isinstance(ref, dict):
        return ArcRef.from_dict(ref).arc_id
    if isinstance(ref, ArcRef):
        return ref.arc_id or ""
    return ""


def process_arc(arc: Arc, ctx: CycleContext) -> _ArcOutcome:
    """Mutate ``arc`` in place for one cycle and report what happened."""
    outcome = _ArcOutcome()
    cycle = ctx.cycle

    if not arc.phase_start_cycle:
        arc.phase_start_cycle = cycle
    arc.phase_duration = max(0, cycle - arc.phase_start_cycle)

    if arc.tension < 0:
        arc.tension = 0.0
    if arc.tension > 0:
        new_tension = decay_tension(arc.tension, arc.tension_decay)
        if new_tension != arc.tension:
            outcome.tension_decayed = True
        arc.tension = new_tension

    trigger = check_resolution(arc.tension, arc.phase, arc.phase_duration, ctx.rules)
    if trigger:
        arc.phase = RESOLVED
        arc.resolution_trigger = trigger
        arc.resolution_cycle = cycle
        arc.resolution_notes = resolution_notes(trigger, cycle)
        outcome.resolved = True
        outcome.hooks.append(resolution_hook(arc, trigger))
        return outcome

    if should_advance(
        arc.phase,
        arc.phase_duration,
        arc.tension,
        arc.next_phase_transition,
        cycle,
        ctx.rules,
    ):
        new_phase = next_phase(arc.phase)
        # The resolution phase only ends through a resolution trigger.
        if new_phase:
            old_phase = arc.phase
            arc.phase = new_phase
            arc.phase_start_cycle = cycle
            arc.phase_duration = 0
            arc.next_phase_transition = schedule_next_transition(new_phase, cycle, ctx.rng, ctx.rules)
            arc.tension_decay = ctx.rules.decay_rate(new_phase)
            outcome.advanced = True
            outcome.hooks.append(phase_transition_hook(arc, old_phase, new_phase))

    return outcome




def _advance_arc(arc_id: str, columns: list[str], ctx: CycleContext) -> tuple[Arc, Arc, _ArcOutcome] | None:
    """Load, process and save one arc. Returns None when the arc is not ours to move."""
    row = ctx.store.load(arc_id)
    before = Arc.from_row(row, ctx.rules)
    if not before.auto_advance or before.is_resolved:
        return None

    arc = dataclasses.replace(before)
    outcome = process_arc(arc, ctx)

    changes = fields_for_columns(arc.changed_fields(before), columns)
    try:
        ctx.store.save(arc_id, changes)
    except ArcStoreError as e:
        raise ArcStoreError(f"Failed to save arc {arc_id}: {e}") from e
    return before, arc, outcome


def advance_all(active_arcs: list[ArcRef | dict[str, Any]], ctx: CycleContext) -> CycleResults:
    """Run one lifecycle pass over ``active_arcs``; hooks land in ``ctx.hooks``.

    Never raises: a ledger that cannot be read aborts the pass, and any
    failure on a single arc is recorded in ``errors`` before moving on.
    """
    results = CycleResults()
    logger.info("Advancing arc lifecycles for cycle %d (%d arcs)", ctx.cycle, len(active_arcs))

    try:
        columns = list(ctx.store.columns())
    except Exception as e:
        results.errors.append(f"Could not read ledger columns: {e}")
        results.aborted = True
        logger.exception("Arc lifecycle pass aborted: could not read ledger columns")
        return results

    missing = missing_required_columns(columns)
    if missing:
        error = ConfigurationError(missing)
        logger.error("Arc lifecycle pass aborted: %s", error)
        results.errors.append(str(error))
        results.aborted = True
        return results

    for position, ref in enumerate(active_arcs):
        arc_id = _ref_id(ref)
        if not arc_id:
            results.errors.append(f"Active arc at position {position} has no arcId")
            logger.warning("Skipping active arc without id at position %d", position)
            continue

        results.processed += 1

        try:
            committed = _advance_arc(arc_id, columns, ctx)
        except LookupError as e:
            results.errors.append(str(e))
            logger.warning("%s", e)
            continue
        except ArcStoreError as e:
            results.errors.append(str(e))
            logger.warning("%s", e)
            continue
        except Exception as e:
            results.errors.append(f"Error processing arc {arc_id}: {e}")
            logger.exception("Error processing arc %s", arc_id)
            continue

        if committed is None:
            continue
        before, arc, outcome = committed

        results.tension_decayed += outcome.tension_decayed
        results.advanced += outcome.advanced
        results.resolved += outcome.resolved
        ctx.hooks.extend(outcome.hooks)

        if outcome.resolved:
            logger.info("Arc %s resolved via %s", arc_id, arc.resolution_trigger)
        elif outcome.advanced:
            logger.info("Arc %s advanced from %s to %s", arc_id, before.phase, arc.phase)
        else:
            logger.debug(
                "Arc %s holds in %s (duration=%d tension=%.2f)",
                arc_id,
                arc.phase,
                arc.phase_duration,
                arc.tension,
            )

    logger.info("Arc lifecycle pass complete. %s", results.summary())
    return results
