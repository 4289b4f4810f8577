"""Terminal conditions for arcs."""

from __future__ import annotations

from .models import RESOLUTION, SEED, TENSION_RESOLVED, TIME_EXPIRED
from .rules import DEFAULT_RULES, LifecycleRules

RESOLVED_TENSION = 1.0


def check_resolution(
    tension: float,
    phase: str,
    phase_duration: int,
    rules: LifecycleRules | None = None,
) -> str | None:
    """Return the trigger that ends the arc this cycle, if any.

    Seed arcs never resolve on low tension: they haven't started yet.
    """
    if tension < RESOLVED_TENSION and phase != SEED:
        return TENSION_RESOLVED

    if phase == RESOLUTION:
        window = (rules or DEFAULT_RULES).window(RESOLUTION)
        if window is not None and phase_duration >= window[1]:
            return TIME_EXPIRED

    return None


def resolution_notes(trigger: str, cycle: int) -> str:
    return f"Arc resolved via {trigger} at cycle {cycle}"
