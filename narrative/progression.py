"""Phase advancement rules for arcs."""

from __future__ import annotations

from .models import BUILDING, CLIMAX, OPENING, RESOLUTION, SEED, RandomSource
from .rules import DEFAULT_RULES, LifecycleRules


# "resolved" is reached through resolution, never by advancing.
_PHASE_ORDER = (SEED, OPENING, BUILDING, CLIMAX, RESOLUTION)

OPENING_TENSION_MIN = 3.0
BUILDING_TENSION_PEAK = 7.0
CLIMAX_TENSION_RELEASE = 6.0
RESOLUTION_TENSION_RELEASE = 2.0


def phase_index(phase: str) -> int:
    """Position in the lifecycle, with resolved last; -1 when unknown."""
    if phase in _PHASE_ORDER:
        return _PHASE_ORDER.index(phase)
    if phase == "resolved":
        return len(_PHASE_ORDER)
    return -1


def next_phase(phase: str) -> str | None:
    """Phase that follows ``phase``, or None at the end of the order."""
    if phase not in _PHASE_ORDER:
        return None
    idx = _PHASE_ORDER.index(phase)
    if idx >= len(_PHASE_ORDER) - 1:
        return None
    return _PHASE_ORDER[idx + 1]


def should_advance(
    phase: str,
    phase_duration: int,
    tension: float,
    next_transition: int,
    current_cycle: int,
    rules: LifecycleRules | None = None,
) -> bool:
    """Decide whether an arc leaves its current phase this cycle.

    A scheduled transition cycle wins outright; otherwise each phase has
    its own mix of duration window and tension threshold.
    """
    if next_transition > 0 and current_cycle >= next_transition:
        return True

    window = (rules or DEFAULT_RULES).window(phase)
    if window is None:
        return False
    min_cycles, max_cycles = window
    min_met = phase_duration >= min_cycles
    max_reached = phase_duration >= max_cycles

    if phase == SEED:
        return max_reached
    if phase == OPENING:
        return min_met and (tension >= OPENING_TENSION_MIN or max_reached)
    if phase == BUILDING:
        return min_met and (tension >= BUILDING_TENSION_PEAK or max_reached)
    if phase == CLIMAX:
        return min_met and (tension < CLIMAX_TENSION_RELEASE or max_reached)
    if phase == RESOLUTION:
        return tension < RESOLUTION_TENSION_RELEASE or max_reached
    return False


def schedule_next_transition(
    phase: str,
    current_cycle: int,
    rng: RandomSource,
    rules: LifecycleRules | None = None,
) -> int:
    """Pick the forced-advance cycle for a phase that starts now.

    Jittered inside the phase's window so arcs don't move in lock-step.
    Returns 0 (unscheduled) for phases without a window.
    """
    window = (rules or DEFAULT_RULES).window(phase)
    if window is None:
        return 0
    min_cycles, max_cycles = window
    return current_cycle + min_cycles + rng.randint(0, max_cycles - min_cycles)
