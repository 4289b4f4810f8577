"""Narrative system — arc phases, tension decay, resolution and story hooks."""

from .models import (
    Arc,
    ArcRef,
    CycleContext,
    CycleResults,
    Hook,
)
from .rules import DEFAULT_RULES, LifecycleRules
from .decay import decay_rate_for, decay_tension
from .progression import next_phase, schedule_next_transition, should_advance
from .resolution import check_resolution
from .hooks import phase_transition_hook, resolution_hook
from .lifecycle import advance_all

__all__ = [
    "Arc",
    "ArcRef",
    "CycleContext",
    "CycleResults",
    "DEFAULT_RULES",
    "Hook",
    "LifecycleRules",
    "advance_all",
    "check_resolution",
    "decay_rate_for",
    "decay_tension",
    "next_phase",
    "phase_transition_hook",
    "resolution_hook",
    "schedule_next_transition",
    "should_advance",
]
