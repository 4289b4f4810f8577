"""Per-cycle tension decay."""

from __future__ import annotations

from .rules import DEFAULT_RULES, LifecycleRules


def decay_tension(tension: float, rate: float) -> float:
    """Return tension after one cycle of decay, never below zero."""
    decayed = max(0.0, tension - tension * rate)
    return round(decayed, 2)


def decay_rate_for(phase: str, rules: LifecycleRules | None = None) -> float:
    return (rules or DEFAULT_RULES).decay_rate(phase)
