"""Story hooks for arc transitions and resolutions."""

from __future__ import annotations

from .models import ARC_PHASE_TRANSITION, ARC_RESOLVED, CLIMAX, RESOLUTION, Arc, Hook

_DEFAULT_SEVERITY = 5
_TRANSITION_SEVERITY = {
    CLIMAX: 7,
    RESOLUTION: 6,
}
_RESOLVED_SEVERITY = 7


def _label(arc: Arc) -> str:
    return arc.name or arc.arc_id


def phase_transition_hook(arc: Arc, old_phase: str, new_phase: str) -> Hook:
    return Hook(
        hook_type=ARC_PHASE_TRANSITION,
        arc_id=arc.arc_id,
        arc_type=arc.arc_type or "arc",
        old_phase=old_phase,
        new_phase=new_phase,
        tension=arc.tension,
        severity=_TRANSITION_SEVERITY.get(new_phase, _DEFAULT_SEVERITY),
        description=f'Arc "{_label(arc)}" advanced from {old_phase} to {new_phase}',
    )


def resolution_hook(arc: Arc, trigger: str) -> Hook:
    return Hook(
        hook_type=ARC_RESOLVED,
        arc_id=arc.arc_id,
        arc_type=arc.arc_type or "arc",
        resolution_trigger=trigger,
        tension=arc.tension,
        severity=_RESOLVED_SEVERITY,
        description=f'Arc "{_label(arc)}" resolved via {trigger}',
    )
