"""Data models for arcs, story hooks and per-cycle results."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Protocol

from .rules import DEFAULT_RULES, LifecycleRules

if TYPE_CHECKING:
    from ledger.store import ArcStore


# ── Phases ──────────────────────────────────────────────────────

SEED = "seed"
OPENING = "opening"
BUILDING = "building"
CLIMAX = "climax"
RESOLUTION = "resolution"
RESOLVED = "resolved"

PHASES = (SEED, OPENING, BUILDING, CLIMAX, RESOLUTION, RESOLVED)

# ── Resolution triggers ─────────────────────────────────────────

TENSION_RESOLVED = "tension_resolved"
TIME_EXPIRED = "time_expired"
# Set directly on the ledger by crisis/initiative/storyline trackers.
MANUAL = "manual"
CRISIS_ENDED = "crisis_ended"
INITIATIVE_PASSED = "initiative_passed"
STORYLINE_CLOSED = "storyline_closed"

TRIGGER_KINDS = (
    TENSION_RESOLVED,
    TIME_EXPIRED,
    MANUAL,
    CRISIS_ENDED,
    INITIATIVE_PASSED,
    STORYLINE_CLOSED,
)

# ── Hook types ──────────────────────────────────────────────────

ARC_PHASE_TRANSITION = "ARC_PHASE_TRANSITION"
ARC_RESOLVED = "ARC_RESOLVED"

DEFAULT_TENSION = 5.0

_TRUTHY = {"yes", "true", "1", "y", "on"}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _as_float(value: Any, default: float) -> float:
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _as_text(value).strip().lower() in _TRUTHY


# Arc attribute -> ledger column.
COLUMN_MAP = {
    "arc_id": "ArcId",
    "phase": "Phase",
    "tension": "Tension",
    "auto_advance": "AutoAdvance",
    "phase_start_cycle": "PhaseStartCycle",
    "phase_duration": "PhaseDuration",
    "next_phase_transition": "NextPhaseTransition",
    "tension_decay": "TensionDecay",
    "resolution_trigger": "ResolutionTrigger",
    "resolution_cycle": "ResolutionCycle",
    "resolution_notes": "ResolutionNotes",
    "arc_type": "Type",
    "name": "Name",
    "neighborhood": "Neighborhood",
}

# Metadata columns are never written by the engine.
_READ_ONLY = {"arc_id", "arc_type", "name", "neighborhood"}


@dataclass
class Arc:
    """One ledger row, decoded into typed fields."""

    arc_id: str
    phase: str = SEED
    tension: float = DEFAULT_TENSION
    auto_advance: bool = False
    phase_start_cycle: int = 0
    phase_duration: int = 0
    next_phase_transition: int = 0
    tension_decay: float = 0.0
    resolution_trigger: str = ""
    resolution_cycle: int = 0
    resolution_notes: str = ""

    # Descriptive metadata, only used in hook text
    arc_type: str = ""
    name: str = ""
    neighborhood: str = ""

    @property
    def is_resolved(self) -> bool:
        return self.phase == RESOLVED

    @classmethod
    def from_row(cls, row: dict[str, Any], rules: LifecycleRules | None = None) -> Arc:
        """Decode a ledger row; malformed numbers fall back to defaults."""
        rules = rules or DEFAULT_RULES
        phase = _as_text(row.get("Phase")).strip().lower() or SEED
        return cls(
            arc_id=_as_text(row.get("ArcId")),
            phase=phase,
            tension=_as_float(row.get("Tension"), DEFAULT_TENSION),
            auto_advance=_as_bool(row.get("AutoAdvance")),
            phase_start_cycle=_as_int(row.get("PhaseStartCycle")),
            phase_duration=_as_int(row.get("PhaseDuration")),
            next_phase_transition=_as_int(row.get("NextPhaseTransition")),
            tension_decay=_as_float(row.get("TensionDecay"), rules.decay_rate(phase)),
            resolution_trigger=_as_text(row.get("ResolutionTrigger")),
            resolution_cycle=_as_int(row.get("ResolutionCycle")),
            resolution_notes=_as_text(row.get("ResolutionNotes")),
            arc_type=_as_text(row.get("Type")),
            name=_as_text(row.get("Name")),
            neighborhood=_as_text(row.get("Neighborhood")),
        )

    def changed_fields(self, before: Arc) -> dict[str, Any]:
        """Ledger columns whose values differ from ``before``."""
        changes: dict[str, Any] = {}
        for f in fields(self):
            if f.name in _READ_ONLY:
                continue
            value = getattr(self, f.name)
            if value != getattr(before, f.name):
                changes[COLUMN_MAP[f.name]] = value
        return changes


@dataclass
class ArcRef:
    """Entry of the active-arc registry for one cycle."""

    arc_id: str
    arc_type: str = ""
    name: str = ""
    tension: float = 0.0
    phase: str = ""
    neighborhood: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArcRef:
        return cls(
            arc_id=_as_text(data.get("arcId", data.get("arc_id", ""))),
            arc_type=_as_text(data.get("type", data.get("arc_type", ""))),
            name=_as_text(data.get("name", "")),
            tension=_as_float(data.get("tension"), 0.0),
            phase=_as_text(data.get("phase", "")),
            neighborhood=_as_text(data.get("neighborhood", "")),
        )


@dataclass(frozen=True)
class Hook:
    """Story hook handed to downstream media composition."""

    hook_type: str
    arc_id: str
    arc_type: str
    tension: float
    severity: int
    description: str
    old_phase: str | None = None
    new_phase: str | None = None
    resolution_trigger: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "hookType": self.hook_type,
            "arcId": self.arc_id,
            "arcType": self.arc_type,
        }
        if self.old_phase is not None:
            data["oldPhase"] = self.old_phase
        if self.new_phase is not None:
            data["newPhase"] = self.new_phase
        if self.resolution_trigger is not None:
            data["resolutionTrigger"] = self.resolution_trigger
        data["tension"] = self.tension
        data["severity"] = self.severity
        data["description"] = self.description
        return data


@dataclass
class CycleResults:
    processed: int = 0
    advanced: int = 0
    resolved: int = 0
    tension_decayed: int = 0
    errors: list[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        text = (
            f"Processed: {self.processed}, Advanced: {self.advanced}, "
            f"Resolved: {self.resolved}, Tension decayed: {self.tension_decayed}"
        )
        if self.errors:
            text += f", Errors: {len(self.errors)}"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "advanced": self.advanced,
            "resolved": self.resolved,
            "tensionDecayed": self.tension_decayed,
            "errors": list(self.errors),
            "aborted": self.aborted,
        }


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


@dataclass
class CycleContext:
    """Everything one lifecycle pass needs; nothing is read from globals."""

    cycle: int
    rng: RandomSource
    store: ArcStore
    hooks: list[Hook] = field(default_factory=list)
    rules: LifecycleRules = DEFAULT_RULES
