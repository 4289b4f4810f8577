"""Phase duration windows and tension decay rates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Cycles spent in each phase before advancing: (min, max).
DEFAULT_PHASE_DURATIONS: dict[str, tuple[int, int]] = {
    "seed": (2, 3),
    "opening": (3, 5),
    "building": (4, 8),
    "climax": (2, 4),
    "resolution": (1, 2),
}

# Fraction of tension lost per cycle. Slow through building/climax,
# fast once resolution begins.
DEFAULT_DECAY_RATES: dict[str, float] = {
    "seed": 0.05,
    "opening": 0.08,
    "building": 0.03,
    "climax": 0.02,
    "resolution": 0.15,
}

FALLBACK_DECAY_RATE = 0.1


@dataclass(frozen=True)
class LifecycleRules:
    durations: dict[str, tuple[int, int]] = field(
        default_factory=lambda: dict(DEFAULT_PHASE_DURATIONS)
    )
    decay_rates: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_DECAY_RATES))

    def window(self, phase: str) -> tuple[int, int] | None:
        return self.durations.get(phase)

    def decay_rate(self, phase: str) -> float:
        return self.decay_rates.get(phase, FALLBACK_DECAY_RATE)

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> LifecycleRules:
        """Build rules from ``lifecycle.phases`` overrides in settings."""
        phases_cfg = (cfg.get("lifecycle") or {}).get("phases") or {}
        durations = dict(DEFAULT_PHASE_DURATIONS)
        decay_rates = dict(DEFAULT_DECAY_RATES)

        for phase, phase_cfg in phases_cfg.items():
            if phase not in DEFAULT_PHASE_DURATIONS or not phase_cfg:
                continue
            lo, hi = durations[phase]
            lo = int(phase_cfg.get("duration_min", lo))
            hi = int(phase_cfg.get("duration_max", hi))
            if lo < 0 or hi < lo:
                raise ValueError(f"Invalid duration window for {phase}: {lo}-{hi}")
            durations[phase] = (lo, hi)
            if phase_cfg.get("decay_rate") is not None:
                rate = float(phase_cfg["decay_rate"])
                if not 0.0 <= rate <= 1.0:
                    raise ValueError(f"Decay rate for {phase} must be within 0-1, got {rate}")
                decay_rates[phase] = rate

        return cls(durations=durations, decay_rates=decay_rates)


DEFAULT_RULES = LifecycleRules()
