"""Simulation runtime: config loading and the per-cycle driver."""

from .config import load_config
from .driver import CycleDriver, cycle_rng

__all__ = ["CycleDriver", "cycle_rng", "load_config"]
