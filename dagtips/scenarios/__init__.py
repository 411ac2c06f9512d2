"""Simulation scenario runners."""

from .baseline import run_baseline_scenario

__all__ = ["run_baseline_scenario"]
