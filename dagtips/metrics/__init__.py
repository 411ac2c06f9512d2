"""Metrics collection and analysis for simulations."""

from .collector import MetricsCollector
from .results import BlockCreated, BlockDelivered, SimulationResults

__all__ = [
    "BlockCreated",
    "BlockDelivered",
    "MetricsCollector",
    "SimulationResults",
]
