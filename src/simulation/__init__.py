"""Simulation primitives for LiftBank."""

from .building import Building
from .config import BankConfig
from .driver import IssuedCommand, SimulatedMovementDriver
from .simulation import MetricsSnapshot, MetricsTracker, ScheduledCall, Simulation

__all__ = [
    "BankConfig",
    "Building",
    "IssuedCommand",
    "MetricsSnapshot",
    "MetricsTracker",
    "ScheduledCall",
    "SimulatedMovementDriver",
    "Simulation",
]
