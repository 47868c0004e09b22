from __future__ import annotations

from typing import Dict, Type

from .car import Car, Direction
from .dispatcher import DispatchScheduler
from .errors import InvalidCallError, InvariantViolation, PositionReadError, SchedulerError
from .interface import CarSelector, CarSnapshot, Completion, MovementDriver
from .movement import MovementController
from .nearest import NearestCarSelector
from .preferred_direction import PreferredDirectionSelector
from .registry import CallRegistry

__all__ = [
    "CallRegistry",
    "Car",
    "CarSelector",
    "CarSnapshot",
    "Completion",
    "Direction",
    "DispatchScheduler",
    "InvalidCallError",
    "InvariantViolation",
    "MovementController",
    "MovementDriver",
    "NearestCarSelector",
    "PositionReadError",
    "PreferredDirectionSelector",
    "SchedulerError",
    "get_selector",
]


SELECTOR_REGISTRY: Dict[str, Type[CarSelector]] = {
    "preferred_direction": PreferredDirectionSelector,
    "nearest": NearestCarSelector,
}


def get_selector(name: str, **kwargs) -> CarSelector:
    cls = SELECTOR_REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown selector '{name}'. Available: {', '.join(SELECTOR_REGISTRY)}")
    return cls(**kwargs)
