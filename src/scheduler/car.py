from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List


class Direction(IntEnum):
    DOWN = -1
    IDLE = 0
    UP = 1


@dataclass
class Car:
    """Per-car bookkeeping used by the dispatcher and its controller."""

    car_id: int
    current_floor: int = 1
    direction: Direction = Direction.IDLE
    stops: List[int] = field(default_factory=list)
    busy: bool = False
    faulted: bool = False

    @property
    def is_idle(self) -> bool:
        return self.direction == Direction.IDLE

    def in_service(self) -> bool:
        return not self.faulted

    def has_stop(self, floor: int) -> bool:
        return floor in self.stops

    def add_stop(self, floor: int) -> bool:
        if floor in self.stops:
            return False
        self.stops.append(floor)
        return True

    def remove_stop(self, floor: int) -> None:
        if floor in self.stops:
            self.stops.remove(floor)
