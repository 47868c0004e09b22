from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from scheduler import Completion, InvariantViolation
from scheduler.interface import DOORS, MOVE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedCommand:
    time: int
    car_id: int
    kind: str
    from_floor: int
    to_floor: int


class SimulatedMovementDriver:
    """Completes each command a fixed number of ticks after it was issued."""

    def __init__(self, move_ticks: int = 2, door_ticks: int = 5) -> None:
        self.move_ticks = move_ticks
        self.door_ticks = door_ticks
        self.current_time = 0
        self.commands: List[IssuedCommand] = []
        self._outstanding: Dict[int, Tuple[int, Completion]] = {}

    def move(self, car_id: int, from_floor: int, to_floor: int) -> None:
        self._issue(car_id, MOVE, from_floor, to_floor, self.move_ticks)

    def cycle_doors(self, car_id: int, at_floor: int) -> None:
        self._issue(car_id, DOORS, at_floor, at_floor, self.door_ticks)

    def collect_due(self, now: int) -> List[Completion]:
        """Pop every completion due at or before ``now``, earliest first, car id breaking ties."""
        self.current_time = now
        due = [
            (due_at, car_id)
            for car_id, (due_at, _) in self._outstanding.items()
            if due_at <= now
        ]
        due.sort()
        return [self._outstanding.pop(car_id)[1] for _, car_id in due]

    def __len__(self) -> int:
        return len(self._outstanding)

    def _issue(self, car_id: int, kind: str, from_floor: int, to_floor: int, ticks: int) -> None:
        if car_id in self._outstanding:
            raise InvariantViolation(f"Car {car_id} already has a command in flight")
        command = IssuedCommand(self.current_time, car_id, kind, from_floor, to_floor)
        self.commands.append(command)
        reported = to_floor if kind == MOVE else None
        self._outstanding[car_id] = (
            self.current_time + ticks,
            Completion(car_id, kind, reported),
        )
        logger.debug("t=%s car %s %s %s->%s", self.current_time, car_id, kind, from_floor, to_floor)
