from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .car import Car

logger = logging.getLogger(__name__)


class CallRegistry:
    """Admission filter over the stop sets of every car in the bank.

    The registry never stores stops itself: a floor is outstanding exactly
    while some car still has it in ``stops``. It only remembers when each
    outstanding call was admitted so wait times can be reported.
    """

    def __init__(self, cars: Sequence[Car]) -> None:
        self._cars = cars
        self._requested_at: Dict[int, int] = {}

    def is_duplicate(self, floor: int) -> bool:
        return any(car.has_stop(floor) for car in self._cars)

    def admit(self, floor: int, requested_at: int) -> None:
        self._requested_at[floor] = requested_at
        logger.debug("Admitted call for floor %s at t=%s", floor, requested_at)

    def release(self, floor: int) -> Optional[int]:
        return self._requested_at.pop(floor, None)

    def active_floors(self) -> List[int]:
        return sorted({stop for car in self._cars for stop in car.stops})

    def __len__(self) -> int:
        return sum(len(car.stops) for car in self._cars)
