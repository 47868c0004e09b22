from __future__ import annotations

from typing import Optional, Sequence

from .car import Car
from .utils import floor_distance


class NearestCarSelector:
    """Assigns the call to the closest in-service car, ignoring direction."""

    def select_car(self, cars: Sequence[Car], floor: int) -> Optional[Car]:
        available = [car for car in cars if car.in_service()]
        if not available:
            return None
        # min() returns the first minimal element, so ties go to the lowest id.
        return min(available, key=lambda car: floor_distance(car, floor))
