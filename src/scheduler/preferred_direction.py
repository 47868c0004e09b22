from __future__ import annotations

from typing import Optional, Sequence

from .car import Car
from .utils import floor_distance, is_on_preferred_direction


class PreferredDirectionSelector:
    """Favours cars already heading toward the call over nearer cars heading away."""

    def select_car(self, cars: Sequence[Car], floor: int) -> Optional[Car]:
        best: Optional[Car] = None
        best_preferred = False
        best_distance = 0
        for car in cars:
            if not car.in_service():
                continue
            preferred = is_on_preferred_direction(car, floor)
            distance = floor_distance(car, floor)
            if best is None or self._beats(preferred, distance, best_preferred, best_distance):
                best, best_preferred, best_distance = car, preferred, distance
        return best

    def _beats(
        self,
        preferred: bool,
        distance: int,
        best_preferred: bool,
        best_distance: int,
    ) -> bool:
        if preferred != best_preferred:
            return preferred
        # Strict comparison keeps the earliest candidate on a tie.
        return distance < best_distance
