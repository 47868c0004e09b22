from __future__ import annotations

from typing import Iterable, Optional

from .car import Car, Direction


def floor_distance(car: Car, floor: int) -> int:
    return abs(car.current_floor - floor)


def is_on_preferred_direction(car: Car, floor: int) -> bool:
    """Return True when the car is idle or already travelling toward ``floor``.

    A car sitting exactly on the floor only qualifies while idle; a moving car
    has either just left it or is about to stop there anyway.
    """

    if car.direction == Direction.IDLE:
        return True
    if car.direction == Direction.UP:
        return floor > car.current_floor
    return floor < car.current_floor


def nearest_stop(current_floor: int, stops: Iterable[int]) -> Optional[int]:
    """Closest stop by absolute distance; the first one seen wins a tie."""

    best: Optional[int] = None
    for stop in stops:
        if best is None or abs(stop - current_floor) < abs(best - current_floor):
            best = stop
    return best
