from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple

from .car import Car

MOVE = "move"
DOORS = "doors"


@dataclass(frozen=True)
class CarSnapshot:
    """Read-only view of a car for selectors, UIs and reports."""

    car_id: int
    floor: int
    direction: int
    stops: Tuple[int, ...]
    busy: bool
    faulted: bool
    state: str

    @classmethod
    def of(cls, car: Car, state: str) -> "CarSnapshot":
        return cls(
            car_id=car.car_id,
            floor=car.current_floor,
            direction=int(car.direction),
            stops=tuple(car.stops),
            busy=car.busy,
            faulted=car.faulted,
            state=state,
        )


@dataclass(frozen=True)
class Completion:
    """Notification from a movement driver that a command has finished.

    ``reported_floor`` is passed through exactly as the driver produced it so
    the controller can reject positions that do not parse.
    """

    car_id: int
    kind: str
    reported_floor: object = None


class CarSelector(Protocol):
    """Strategy interface for choosing which car answers a hall call."""

    def select_car(self, cars: Sequence[Car], floor: int) -> Optional[Car]:
        """
        Return the car that should add ``floor`` to its stops.

        Implementations only consider cars that are in service and return
        None when no car qualifies.
        """
        ...


class MovementDriver(Protocol):
    """Executes physical or visual motion and reports completion later."""

    def move(self, car_id: int, from_floor: int, to_floor: int) -> None:
        ...

    def cycle_doors(self, car_id: int, at_floor: int) -> None:
        ...
