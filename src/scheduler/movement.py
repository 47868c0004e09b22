from __future__ import annotations

import logging
from typing import Callable, Optional

from .car import Car, Direction
from .errors import InvariantViolation, PositionReadError, SchedulerError
from .interface import MovementDriver
from .utils import nearest_stop

logger = logging.getLogger(__name__)

IDLE = "idle"
MOVING = "moving"
DOOR_CYCLE = "door_cycle"
HALTED = "halted"


class MovementController:
    """State machine that walks one car through its stops using SCAN.

    The controller never waits on anything itself. It issues exactly one
    command to the driver, marks the car busy, and resumes only when the
    owner forwards the matching completion via :meth:`move_completed` or
    :meth:`door_cycle_completed`.
    """

    def __init__(
        self,
        car: Car,
        driver: MovementDriver,
        num_floors: int,
        on_served: Optional[Callable[[Car, int], None]] = None,
        on_idle: Optional[Callable[[Car], None]] = None,
    ) -> None:
        self.car = car
        self.driver = driver
        self.num_floors = num_floors
        self.on_served = on_served
        self.on_idle = on_idle
        self.state = IDLE
        self._target_floor: Optional[int] = None

    def evaluate(self) -> None:
        """Issue the next command for the car unless one is outstanding."""
        if self.state == HALTED:
            raise InvariantViolation(f"Car {self.car.car_id} is halted")
        if self.car.busy:
            logger.debug("Car %s busy, deferring evaluation", self.car.car_id)
            return
        try:
            self._decide()
        except SchedulerError:
            self._halt()
            raise

    def move_completed(self, reported_floor: object = None) -> None:
        try:
            self._require(MOVING)
            self.car.current_floor = self._read_position(reported_floor)
            self._target_floor = None
            self.car.busy = False
            self._decide()
        except SchedulerError:
            self._halt()
            raise

    def door_cycle_completed(self) -> None:
        try:
            self._require(DOOR_CYCLE)
            floor = self.car.current_floor
            self.car.remove_stop(floor)
            self.car.busy = False
            if self.on_served is not None:
                self.on_served(self.car, floor)
            if not self.car.stops:
                self.car.direction = Direction.IDLE
                self.state = IDLE
                logger.info("Car %s idle at floor %s", self.car.car_id, floor)
                if self.on_idle is not None:
                    self.on_idle(self.car)
                return
            self._decide()
        except SchedulerError:
            self._halt()
            raise

    def _decide(self) -> None:
        car = self.car
        if not car.stops:
            raise InvariantViolation(
                f"Car {car.car_id} evaluated with no stops while {car.direction.name}"
            )
        if car.has_stop(car.current_floor):
            self._issue_door_cycle()
            return
        self._issue_move(self._next_direction())

    def _next_direction(self) -> Direction:
        car = self.car
        floor = car.current_floor
        if car.direction == Direction.UP:
            if any(stop > floor for stop in car.stops):
                return Direction.UP
            return Direction.DOWN
        if car.direction == Direction.DOWN:
            if any(stop < floor for stop in car.stops):
                return Direction.DOWN
            return Direction.UP
        target = nearest_stop(floor, car.stops)
        return Direction.UP if target > floor else Direction.DOWN

    def _issue_move(self, direction: Direction) -> None:
        car = self.car
        from_floor = car.current_floor
        to_floor = from_floor + int(direction)
        if not 1 <= to_floor <= self.num_floors:
            raise InvariantViolation(
                f"Car {car.car_id} would leave the shaft moving {from_floor}->{to_floor}"
            )
        if direction != car.direction:
            logger.debug("Car %s heading %s", car.car_id, direction.name)
        car.direction = direction
        car.busy = True
        self.state = MOVING
        self._target_floor = to_floor
        logger.debug("Car %s move %s -> %s", car.car_id, from_floor, to_floor)
        self.driver.move(car.car_id, from_floor, to_floor)

    def _issue_door_cycle(self) -> None:
        car = self.car
        car.busy = True
        self.state = DOOR_CYCLE
        logger.debug("Car %s cycling doors at floor %s", car.car_id, car.current_floor)
        self.driver.cycle_doors(car.car_id, car.current_floor)

    def _read_position(self, reported: object) -> int:
        expected = self._target_floor
        if expected is None:
            raise InvariantViolation(f"Car {self.car.car_id} has no move outstanding")
        if reported is None:
            return expected
        if isinstance(reported, bool):
            raise PositionReadError(self.car.car_id, reported, "not a floor number")
        try:
            floor = int(str(reported).strip())
        except ValueError:
            raise PositionReadError(self.car.car_id, reported, "not a floor number") from None
        if not 1 <= floor <= self.num_floors:
            raise PositionReadError(self.car.car_id, reported, "outside the building")
        if floor != expected:
            raise PositionReadError(
                self.car.car_id, reported, f"expected floor {expected}"
            )
        return floor

    def _require(self, state: str) -> None:
        if self.state != state:
            raise InvariantViolation(
                f"Car {self.car.car_id} got a completion while {self.state}, expected {state}"
            )

    def _halt(self) -> None:
        if self.state == HALTED:
            return
        self.state = HALTED
        self.car.faulted = True
        self.car.busy = False
        logger.debug("Car %s halted at floor %s", self.car.car_id, self.car.current_floor)
