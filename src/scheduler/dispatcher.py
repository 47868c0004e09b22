from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .car import Car
from .errors import InvalidCallError, InvariantViolation, SchedulerError
from .interface import DOORS, MOVE, CarSelector, CarSnapshot, Completion, MovementDriver
from .movement import MovementController
from .preferred_direction import PreferredDirectionSelector
from .registry import CallRegistry

logger = logging.getLogger(__name__)


class DispatchScheduler:
    """Admits hall calls, assigns them to cars and drives each car's controller.

    All scheduler state hangs off one instance: the car records, one
    :class:`MovementController` per car and the :class:`CallRegistry` that
    reads across them. Callers must serialise access; the scheduler assumes a
    single control loop.
    """

    def __init__(
        self,
        cars: Sequence[Car],
        driver: MovementDriver,
        num_floors: int,
        selector: Optional[CarSelector] = None,
    ) -> None:
        if not cars:
            raise ValueError("A dispatch scheduler needs at least one car")
        ids = [car.car_id for car in cars]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate car ids: {ids}")
        self.cars: List[Car] = list(cars)
        self.driver = driver
        self.num_floors = num_floors
        self.selector: CarSelector = selector or PreferredDirectionSelector()
        self.registry = CallRegistry(self.cars)
        self.controllers: Dict[int, MovementController] = {
            car.car_id: MovementController(
                car,
                driver,
                num_floors,
                on_served=self._stop_served,
                on_idle=self._car_idle,
            )
            for car in self.cars
        }
        self.event_hooks: Dict[str, List[Callable[[dict], None]]] = {}

    def on_event(self, event: str, callback: Callable[[dict], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def request_call(
        self, floor: int, direction: Optional[int] = None, requested_at: int = 0
    ) -> Optional[int]:
        """Admit a hall call and return the id of the car now serving it.

        Returns None when the floor already has an outstanding call. The
        ``direction`` of the button press is only logged; it never becomes
        part of the stop.
        """
        self.validate_floor(floor)
        if self.registry.is_duplicate(floor):
            logger.debug("Dropping duplicate call for floor %s", floor)
            self._emit("dropped", {"floor": floor, "direction": direction, "time": requested_at})
            return None

        car = self._parked_at(floor)
        if car is None:
            car = self.select_car(floor)

        car.add_stop(floor)
        self.registry.admit(floor, requested_at)
        logger.info(
            "Call floor=%s direction=%s assigned to car %s at floor %s",
            floor,
            direction,
            car.car_id,
            car.current_floor,
        )
        self._emit(
            "assigned",
            {"floor": floor, "direction": direction, "car_id": car.car_id, "time": requested_at},
        )
        self._evaluate(car)
        return car.car_id

    def select_car(self, floor: int) -> Car:
        car = self.selector.select_car(self.cars, floor)
        if car is None:
            logger.error("No car in service for a call at floor %s", floor)
            self._emit("fault", {"car_id": None, "floor": floor})
            raise InvariantViolation(f"No car available for a call at floor {floor}")
        return car

    def handle_completion(self, completion: Completion) -> None:
        controller = self.controllers.get(completion.car_id)
        if controller is None:
            raise InvariantViolation(f"Completion for unknown car {completion.car_id}")
        if completion.kind not in (MOVE, DOORS):
            raise InvariantViolation(f"Unknown completion kind {completion.kind!r}")
        try:
            if completion.kind == MOVE:
                controller.move_completed(completion.reported_floor)
            else:
                controller.door_cycle_completed()
        except SchedulerError:
            self._fault(controller.car)
            raise

    def move_completed(self, car_id: int, reported_floor: object = None) -> None:
        self.handle_completion(Completion(car_id, MOVE, reported_floor))

    def door_cycle_completed(self, car_id: int) -> None:
        self.handle_completion(Completion(car_id, DOORS))

    def is_idle(self) -> bool:
        return all(not car.stops and not car.busy for car in self.cars if car.in_service())

    def snapshot(self) -> List[CarSnapshot]:
        return [
            CarSnapshot.of(car, self.controllers[car.car_id].state) for car in self.cars
        ]

    def validate_floor(self, floor: object) -> None:
        if isinstance(floor, bool) or not isinstance(floor, int):
            raise InvalidCallError(f"Floor must be an integer, got {floor!r}")
        if not 1 <= floor <= self.num_floors:
            raise InvalidCallError(f"Floor {floor} outside 1..{self.num_floors}")

    def _parked_at(self, floor: int) -> Optional[Car]:
        for car in self.cars:
            if car.in_service() and car.is_idle and not car.busy and car.current_floor == floor:
                return car
        return None

    def _evaluate(self, car: Car) -> None:
        try:
            self.controllers[car.car_id].evaluate()
        except SchedulerError:
            self._fault(car)
            raise

    def _stop_served(self, car: Car, floor: int) -> None:
        requested_at = self.registry.release(floor)
        self._emit(
            "served",
            {"floor": floor, "car_id": car.car_id, "requested_at": requested_at},
        )

    def _car_idle(self, car: Car) -> None:
        self._emit("idle", {"car_id": car.car_id, "floor": car.current_floor})

    def _fault(self, car: Car) -> None:
        logger.exception("Car %s faulted", car.car_id)
        self._emit("fault", {"car_id": car.car_id, "floor": car.current_floor})

    def _emit(self, event: str, payload: dict) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)
