from __future__ import annotations

from typing import List, Tuple

import pytest

from scheduler import Car, DispatchScheduler


class RecordingDriver:
    """Movement driver that only records commands; tests complete them by hand."""

    def __init__(self) -> None:
        self.commands: List[Tuple] = []

    def move(self, car_id: int, from_floor: int, to_floor: int) -> None:
        self.commands.append(("move", car_id, from_floor, to_floor))

    def cycle_doors(self, car_id: int, at_floor: int) -> None:
        self.commands.append(("doors", car_id, at_floor))

    @property
    def last(self) -> Tuple:
        return self.commands[-1]

    def last_for(self, car_id: int) -> Tuple:
        return next(c for c in reversed(self.commands) if c[1] == car_id)


@pytest.fixture
def driver() -> RecordingDriver:
    return RecordingDriver()


@pytest.fixture
def make_dispatcher(driver):
    def _make(*floors: int, num_floors: int = 10, **kwargs) -> DispatchScheduler:
        cars = [Car(car_id=i, current_floor=floor) for i, floor in enumerate(floors, start=1)]
        return DispatchScheduler(cars, driver, num_floors, **kwargs)

    return _make


@pytest.fixture
def complete(driver):
    """Finish the outstanding command of one car, reporting the target floor."""

    def _complete(dispatcher: DispatchScheduler, car_id: int) -> None:
        command = driver.last_for(car_id)
        if command[0] == "move":
            dispatcher.move_completed(car_id, command[3])
        else:
            dispatcher.door_cycle_completed(car_id)

    return _complete


@pytest.fixture
def drive_until_idle(complete):
    def _drive(dispatcher: DispatchScheduler, limit: int = 200) -> None:
        for _ in range(limit):
            busy = [car for car in dispatcher.cars if car.busy]
            if not busy:
                return
            complete(dispatcher, busy[0].car_id)
        raise AssertionError("cars never went idle")

    return _drive
