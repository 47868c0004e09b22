from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from scheduler import Car, DispatchScheduler, get_selector

from .config import BankConfig
from .driver import SimulatedMovementDriver


@dataclass
class Building:
    """Container for the cars of one bank, their driver and the dispatcher."""

    config: BankConfig = field(default_factory=BankConfig)
    cars: List[Car] = field(init=False)
    driver: SimulatedMovementDriver = field(init=False)
    dispatcher: DispatchScheduler = field(init=False)

    def __post_init__(self) -> None:
        self.config.validate()
        self.cars = [
            Car(car_id=i, current_floor=self.config.start_floor)
            for i in range(1, self.config.num_cars + 1)
        ]
        self.driver = SimulatedMovementDriver(
            move_ticks=self.config.move_ticks, door_ticks=self.config.door_ticks
        )
        self.dispatcher = DispatchScheduler(
            self.cars,
            self.driver,
            self.config.num_floors,
            selector=get_selector(self.config.selector),
        )

    @property
    def num_floors(self) -> int:
        return self.config.num_floors

    @property
    def selector_name(self) -> str:
        return self.config.selector

    def set_selector(self, name: str, **options) -> None:
        selector = get_selector(name, **options)
        self.config.selector = name
        self.dispatcher.selector = selector

    def snapshot(self) -> dict:
        return {
            "floors": self.num_floors,
            "active_calls": self.dispatcher.registry.active_floors(),
            "cars": [
                {
                    "id": snap.car_id,
                    "floor": snap.floor,
                    "direction": snap.direction,
                    "stops": list(snap.stops),
                    "state": snap.state,
                    "busy": snap.busy,
                    "faulted": snap.faulted,
                }
                for snap in self.dispatcher.snapshot()
            ],
        }
