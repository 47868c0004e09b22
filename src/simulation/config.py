from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class BankConfig:
    """Shape and timing of a simulated elevator bank."""

    num_floors: int = 10
    num_cars: int = 1
    start_floor: int = 1
    move_ticks: int = 2
    door_ticks: int = 5
    selector: str = "preferred_direction"

    def validate(self) -> None:
        if self.num_floors < 2:
            raise ValueError("num_floors must be at least 2")
        if self.num_cars < 1:
            raise ValueError("num_cars must be at least 1")
        if not 1 <= self.start_floor <= self.num_floors:
            raise ValueError(f"start_floor must be within 1..{self.num_floors}")
        if self.move_ticks < 1 or self.door_ticks < 1:
            raise ValueError("move_ticks and door_ticks must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BankConfig":
        config = cls(
            num_floors=int(data.get("num_floors", cls.num_floors)),
            num_cars=int(data.get("num_cars", cls.num_cars)),
            start_floor=int(data.get("start_floor", cls.start_floor)),
            move_ticks=int(data.get("move_ticks", cls.move_ticks)),
            door_ticks=int(data.get("door_ticks", cls.door_ticks)),
            selector=data.get("selector", cls.selector),
        )
        config.validate()
        return config
