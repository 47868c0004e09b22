from __future__ import annotations


class SchedulerError(Exception):
    """Base class for failures raised by the dispatch core."""


class InvariantViolation(SchedulerError):
    """The scheduler reached a state that should be unreachable."""


class PositionReadError(SchedulerError):
    """A driver reported a car position that cannot be trusted."""

    def __init__(self, car_id: int, reported: object, reason: str) -> None:
        super().__init__(f"Car {car_id} reported position {reported!r}: {reason}")
        self.car_id = car_id
        self.reported = reported


class InvalidCallError(SchedulerError, ValueError):
    """A hall call named a floor outside the building."""
