from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from scheduler import Completion, SchedulerError
from scheduler.interface import MOVE

from .building import Building

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledCall:
    time: int
    floor: int
    direction: Optional[int] = None


@dataclass
class MetricsSnapshot:
    time_step: int
    average_wait: float
    wait_p95: float
    served: int
    dropped: int
    moves: int
    door_cycles: int
    faults: int


class MetricsTracker:
    def __init__(self) -> None:
        self.wait_times: List[int] = []
        self.served: int = 0
        self.dropped: int = 0
        self.moves: int = 0
        self.door_cycles: int = 0
        self.faults: int = 0

    def record_served(self, requested_at: Optional[int], served_at: int) -> None:
        self.served += 1
        if requested_at is not None:
            self.wait_times.append(served_at - requested_at)

    def record_completion(self, completion: Completion) -> None:
        if completion.kind == MOVE:
            self.moves += 1
        else:
            self.door_cycles += 1

    def _average(self, values: List[int]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

    def _percentile(self, values: List[int], percentile: float) -> float:
        if not values:
            return 0.0
        sorted_vals = sorted(values)
        k = (len(sorted_vals) - 1) * percentile
        f = math.floor(k)
        c = math.ceil(k)
        if f == c:
            return float(sorted_vals[int(k)])
        d0 = sorted_vals[int(f)] * (c - k)
        d1 = sorted_vals[int(c)] * (k - f)
        return float(d0 + d1)

    def snapshot(self, time_step: int) -> MetricsSnapshot:
        return MetricsSnapshot(
            time_step=time_step,
            average_wait=self._average(self.wait_times),
            wait_p95=self._percentile(self.wait_times, 0.95),
            served=self.served,
            dropped=self.dropped,
            moves=self.moves,
            door_cycles=self.door_cycles,
            faults=self.faults,
        )


class Simulation:
    """Tick-driven control loop around a :class:`Building`.

    Each tick delivers the driver completions that are due, then injects
    scripted and random hall calls. Only one scheduler decision runs at a
    time, so cars never interleave inside a step.
    """

    def __init__(
        self,
        building: Building,
        arrival_rate_per_floor: float = 0.0,
        scheduled_calls: Optional[Iterable[ScheduledCall]] = None,
        random_seed: Optional[int] = None,
        metrics_hook_interval: int = 1,
    ) -> None:
        self.building = building
        self.arrival_rate_per_floor = arrival_rate_per_floor
        self.scheduled_calls = sorted(scheduled_calls or [], key=lambda call: call.time)
        for call in self.scheduled_calls:
            building.dispatcher.validate_floor(call.floor)
        self.random = random.Random(random_seed)
        self.current_time: int = 0
        self.metrics = MetricsTracker()
        self.event_hooks: Dict[str, List[Callable[[object], None]]] = {}
        self.metrics_hook_interval = max(1, metrics_hook_interval)

        dispatcher = building.dispatcher
        dispatcher.on_event("served", self._on_served)
        dispatcher.on_event("dropped", self._on_dropped)
        dispatcher.on_event("fault", self._on_fault)
        for event in ("assigned", "idle"):
            dispatcher.on_event(event, lambda payload, event=event: self._emit(event, payload))

    def run(self, duration: int) -> None:
        for _ in range(duration):
            self.step()

    def run_until_idle(self, max_ticks: int = 10_000) -> int:
        """Step until every call is served; return the number of ticks taken."""
        start = self.current_time
        while not self.is_idle():
            if self.current_time - start >= max_ticks:
                raise RuntimeError(f"Simulation still busy after {max_ticks} ticks")
            self.step()
        return self.current_time - start

    def is_idle(self) -> bool:
        return (
            not self.scheduled_calls
            and len(self.building.driver) == 0
            and self.building.dispatcher.is_idle()
        )

    def step(self) -> None:
        for completion in self.building.driver.collect_due(self.current_time):
            self.metrics.record_completion(completion)
            try:
                self.building.dispatcher.handle_completion(completion)
            except SchedulerError as exc:
                logger.debug("Car %s stopped: %s", completion.car_id, exc)

        self._inject_scheduled_calls()
        self._generate_random_calls()

        if self.current_time % self.metrics_hook_interval == 0:
            self._emit_metrics()

        self.current_time += 1

    def request_call(self, floor: int, direction: Optional[int] = None) -> Optional[int]:
        """Forward an external hall call; scheduler errors propagate to the caller."""
        self.building.driver.current_time = self.current_time
        return self.building.dispatcher.request_call(
            floor, direction, requested_at=self.current_time
        )

    def on_event(self, event: str, callback: Callable[[object], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def _inject_scheduled_calls(self) -> None:
        while self.scheduled_calls and self.scheduled_calls[0].time <= self.current_time:
            call = self.scheduled_calls.pop(0)
            self.request_call(call.floor, call.direction)

    def _generate_random_calls(self) -> None:
        if self.arrival_rate_per_floor <= 0:
            return
        num_floors = self.building.num_floors
        for floor in range(1, num_floors + 1):
            for _ in range(self._poisson(self.arrival_rate_per_floor)):
                self.request_call(floor, self._random_direction(floor, num_floors))

    def _random_direction(self, floor: int, num_floors: int) -> int:
        if floor == 1:
            return 1
        if floor == num_floors:
            return -1
        return self.random.choice((1, -1))

    def _poisson(self, lam: float) -> int:
        if lam <= 0:
            return 0
        L = math.exp(-lam)
        k = 0
        p = 1.0
        while p > L:
            k += 1
            p *= self.random.random()
        return k - 1

    def _on_served(self, payload: dict) -> None:
        self.metrics.record_served(payload.get("requested_at"), self.current_time)
        self._emit("served", dict(payload, time=self.current_time))

    def _on_dropped(self, payload: dict) -> None:
        self.metrics.dropped += 1
        self._emit("dropped", payload)

    def _on_fault(self, payload: dict) -> None:
        self.metrics.faults += 1
        self._emit("fault", dict(payload, time=self.current_time))

    def _emit_metrics(self) -> None:
        snapshot = self.metrics.snapshot(self.current_time)
        self._emit("metrics", {"metrics": snapshot, "building": self.building.snapshot()})

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)
