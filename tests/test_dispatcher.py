import pytest

from scheduler import (
    Car,
    Direction,
    DispatchScheduler,
    InvalidCallError,
    InvariantViolation,
    NearestCarSelector,
    PositionReadError,
)


def test_single_car_serves_call_floor_by_floor(make_dispatcher, driver, drive_until_idle):
    dispatcher = make_dispatcher(1)
    assert dispatcher.request_call(7, direction=-1) == 1
    drive_until_idle(dispatcher)

    moves = [c for c in driver.commands if c[0] == "move"]
    assert moves == [("move", 1, f, f + 1) for f in range(1, 7)]
    assert driver.last == ("doors", 1, 7)
    car = dispatcher.cars[0]
    assert car.current_floor == 7
    assert car.stops == []
    assert car.direction == Direction.IDLE


def test_call_below_mid_transit_waits_for_upward_run(make_dispatcher, driver, complete, drive_until_idle):
    dispatcher = make_dispatcher(1)
    dispatcher.request_call(7)
    for _ in range(3):
        complete(dispatcher, 1)
    car = dispatcher.cars[0]
    assert car.current_floor == 4
    assert car.direction == Direction.UP

    issued = len(driver.commands)
    dispatcher.request_call(3)
    # The car is busy with its 4 -> 5 step; nothing new is issued.
    assert len(driver.commands) == issued
    assert car.stops == [7, 3]

    drive_until_idle(dispatcher)
    trail = [c for c in driver.commands[issued - 1:]]
    assert trail == [
        ("move", 1, 4, 5),
        ("move", 1, 5, 6),
        ("move", 1, 6, 7),
        ("doors", 1, 7),
        ("move", 1, 7, 6),
        ("move", 1, 6, 5),
        ("move", 1, 5, 4),
        ("move", 1, 4, 3),
        ("doors", 1, 3),
    ]
    assert car.direction == Direction.IDLE


def test_duplicate_calls_are_dropped(make_dispatcher, driver):
    dropped = []
    dispatcher = make_dispatcher(1, 10)
    dispatcher.on_event("dropped", dropped.append)

    assert dispatcher.request_call(6, direction=1) is not None
    issued = len(driver.commands)
    assert dispatcher.request_call(6, direction=-1) is None
    assert len(driver.commands) == issued
    assert [p["floor"] for p in dropped] == [6]
    assert sum(car.stops.count(6) for car in dispatcher.cars) == 1


def test_floor_is_callable_again_once_served(make_dispatcher, drive_until_idle):
    dispatcher = make_dispatcher(1)
    dispatcher.request_call(3)
    drive_until_idle(dispatcher)
    assert dispatcher.request_call(3) == 1


def test_call_during_door_cycle_at_that_floor_is_dropped(make_dispatcher, driver, complete):
    dispatcher = make_dispatcher(1)
    dispatcher.request_call(2)
    complete(dispatcher, 1)
    assert driver.last == ("doors", 1, 2)
    assert dispatcher.request_call(2) is None


def test_idle_car_parked_at_call_floor_opens_immediately(make_dispatcher, driver):
    dispatcher = make_dispatcher(8, 3)
    assert dispatcher.request_call(3, direction=1) == 2
    assert driver.commands == [("doors", 2, 3)]


def test_call_for_busy_car_is_deferred_to_next_completion(make_dispatcher, driver, complete):
    dispatcher = make_dispatcher(5)
    dispatcher.request_call(9)
    assert driver.commands == [("move", 1, 5, 6)]

    dispatcher.request_call(2)
    assert driver.commands == [("move", 1, 5, 6)]

    complete(dispatcher, 1)
    assert driver.last == ("move", 1, 6, 7)


def test_preferred_direction_car_is_selected(make_dispatcher):
    dispatcher = make_dispatcher(2, 6)
    dispatcher.request_call(9)
    assert dispatcher.cars[1].stops == [9]

    # Car 2 now heads up from 6; car 1 is idle at 2.
    assert dispatcher.request_call(4) == 1


def test_selector_can_be_swapped(driver):
    cars = [Car(car_id=1, current_floor=2, direction=Direction.UP, stops=[9]),
            Car(car_id=2, current_floor=6, direction=Direction.UP, stops=[10])]
    dispatcher = DispatchScheduler(cars, driver, 10, selector=NearestCarSelector())
    assert dispatcher.select_car(5) is cars[1]


@pytest.mark.parametrize("floor", [0, 11, -3, "4", 2.0, None, True])
def test_invalid_floors_are_rejected(make_dispatcher, floor):
    dispatcher = make_dispatcher(1)
    with pytest.raises(InvalidCallError):
        dispatcher.request_call(floor)
    assert dispatcher.cars[0].stops == []


def test_invalid_call_error_is_a_value_error():
    assert issubclass(InvalidCallError, ValueError)


def test_no_candidate_is_an_invariant_violation(make_dispatcher):
    faults = []
    dispatcher = make_dispatcher(1)
    dispatcher.on_event("fault", faults.append)
    dispatcher.cars[0].faulted = True
    with pytest.raises(InvariantViolation):
        dispatcher.request_call(5)
    assert faults == [{"car_id": None, "floor": 5}]
    assert dispatcher.cars[0].stops == []


def test_bad_position_halts_only_that_car(make_dispatcher, driver, complete, drive_until_idle):
    faults = []
    dispatcher = make_dispatcher(1, 10)
    dispatcher.on_event("fault", faults.append)
    dispatcher.request_call(4)
    dispatcher.request_call(8)
    assert dispatcher.cars[1].stops == [8]

    with pytest.raises(PositionReadError):
        dispatcher.move_completed(1, "??")
    assert dispatcher.cars[0].faulted
    assert [f["car_id"] for f in faults] == [1]

    drive_until_idle(dispatcher)
    assert dispatcher.cars[1].current_floor == 8
    assert dispatcher.cars[1].stops == []
    # New calls avoid the halted car.
    assert dispatcher.request_call(2) == 2


def test_completion_for_unknown_car_is_fatal(make_dispatcher):
    dispatcher = make_dispatcher(1)
    with pytest.raises(InvariantViolation):
        dispatcher.move_completed(7, 2)


def test_served_events_carry_admission_time(make_dispatcher, drive_until_idle):
    served = []
    dispatcher = make_dispatcher(1)
    dispatcher.on_event("served", served.append)
    dispatcher.request_call(2, requested_at=15)
    drive_until_idle(dispatcher)
    assert served == [{"floor": 2, "car_id": 1, "requested_at": 15}]


def test_snapshot_reports_controller_state(make_dispatcher):
    dispatcher = make_dispatcher(1, 4)
    dispatcher.request_call(6)
    first, second = dispatcher.snapshot()
    assert first.state == "idle"
    assert second.state == "moving"
    assert second.stops == (6,)
    assert second.direction == 1


def test_scheduler_requires_cars(driver):
    with pytest.raises(ValueError):
        DispatchScheduler([], driver, 10)
    with pytest.raises(ValueError):
        DispatchScheduler([Car(car_id=1), Car(car_id=1)], driver, 10)
