import pytest

from pimsim.clock import ClockDomainCrosser


def _counter():
    calls = []
    return calls, lambda: calls.append(1)


def test_one_to_one_calls_once_per_update():
    calls, cb = _counter()
    crosser = ClockDomainCrosser(cb)
    for _ in range(5):
        crosser.update()
    assert len(calls) == 5
    assert crosser.counter1 == 0 and crosser.counter2 == 0


def test_without_callback_counters_reset():
    crosser = ClockDomainCrosser(None)
    crosser.update()
    assert crosser.counter1 == 0
    assert crosser.counter2 == 0


def test_faster_first_clock_calls_more_often():
    calls, cb = _counter()
    crosser = ClockDomainCrosser(cb)
    crosser.clock1 = 2
    crosser.clock2 = 1
    crosser.update()
    assert len(calls) == 2
    assert crosser.counter1 == 0


def test_slower_first_clock_calls_less_often():
    calls, cb = _counter()
    crosser = ClockDomainCrosser(cb)
    crosser.clock1 = 1
    crosser.clock2 = 2
    crosser.update()
    assert len(calls) == 1
    assert (crosser.counter1, crosser.counter2) == (1, 2)
    crosser.update()
    assert len(calls) == 1
    assert (crosser.counter1, crosser.counter2) == (0, 0)


@pytest.mark.parametrize("clock1, clock2", [(3, 2), (2, 3), (5, 7), (7, 5)])
def test_call_rate_matches_ratio(clock1, clock2):
    calls, cb = _counter()
    crosser = ClockDomainCrosser(cb)
    crosser.clock1 = clock1
    crosser.clock2 = clock2
    for _ in range(clock2 * 4):
        crosser.update()
    assert len(calls) == clock1 * 4
    assert crosser.counter1 == 0