import asyncio
import logging

from timer import DISABLED, ELAPSED, TICKS_PER_SECOND, Timer


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


def test_ticks_per_second():
    assert TICKS_PER_SECOND == 50
    assert Timer().ticks_per_second == 50


def test_remaining_ticks_right_after_enable():
    async def scenario():
        timer = Timer()
        timer.enable(10)
        remaining = timer.remaining_ticks()
        timer.disable()
        return remaining

    remaining = asyncio.run(scenario())
    assert 0 < remaining <= 10


def test_elapsed_fires_once_and_stays_set():
    async def scenario():
        timer = Timer(ticks_per_second=200)
        events = []
        timer.register(events.append)
        timer.enable(10)
        assert timer.armed()
        assert not timer.elapsed()
        await asyncio.sleep(0.2)
        result = (list(events), timer.elapsed(), timer.armed(), timer.remaining_ticks(), timer.elapsed_ticks())
        timer.enable(5)
        rearmed = timer.elapsed()
        timer.disable()
        return result, rearmed, timer.elapsed(), events

    result, rearmed, after_disable, events = asyncio.run(scenario())
    assert result == ([ELAPSED], True, False, 0, 10)
    assert rearmed is False
    assert after_disable is False
    assert events == [ELAPSED, DISABLED]


def test_disable_cancels_without_elapsed():
    async def scenario():
        timer = Timer(ticks_per_second=1000)
        events = []
        timer.register(events.append)
        timer.enable(10)
        timer.disable()
        assert events == [DISABLED]
        await asyncio.sleep(0.05)
        return events

    assert asyncio.run(scenario()) == [DISABLED]


def test_enable_replaces_pending_countdown():
    async def scenario():
        timer = Timer(ticks_per_second=1000)
        events = []
        timer.register(events.append)
        timer.enable(10)
        timer.enable(20)
        await asyncio.sleep(0.1)
        return events

    assert asyncio.run(scenario()) == [ELAPSED]


def test_listener_can_rearm_from_callback():
    async def scenario():
        timer = Timer(ticks_per_second=1000)
        fired = []

        def listener(event):
            fired.append(event)
            if len(fired) < 3:
                timer.enable(1)

        timer.register(listener)
        timer.enable(1)
        await asyncio.sleep(0.1)
        return fired

    assert asyncio.run(scenario()) == [ELAPSED] * 3


def test_unregister_during_dispatch_keeps_snapshot():
    async def scenario():
        timer = Timer(ticks_per_second=1000)
        calls = []

        def second(event):
            calls.append(("second", event))

        def first(event):
            calls.append(("first", event))
            timer.unregister(second)

        timer.register(first)
        timer.register(second)
        timer.disable()
        timer.disable()
        return calls

    assert asyncio.run(scenario()) == [
        ("first", DISABLED),
        ("second", DISABLED),
        ("first", DISABLED),
    ]


def test_introspection_follows_clock():
    async def scenario():
        clock = FakeClock()
        timer = Timer(clock=clock)
        timer.enable(10)
        readings = [(timer.remaining_ticks(), timer.elapsed_ticks())]
        clock.now += 0.1  # 5 ticks
        readings.append((timer.remaining_ticks(), timer.elapsed_ticks()))
        clock.now += 1.0
        readings.append((timer.remaining_ticks(), timer.elapsed_ticks()))
        timer.disable()
        return readings

    assert asyncio.run(scenario()) == [(10, 0), (5, 5), (0, 10)]


def test_free_running_counters():
    clock = FakeClock(0.0)
    timer = Timer(clock=clock)
    timer.reset_clock()
    clock.now = 2.0
    assert timer.seconds() == 2
    assert timer.ticks() == 100
    clock.now = 6.0
    assert timer.ticks() == 300 % 256
    timer.reset_clock()
    assert timer.ticks() == 0
    assert timer.seconds() == 0


def test_failing_listener_is_logged_and_others_still_called(caplog):
    timer = Timer()
    calls = []

    def broken(event):
        raise RuntimeError("boom")

    timer.register(broken)
    timer.register(calls.append)
    with caplog.at_level(logging.ERROR, logger="timer"):
        timer.disable()
    assert calls == [DISABLED]
    assert "timer listener" in caplog.text
    assert "boom" in caplog.text


def test_failing_listener_does_not_stop_elapsed_fan_out(caplog):
    async def scenario():
        timer = Timer(ticks_per_second=1000)
        calls = []
        timer.register(lambda event: 1 / 0)
        timer.register(calls.append)
        timer.enable(1)
        await asyncio.sleep(0.05)
        return calls, timer.elapsed()

    with caplog.at_level(logging.ERROR, logger="timer"):
        calls, elapsed = asyncio.run(scenario())
    assert calls == [ELAPSED]
    assert elapsed
    assert "ZeroDivisionError" in caplog.text
