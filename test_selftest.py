import asyncio

import pytest

import selftest
from display import Display, char_to_segs
from key import Key
from timer import Timer


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def run_selftest(name, rounds, observer=None, clock=None):
    display = Display()
    writes = []

    def record(segments):
        writes.append(segments)
        if observer:
            observer(segments)

    display.register(record)

    async def scenario():
        if clock:
            timer = Timer(ticks_per_second=2000, clock=clock)
        else:
            timer = Timer(ticks_per_second=2000)
        await asyncio.wait_for(selftest.TESTS[name](display, timer, Key(), rounds), 5)

    asyncio.run(scenario())
    return writes


def digits(text):
    return [char_to_segs(c) for c in text]


async def settle():
    for _ in range(3):
        await asyncio.sleep(0)


def test_all_segments():
    assert run_selftest("segments", 1) == list("abcdefgp")


def test_racing_segments():
    assert run_selftest("racing", 2) == list("abcdefabgedcgf") * 2


def test_all_characters():
    writes = run_selftest("characters", 1)
    assert writes == [char_to_segs(c) for c in selftest.CHARACTERS]
    assert writes[0] == "abcdef"
    assert writes[-1] == "p"


def test_timer_ticks_digit_moves_every_eight_ticks():
    clock = FakeClock()

    def advance(segments):
        clock.now += 8 / 2000

    assert run_selftest("ticks", 4, advance, clock) == digits("0123")


def test_timer_ticks_wraps_with_the_counter():
    clock = FakeClock()

    def advance(segments):
        clock.now += 248 / 2000

    # 0, 248, 496 % 256 = 240
    assert run_selftest("ticks", 3, advance, clock) == digits("010")


def test_timer_seconds_counts_changes():
    clock = FakeClock()

    def advance(segments):
        clock.now += 1.0

    assert run_selftest("seconds", 3, advance, clock) == digits("0123")


def test_timer_seconds_wraps_after_nine():
    clock = FakeClock()

    def advance(segments):
        clock.now += 1.0

    writes = run_selftest("seconds", 11, advance, clock)
    assert writes == digits("01234567890" + "1")


def test_timer_elapsed_counts_countdowns():
    assert run_selftest("elapsed", 3) == digits("0123")


def test_timer_elapsed_stops_when_disabled():
    display = Display()
    writes = []
    display.register(writes.append)

    async def scenario():
        timer = Timer(ticks_per_second=2000)
        task = asyncio.create_task(selftest.timer_elapsed(display, timer, Key()))
        await asyncio.sleep(0)
        timer.disable()
        await asyncio.wait_for(task, 1)

    asyncio.run(scenario())
    assert writes == digits("0")


@pytest.mark.parametrize("initially_pressed, first", [(False, "n"), (True, "_")])
def test_key_states(initially_pressed, first):
    display = Display()
    writes = []
    display.register(writes.append)
    key = Key()
    if initially_pressed:
        key.on_press()

    async def scenario():
        timer = Timer(ticks_per_second=2000)
        task = asyncio.create_task(selftest.key_states(display, timer, key, 3))
        await settle()
        for _ in range(3):
            if key.pressed():
                key.on_release()
            else:
                key.on_press()
            await settle()
        await asyncio.wait_for(task, 1)

    asyncio.run(scenario())
    assert writes[0] == char_to_segs(first)
    edges = ["d", "ceg", "d"] if not initially_pressed else ["ceg", "d", "ceg"]
    assert writes[1:] == edges


@pytest.mark.parametrize("name", sorted(selftest.TESTS))
def test_zero_rounds_show_at_most_the_start_pattern(name):
    writes = run_selftest(name, 0)
    if name in ("seconds", "elapsed"):
        assert writes == digits("0")
    elif name == "keys":
        assert writes == digits("n")
    else:
        assert writes == []
