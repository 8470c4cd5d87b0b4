"""
Display, timer and key diagnostics.

Cycle patterns on the digit to check the renderer (or a real display
driven through the same observer): every segment on its own, the racing
loops, and every character of the glyph table. The timer checks count on
the digit from the free running tick counter, the seconds counter and the
countdown; the key check shows every press and release edge.

Every test takes ``(display, timer, key, rounds=None)``; ``rounds=None``
runs until cancelled.
"""

import asyncio

from timer import ELAPSED, TICKS_PER_SECOND

SEGMENT_TICKS = TICKS_PER_SECOND // 2
RACE_TICKS = 5
ELAPSED_TICKS = 15  # 3/10 s
POLL_TICKS = 1

ALL_SEGMENTS = "abcdefgp"
OUTER_LOOP = "abcdef"
FIGURE_EIGHT = "abgedcgf"
CHARACTERS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_-."

KEY_PRESSED = "d"
KEY_RELEASED = "ceg"


async def _wait(timer, ticks):
    done = asyncio.get_running_loop().create_future()

    def listener(event):
        timer.unregister(listener)
        if not done.done():
            done.set_result(event)

    timer.register(listener)
    timer.enable(ticks)
    return await done


async def _edge(key):
    done = asyncio.get_running_loop().create_future()

    def listener(state):
        key.unregister(listener)
        if not done.done():
            done.set_result(state)

    key.register(listener)
    return await done


def _rounds(rounds):
    n = 0
    while rounds is None or n < rounds:
        yield n
        n += 1


def _digit(display, digit):
    display.show_char(str(digit % 10))


async def all_segments(display, timer, key, rounds=None):
    for _ in _rounds(rounds):
        for segment in ALL_SEGMENTS:
            display.show_segments(segment)
            await _wait(timer, SEGMENT_TICKS)


async def racing_segments(display, timer, key, rounds=None):
    for _ in _rounds(rounds):
        for segment in OUTER_LOOP + FIGURE_EIGHT:
            display.show_segments(segment)
            await _wait(timer, RACE_TICKS)


async def all_characters(display, timer, key, rounds=None):
    for _ in _rounds(rounds):
        for char in CHARACTERS:
            display.show_char(char)
            await _wait(timer, SEGMENT_TICKS)


async def timer_ticks(display, timer, key, rounds=None):
    """Sample the 8-bit tick counter every tick; the digit moves every 8 ticks."""
    timer.reset_clock()
    for _ in _rounds(rounds):
        _digit(display, timer.ticks() >> 3)
        await _wait(timer, POLL_TICKS)


async def timer_seconds(display, timer, key, rounds=None):
    """Advance the digit each time the seconds counter changes."""
    timer.reset_clock()
    last = timer.seconds()
    digit = 0
    _digit(display, digit)
    for _ in _rounds(rounds):
        while timer.seconds() == last:
            await _wait(timer, POLL_TICKS)
        last = timer.seconds()
        digit += 1
        _digit(display, digit)


async def timer_elapsed(display, timer, key, rounds=None):
    """Advance the digit on every natural end of a 15 tick countdown."""
    digit = 0
    _digit(display, digit)
    for _ in _rounds(rounds):
        if await _wait(timer, ELAPSED_TICKS) != ELAPSED or not timer.elapsed():
            return
        digit += 1
        _digit(display, digit)


async def key_states(display, timer, key, rounds=None):
    """Show '_' or 'n' for the initial key state, then one pattern per edge."""
    display.show_char("_" if key.pressed() else "n")
    for _ in _rounds(rounds):
        pressed = await _edge(key)
        display.show_segments(KEY_PRESSED if pressed else KEY_RELEASED)


TESTS = {
    "segments": all_segments,
    "racing": racing_segments,
    "characters": all_characters,
    "ticks": timer_ticks,
    "seconds": timer_seconds,
    "elapsed": timer_elapsed,
    "keys": key_states,
}
