"""
Top-level game sequence: demo, countdown, play, lost car, score.

The whole game is one coroutine. It only ever waits for a single timer or
key event at a time, so the VM is never touched from two places at once.
"""

import asyncio
import logging
import random

from timer import ELAPSED

logger = logging.getLogger(__name__)

STEER_TICKS = 5  # demo steers this many ticks before the next segment
DEMO_START_SPEED = 50
DEMO_LOOPS = 20
DEMO_STEER_PROBABILITY = 0.3

START_TEXT = "Press to play "
SCORE_TEXT = "Score {score} Press to play again "

# Sequencer states
DEMO = "DEMO"
DEMO_WAIT_RELEASE = "DEMO_WAIT_RELEASE"
COUNTDOWN = "COUNTDOWN"
PLAYING = "PLAYING"
CAR_LOST = "CAR_LOST"
GAME_OVER_WAIT_RELEASE = "GAME_OVER_WAIT_RELEASE"
SCORE_DISPLAY = "SCORE_DISPLAY"
SCORE_WAIT_RELEASE = "SCORE_WAIT_RELEASE"


class Game:
    """
    The Seg Racer sequencer.

    Args:
        vm (GameVM): The circuit interpreter.
        timer (Timer): Countdown shared with ``ui``.
        key (Key): The push button.
        ui (GameUi): Display helpers bound to the same timer and key.
        rng: Source of ``random()`` for the demo driver.
    """

    def __init__(self, vm, timer, key, ui, rng=None):
        self.vm = vm
        self.timer = timer
        self.key = key
        self.ui = ui
        self.rng = rng or random.Random()
        self.state = None

    def _enter(self, state):
        logger.debug("state %s -> %s", self.state, state)
        self.state = state

    async def demo_loop(self):
        """
        Scroll the start text, then let the car drive itself for a while.

        Returns:
            bool: True when the key was pressed, False when the demo ran to
            its end without a press.
        """
        self._enter(DEMO)
        if await self.ui.display_string(START_TEXT):
            return True

        vm = self.vm
        timer = self.timer
        loops = DEMO_LOOPS
        tick = True

        vm.reset(DEMO_START_SPEED)
        vm.tick_event()
        timer.enable(vm.wait_ticks() - STEER_TICKS)

        done = asyncio.get_running_loop().create_future()

        def end(result):
            self.key.unregister(key_listener)
            timer.unregister(timer_listener)
            if not done.done():
                done.set_result(result)

        def key_listener(pressed):
            if pressed:
                end(True)

        def timer_listener(event):
            nonlocal tick, loops
            if event != ELAPSED:
                end(False)
                return
            if tick:
                # steer window: just before the car leaves the segment
                tick = False
                if vm.may_steer_safely() and self.rng.random() < DEMO_STEER_PROBABILITY:
                    if not vm.steer_event():
                        end(False)
                        return
                    loops -= 1
                    if not loops:
                        end(False)
                        return
                timer.enable(STEER_TICKS)
            else:
                tick = True
                vm.tick_event()
                timer.enable(vm.wait_ticks() - STEER_TICKS)

        self.key.register(key_listener)
        timer.register(timer_listener)
        return await done

    def _do_tick(self):
        self.vm.tick_event()
        self.timer.enable(self.vm.wait_ticks())

    async def play_game(self):
        """Drive the car until it crashes (or the timer is disabled)."""
        self._enter(PLAYING)
        self._do_tick()
        done = asyncio.get_running_loop().create_future()

        def end():
            self.key.unregister(key_listener)
            self.timer.unregister(timer_listener)
            if not done.done():
                done.set_result(None)

        def key_listener(pressed):
            if pressed and not self.vm.steer_event():
                end()

        def timer_listener(event):
            if event == ELAPSED:
                self._do_tick()
            else:
                end()

        self.key.register(key_listener)
        self.timer.register(timer_listener)
        await done

    async def game_loop(self):
        self.vm.reset()
        self._enter(COUNTDOWN)
        await self.ui.display_countdown(3)
        while True:
            await self.play_game()
            self._enter(CAR_LOST)
            await self.ui.display_flashing_digit(self.vm.remaining_cars())
            if self.vm.game_over():
                break
        logger.info("game over, score %d", self.vm.score())

    async def score_loop(self):
        self._enter(SCORE_DISPLAY)
        text = SCORE_TEXT.format(score=self.vm.score())
        while not await self.ui.display_string(text):
            pass

    async def run(self, games=None):
        """
        Run the game.

        The demo plays until the key is pressed; after that games follow
        each other, each one ending on the score screen.

        Args:
            games (int): Return after this many games. None runs forever.
        """
        while not await self.demo_loop():
            pass
        self._enter(DEMO_WAIT_RELEASE)
        await self.ui.key_released()

        played = 0
        while games is None or played < games:
            await self.game_loop()
            self._enter(GAME_OVER_WAIT_RELEASE)
            await self.ui.key_released()
            await self.score_loop()
            self._enter(SCORE_WAIT_RELEASE)
            await self.ui.key_released()
            played += 1
