"""
Awaitable display and input helpers used by the game sequencer.

Every helper suspends until one specific timer or key event arrives. The
callback that receives the event unregisters itself before resolving the
future, so a helper never resumes on someone else's event.
"""

import asyncio

from timer import TICKS_PER_SECOND, DISABLED

FLASH_SPEED = 5  # ticks per half period of a flashing digit
FLASH_CYCLES = 20  # half periods shown after losing a car
CHAR_TICKS = TICKS_PER_SECOND // 2
MAX_DIGIT = 9


class GameUi:
    """
    Building blocks of the game screens.

    Args:
        timer (Timer): Shared countdown timer.
        key (Key): The push button.
        display (Display): The digit.
    """

    def __init__(self, timer, key, display):
        self.timer = timer
        self.key = key
        self.display = display

    def display_digit(self, value):
        self.display.show_char(str(value) if 0 <= value <= MAX_DIGIT else "")

    async def for_ticks(self, ticks):
        """Wait for the next timer event after arming it for ``ticks``."""
        done = asyncio.get_running_loop().create_future()

        def listener(event):
            self.timer.unregister(listener)
            if not done.done():
                done.set_result(event)

        self.timer.register(listener)
        self.timer.enable(ticks)
        return await done

    async def key_released(self):
        if self.key.released():
            return
        done = asyncio.get_running_loop().create_future()

        def listener(pressed):
            if not pressed:
                self.key.unregister(listener)
                if not done.done():
                    done.set_result(None)

        self.key.register(listener)
        await done

    async def key_pressed_or_timer_elapsed(self):
        """
        Wait for a key press or the end of the armed countdown.

        Returns:
            bool: True when the key was pressed.
        """
        if self.key.pressed() or self.timer.elapsed():
            return self.key.pressed()
        done = asyncio.get_running_loop().create_future()

        def end(result):
            self.key.unregister(key_listener)
            self.timer.unregister(timer_listener)
            if not done.done():
                done.set_result(result)

        def key_listener(pressed):
            if pressed:
                end(True)

        def timer_listener(event):
            end(False)

        self.key.register(key_listener)
        self.timer.register(timer_listener)
        return await done

    async def display_countdown(self, count):
        """
        Count down from ``count`` one second per digit, then flash '0'.

        A ``"disabled"`` timer event stops the countdown early.
        """
        count = min(count, MAX_DIGIT)
        flashes = TICKS_PER_SECOND // FLASH_SPEED
        done = asyncio.get_running_loop().create_future()

        def end():
            self.timer.unregister(listener)
            if not done.done():
                done.set_result(None)

        def listener(event):
            nonlocal count, flashes
            if event == DISABLED:
                end()
                return
            if count:
                count -= 1
            if count:
                self.timer.enable(TICKS_PER_SECOND)
                self.display_digit(count)
                return
            self.timer.enable(FLASH_SPEED)
            self.display.show_char("0" if flashes & 1 else " ")
            flashes -= 1
            if flashes == 0:
                end()

        self.timer.register(listener)
        self.display_digit(count)
        self.timer.enable(TICKS_PER_SECOND if count else FLASH_SPEED)
        await done

    async def display_flashing_digit(self, value):
        """
        Flash a digit, typically the number of cars left.

        Waits for the key to be released first, then blinks for
        ``FLASH_CYCLES`` half periods unless the key is pressed or the timer
        is disabled. The display is blank afterwards.
        """
        value = min(value, MAX_DIGIT)
        await self.key_released()
        done = asyncio.get_running_loop().create_future()
        tick = 0

        def end():
            self.timer.unregister(listener)
            self.display.off()
            if not done.done():
                done.set_result(None)

        def listener(event):
            nonlocal tick
            if event == DISABLED or tick == FLASH_CYCLES or self.key.pressed():
                end()
                return
            if tick & 1:
                self.display_digit(value)
            else:
                self.display.show_char(" ")
            tick += 1
            if tick == FLASH_CYCLES:
                end()
                return
            self.timer.enable(FLASH_SPEED)

        self.timer.register(listener)
        self.display_digit(value)
        self.timer.enable(FLASH_SPEED)
        await done

    async def display_char(self, char):
        """Show one character for half a second with a one tick gap after it."""
        self.display.show_char(char)
        self.timer.enable(CHAR_TICKS)
        if await self.key_pressed_or_timer_elapsed():
            return True
        self.display.off()
        self.timer.enable(1)
        return await self.key_pressed_or_timer_elapsed()

    async def display_string(self, text):
        """
        Scroll a text one character at a time.

        Returns:
            bool: True as soon as the key is pressed, False once the whole
            text has been shown.
        """
        for char in text:
            if await self.display_char(char):
                return True
        return False
