"""
Desktop and browser front end for Seg Racer.

Draws the seven-segment digit and the push button in a PyGame window and
feeds the space bar and mouse clicks on the button into the game's key.
The game itself runs as an asyncio task next to the window's event pump.
"""

import asyncio
import logging

import env
import selftest
from display import Display
from game import Game
from game_ui import GameUi
from game_utils import ShadowSegments
from game_vm import GameVM
from key import Key
from timer import Timer

logger = logging.getLogger(__name__)

FPS = 60

BACKGROUND = (0, 0, 0)
SEGMENT_ON = (255, 0, 0)
SEGMENT_OFF = (40, 0, 0)
SWITCH_COLOR = (128, 128, 128)
SWITCH_PRESSED = (90, 90, 90)
SWITCH_FRAME = (0, 0, 0)

# Segment outlines inside a 210 x 320 digit box
DIGIT_W = 210
DIGIT_H = 320
SEGMENT_POLYGONS = {
    "a": ((45, 32), (60, 17), (150, 17), (165, 32), (150, 47), (60, 47)),
    "b": ((169, 36), (184, 51), (184, 141), (169, 156), (154, 141), (154, 51)),
    "c": ((169, 164), (184, 179), (184, 269), (169, 284), (154, 269), (154, 179)),
    "d": ((165, 288), (150, 303), (60, 303), (45, 288), (60, 273), (150, 273)),
    "e": ((41, 284), (26, 269), (26, 179), (41, 164), (56, 179), (56, 269)),
    "f": ((41, 156), (26, 141), (26, 51), (41, 36), (56, 51), (56, 141)),
    "g": ((45, 160), (60, 145), (150, 145), (165, 160), (150, 175), (60, 175)),
}
POINT_CENTER = (190, 288)
POINT_RADIUS = 10

MARGIN = 20
SWITCH_SIZE = 110
WINDOW_W = DIGIT_W + SWITCH_SIZE + 3 * MARGIN
WINDOW_H = DIGIT_H + 2 * MARGIN


class _PyGameSegmentDisplay:
    def __init__(self, scale=1):
        """
        Initialize the PyGame-based digit and switch renderer.

        Args:
            scale (int): Window scaling factor.
        """
        self.scale = int(scale)
        self._pg = None
        self._screen = None
        self._inited = False
        self._dirty = False
        self._segments = ""
        self._pressed = False
        self._mouse_down = False
        x = (2 * MARGIN + DIGIT_W) * self.scale
        y = (WINDOW_H - SWITCH_SIZE) // 2 * self.scale
        self.switch_rect = (x, y, SWITCH_SIZE * self.scale, SWITCH_SIZE * self.scale)

    def start(self):
        """
        Initialize PyGame and open the window.

        This method is idempotent and will do nothing if initialization
        has already been performed.
        """
        if self._inited:
            return
        try:
            import pygame  # type: ignore
        except Exception as e:
            raise RuntimeError(
                "PyGame not installed. Install with: pip install pygame"
            ) from e
        self._pg = pygame
        pygame.init()
        # In browser (pygbag) the mixer may block on a missing user gesture
        if env.is_browser and hasattr(pygame, "mixer"):
            pygame.mixer.quit()
        pygame.display.set_caption("Seg Racer")
        self._screen = pygame.display.set_mode(
            (WINDOW_W * self.scale, WINDOW_H * self.scale)
        )
        self._inited = True
        self._redraw()

    def stop(self):
        if self._inited:
            self._pg.quit()
            self._inited = False

    def _point(self, x, y):
        return ((MARGIN + x) * self.scale, (MARGIN + y) * self.scale)

    def _redraw(self):
        if not self._screen:
            return
        pg = self._pg
        self._screen.fill(BACKGROUND)
        for seg, outline in SEGMENT_POLYGONS.items():
            color = SEGMENT_ON if seg in self._segments else SEGMENT_OFF
            pg.draw.polygon(self._screen, color, [self._point(x, y) for x, y in outline])
        color = SEGMENT_ON if "p" in self._segments else SEGMENT_OFF
        pg.draw.circle(self._screen, color, self._point(*POINT_CENTER), POINT_RADIUS * self.scale)

        x, y, w, h = self.switch_rect
        inset = 2 * self.scale if self._pressed else 0
        pg.draw.rect(self._screen, SWITCH_FRAME, (x - 5, y - 5, w + 10, h + 10))
        pg.draw.rect(
            self._screen,
            SWITCH_PRESSED if self._pressed else SWITCH_COLOR,
            (x + inset, y + inset, w - 2 * inset, h - 2 * inset),
        )
        self._dirty = True

    def draw_segments(self, segments):
        self._segments = segments
        self._redraw()

    def draw_switch(self, pressed):
        self._pressed = pressed
        self._redraw()

    def show(self):
        """Present the window if anything was drawn since the last call."""
        if not self._screen or not self._dirty:
            return
        self._pg.display.flip()
        self._dirty = False

    def _in_switch(self, pos):
        x, y, w, h = self.switch_rect
        return x <= pos[0] < x + w and y <= pos[1] < y + h

    def poll(self, key):
        """
        Translate pending PyGame events into key edges.

        The key does not filter repeated edges, so a press is only sent
        while the key is released and a release only while it is pressed.

        Returns:
            bool: False when the window was closed or Escape was pressed.
        """
        pg = self._pg
        if not pg:
            return True
        for event in pg.event.get():
            if event.type == pg.QUIT:
                return False
            if event.type == pg.KEYDOWN:
                if event.key == pg.K_ESCAPE:
                    return False
                if event.key == pg.K_SPACE and key.released():
                    key.on_press()
            elif event.type == pg.KEYUP:
                if event.key == pg.K_SPACE and key.pressed():
                    key.on_release()
            elif event.type == pg.MOUSEBUTTONDOWN:
                if event.button == 1 and self._in_switch(event.pos) and key.released():
                    self._mouse_down = True
                    key.on_press()
            elif event.type == pg.MOUSEBUTTONUP:
                if event.button == 1 and self._mouse_down:
                    self._mouse_down = False
                    if key.pressed():
                        key.on_release()
            elif event.type == pg.VIDEOEXPOSE:
                self._redraw()
        return True


def build(display_observer=None, timer=None):
    """
    Wire up the game objects.

    Args:
        display_observer: Callable receiving each new segment pattern.
        timer (Timer): Timer to use; a 50 ticks per second one by default.

    Returns:
        tuple: ``(game, display, key, timer)``.
    """
    display = Display()
    if display_observer:
        display.register(display_observer)
    key = Key()
    timer = timer or Timer()
    vm = GameVM(display)
    game = Game(vm, timer, key, GameUi(timer, key, display))
    return game, display, key, timer


async def async_main(test=None):
    """Async entrypoint: open the window and run the game (or a self test)."""
    logger.info("Seg Racer starting on %s", env.get_platform_name())
    screen = _PyGameSegmentDisplay()
    screen.start()
    shadow = ShadowSegments(screen)
    game, display, key, timer = build(shadow.show_segments)
    key.set_updater(screen.draw_switch)

    if test in selftest.TESTS:
        logger.info("running self test %r", test)
        task = asyncio.create_task(selftest.TESTS[test](display, timer, key))
    else:
        if test:
            logger.error("unknown self test %r, starting the game", test)
        task = asyncio.create_task(game.run())

    try:
        while not task.done():
            if not screen.poll(key):
                break
            screen.show()
            await asyncio.sleep(1 / FPS)
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("game task failed")
        key.clear_updater()
        display.unregister()
        screen.stop()


def main():
    """
    Desktop entry point.

    Runs ``async_main`` on a fresh event loop, with the self test selected
    by ``SEG_RACER_SELFTEST`` if any.
    """
    env.require_desktop()
    asyncio.run(async_main(env.selftest_name()))
