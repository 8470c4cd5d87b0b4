"""Runtime environment detection and settings for Seg Racer.

This module is the single place that looks at the runtime: which platform
the game is running on, and which environment variables tune it.

Platform Support
----------------
1. **Desktop (CPython + PyGame)**:
   - The default: a window with the digit and the push button
   - Detected when not running under Emscripten
   - ``main.main()`` starts its own asyncio loop

2. **Browser (Pygbag/Emscripten/WASM)**:
   - Detected via ``sys.platform == "emscripten"``
   - The event loop is owned by pygbag, so ``main.py`` awaits
     ``seg_racer_app.async_main()`` through ``asyncio.run`` directly

Module Variables
----------------
is_browser : bool
    True when running in browser via pygbag (Emscripten/WASM).

is_desktop : bool
    True when running on desktop CPython with PyGame.

Environment Variables
---------------------
SEG_RACER_LOG_LEVEL
    Name of the logging level (``DEBUG``, ``INFO``...). Defaults to ``INFO``.
SEG_RACER_SELFTEST
    Run a self test instead of the game: ``segments``, ``racing``,
    ``characters``, ``ticks``, ``seconds``, ``elapsed`` or ``keys``.

Example Usage
-------------
::

    from env import get_platform_name, log_level

    logging.basicConfig(level=log_level())
    logger.info("Seg Racer starting on %s", get_platform_name())
"""

import logging
import os
import sys

LOG_LEVEL_VAR = "SEG_RACER_LOG_LEVEL"
SELFTEST_VAR = "SEG_RACER_SELFTEST"

# IMPORTANT: Use sys.platform (not platform.system()) for browser detection.
# Pygbag patches sys.platform to "emscripten".
is_browser = sys.platform == "emscripten"
is_desktop = not is_browser


def get_platform_name():
    """Return a human-readable platform name.

    Returns
    -------
    str
        ``"browser"`` under pygbag, ``"desktop"`` otherwise.
    """
    return "browser" if is_browser else "desktop"


def require_desktop():
    """Raise an error if not running in desktop environment.

    Raises
    ------
    RuntimeError
        If running in the browser. The message names the detected platform.
    """
    if not is_desktop:
        raise RuntimeError(
            "This code requires desktop CPython environment. "
            f"Current platform: {get_platform_name()}"
        )


def log_level(environ=None):
    """Return the logging level selected by ``SEG_RACER_LOG_LEVEL``.

    Unknown names fall back to ``logging.INFO``.
    """
    environ = os.environ if environ is None else environ
    name = environ.get(LOG_LEVEL_VAR, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def selftest_name(environ=None):
    """Return the requested self test name, or None to play the game."""
    environ = os.environ if environ is None else environ
    name = environ.get(SELFTEST_VAR, "").strip().lower()
    return name or None
