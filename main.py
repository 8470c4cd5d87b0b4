"""
Seg Racer launcher.

Routes to the synchronous desktop entry point or, under pygbag, to the
async one so the browser keeps control of the event loop.
"""

import asyncio
import logging

import env
import seg_racer_app

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main():
    logging.basicConfig(level=env.log_level(), format=LOG_FORMAT)
    seg_racer_app.main()


async def async_main():
    logging.basicConfig(level=env.log_level(), format=LOG_FORMAT)
    await seg_racer_app.async_main(env.selftest_name())


if __name__ == "__main__":
    if env.is_browser:
        asyncio.run(async_main())
    else:
        main()
