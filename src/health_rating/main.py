"""Worker entrypoint running the health rating batch scheduler."""

import asyncio
import logging
import signal

from health_rating.app_logging import configure_logging
from health_rating.containers import AppContainer, build_container

_logger = logging.getLogger(__name__)


async def serve(container: AppContainer, stop_event: asyncio.Event) -> None:
    """Run the scheduler until the stop event is set."""
    container.scheduler.start()
    try:
        await stop_event.wait()
    finally:
        container.scheduler.stop()


async def _run() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)
    await serve(build_container(), stop_event)


def main() -> None:
    """Start the worker and block until interrupted."""
    configure_logging()
    _logger.info("Health rating worker starting")
    asyncio.run(_run())
    _logger.info("Health rating worker stopped")


if __name__ == "__main__":
    main()
