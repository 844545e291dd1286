"""Event loop running in a daemon thread, for driving file sources from sync code."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Coroutine

logger = logging.getLogger(__name__)


class BackgroundLoop:
    """
    Owns an asyncio loop spinning in its own thread.

    Usage:
        with BackgroundLoop() as bg:
            fs = HttpFileSource(settings, loop=bg.loop)
            tile.initialize(TileParameters(tile_id, map_id, fs), on_loaded)
            ...
            bg.run(fs.close())
    """

    def __init__(self, name: str = 'tile-loop') -> None:
        self.name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    def __enter__(self) -> BackgroundLoop:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            msg = 'BackgroundLoop is not running'
            raise RuntimeError(msg)
        return self._loop

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running():
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, name=self.name, daemon=True
        )
        self._thread.start()
        logger.debug('%s started', self.name)

    def run(self, coro: Coroutine[Any, Any, Any], timeout: float | None = None) -> Any:
        """Run a coroutine on the loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self, timeout: float = 5.0) -> None:
        if self._loop is None:
            return
        loop, thread = self._loop, self._thread
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning('%s did not stop within timeout', self.name)
                return
        loop.close()
        self._loop = None
        self._thread = None
        logger.debug('%s stopped', self.name)
