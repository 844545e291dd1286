"""
HTTP file source on top of aiohttp.

request() schedules the download on an event loop and returns a cancellable
handle right away; the callback receives a Response once the download
finished or failed. Requests issued from the loop's own thread become tasks,
requests from other threads are handed over with run_coroutine_threadsafe.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING

import aiohttp

from domain.models import FileSourceSettings
from infrastructure.http.client import make_http_session
from infrastructure.http.response import Response
from shared.constants import ACCESS_TOKEN_PARAM, HTTP_5XX_MAX, HTTP_5XX_MIN

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _is_retryable(status: int) -> bool:
    return status == HTTPStatus.TOO_MANY_REQUESTS or HTTP_5XX_MIN <= status < HTTP_5XX_MAX


class HttpRequest:
    """Handle of one scheduled download; cancel() may be called from any thread."""

    def __init__(
        self,
        future: asyncio.Future | concurrent.futures.Future,
        loop: asyncio.AbstractEventLoop,
    ):
        self._future = future
        self._loop = loop

    def cancel(self) -> None:
        if isinstance(self._future, concurrent.futures.Future):
            # run_coroutine_threadsafe propagates this to the task on its loop
            self._future.cancel()
        elif _running_loop() is self._loop:
            self._future.cancel()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._future.cancel)

    @property
    def is_completed(self) -> bool:
        return self._future.done()

    @property
    def is_cancelled(self) -> bool:
        return self._future.cancelled()


class HttpFileSource:
    """
    File source fetching tiles over HTTP(S).

    Usage:
        async with HttpFileSource(settings) as fs:
            tile.initialize(TileParameters(tile_id, map_id, fs), on_loaded)

    Pass loop= to drive the source from other threads (see BackgroundLoop).
    """

    def __init__(
        self,
        settings: FileSourceSettings | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.settings = settings or FileSourceSettings()
        self._session = session
        self._owns_session = session is None
        self._loop = loop

    async def __aenter__(self) -> HttpFileSource:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def request(self, url: str, callback: Callable[[Response], None]) -> HttpRequest:
        running = _running_loop()
        loop = self._loop or running
        if loop is None:
            msg = 'HttpFileSource.request() needs a running event loop or loop='
            raise RuntimeError(msg)
        coro = self._run(url, callback)
        if running is loop:
            return HttpRequest(loop.create_task(coro), loop)
        return HttpRequest(asyncio.run_coroutine_threadsafe(coro, loop), loop)

    async def _run(self, url: str, callback: Callable[[Response], None]) -> None:
        response = await self.fetch(url)
        try:
            callback(response)
        except Exception:
            logger.exception('Response callback failed for %s', url)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = make_http_session(self.settings)
            self._owns_session = True
        return self._session

    def _with_token(self, url: str) -> str:
        token = self.settings.access_token
        if not token:
            return url
        sep = '&' if '?' in url else '?'
        return f'{url}{sep}{ACCESS_TOKEN_PARAM}={token}'

    def _scrub(self, text: str) -> str:
        token = self.settings.access_token
        return text.replace(token, '***') if token else text

    async def _sleep_before_retry(self, attempt: int) -> None:
        await asyncio.sleep(self.settings.backoff**attempt)

    async def fetch(self, url: str) -> Response:
        """
        Download url and wrap the outcome in a Response.

        - Токен не логируется; в сообщениях используем URL без query.
        - 401/403/404 и прочие 4xx — сразу ошибка; 429/5xx, таймауты и
          сетевые ошибки — повтор с экспоненциальной задержкой.
        """
        session = self._get_session()
        full_url = self._with_token(url)
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout_s)
        attempts = self.settings.retries

        last = Response.failure(f'No attempt made for {url}')
        for attempt in range(attempts):
            if attempt:
                await self._sleep_before_retry(attempt - 1)
            try:
                async with session.get(full_url, timeout=timeout) as resp:
                    sc = resp.status
                    if sc == HTTPStatus.OK:
                        return Response(data=await resp.read(), status=sc)
                    last = Response.failure(f'HTTP {sc} for {url}', sc)
                    if not _is_retryable(sc):
                        return last
            except asyncio.TimeoutError:
                last = Response.failure(f'Timeout after {self.settings.timeout_s:g}s for {url}')
            except aiohttp.ClientError as e:
                last = Response.failure(self._scrub(f'{type(e).__name__}: {e}'))
            logger.debug('Attempt %d/%d failed: %s', attempt + 1, attempts, last.error)

        logger.warning('Giving up after %d attempt(s): %s', attempts, last.error)
        return last
