"""Tests for infrastructure.http.file_source module."""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web
from aiohttp import test_utils

from domain.models import FileSourceSettings
from infrastructure.http.file_source import HttpFileSource
from infrastructure.http.loop_thread import BackgroundLoop
from infrastructure.http.response import Response


def _app(statuses, hits, *, delay=0.0, tokens=None):
    """Server answering /tile with the next status from statuses (the last one repeats)."""

    async def handler(request):
        hits.append(request.path)
        if tokens is not None:
            tokens.append(request.query.get('access_token'))
        if delay:
            await asyncio.sleep(delay)
        status = statuses[min(len(hits) - 1, len(statuses) - 1)]
        if status == 200:
            return web.Response(body=b'payload')
        return web.Response(status=status)

    app = web.Application()
    app.router.add_get('/tile', handler)
    return app


def _source(**overrides):
    fs = HttpFileSource(FileSourceSettings(**overrides))
    fs._sleep_before_retry = AsyncMock()
    return fs


class TestFetch:
    """Tests for HttpFileSource.fetch."""

    @pytest.mark.asyncio
    async def test_ok(self):
        hits = []
        async with test_utils.TestServer(_app([200], hits)) as server, _source() as fs:
            r = await fs.fetch(str(server.make_url('/tile')))
        assert r == Response(data=b'payload', status=200)
        assert len(hits) == 1

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        hits = []
        async with test_utils.TestServer(_app([404], hits)) as server, _source(retries=4) as fs:
            url = str(server.make_url('/tile'))
            r = await fs.fetch(url)
        assert r.error == f'HTTP 404 for {url}'
        assert r.status == 404
        assert len(hits) == 1
        fs._sleep_before_retry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        hits = []
        async with test_utils.TestServer(_app([503, 429, 200], hits)) as server, _source(retries=4) as fs:
            r = await fs.fetch(str(server.make_url('/tile')))
        assert r.data == b'payload'
        assert len(hits) == 3
        assert [c.args for c in fs._sleep_before_retry.await_args_list] == [(0,), (1,)]

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self):
        hits = []
        async with test_utils.TestServer(_app([500], hits)) as server, _source(retries=3) as fs:
            url = str(server.make_url('/tile'))
            r = await fs.fetch(url)
        assert r.error == f'HTTP 500 for {url}'
        assert len(hits) == 3

    @pytest.mark.asyncio
    async def test_timeout(self):
        hits = []
        async with test_utils.TestServer(_app([200], hits, delay=1.0)) as server, _source(
            timeout_s=0.05, retries=1
        ) as fs:
            url = str(server.make_url('/tile'))
            r = await fs.fetch(url)
        assert r.error == f'Timeout after 0.05s for {url}'
        assert r.data == b''

    @pytest.mark.asyncio
    async def test_connection_error(self):
        async with _source(retries=1, access_token='sk.secret') as fs:
            r = await fs.fetch('http://127.0.0.1:1/tile')
        assert r.has_error
        assert 'sk.secret' not in r.error

    @pytest.mark.asyncio
    async def test_appends_token(self):
        hits, tokens = [], []
        async with test_utils.TestServer(_app([200], hits, tokens=tokens)) as server, _source(
            access_token='pk.abc'
        ) as fs:
            await fs.fetch(str(server.make_url('/tile')))
        assert tokens == ['pk.abc']


class TestTokenHandling:
    def test_with_token_query_separator(self):
        fs = HttpFileSource(FileSourceSettings(access_token='pk.abc'))
        assert fs._with_token('https://h/t') == 'https://h/t?access_token=pk.abc'
        assert fs._with_token('https://h/t?a=1') == 'https://h/t?a=1&access_token=pk.abc'

    def test_without_token_url_is_untouched(self):
        fs = HttpFileSource(FileSourceSettings())
        assert fs._with_token('https://h/t') == 'https://h/t'

    def test_scrub(self):
        fs = HttpFileSource(FileSourceSettings(access_token='pk.abc'))
        assert fs._scrub('failed https://h/t?access_token=pk.abc') == 'failed https://h/t?access_token=***'


class TestRequest:
    """Tests for HttpFileSource.request."""

    def test_needs_loop(self):
        with pytest.raises(RuntimeError):
            HttpFileSource().request('http://example.invalid/', lambda r: None)

    @pytest.mark.asyncio
    async def test_callback_is_never_synchronous(self):
        hits = []
        done = asyncio.Event()
        received = []

        def on_response(response):
            received.append(response)
            done.set()

        async with test_utils.TestServer(_app([200], hits)) as server, _source() as fs:
            handle = fs.request(str(server.make_url('/tile')), on_response)
            assert received == []
            assert not handle.is_completed
            await asyncio.wait_for(done.wait(), timeout=5)
            await asyncio.sleep(0)

        assert received[0].data == b'payload'
        assert handle.is_completed

    @pytest.mark.asyncio
    async def test_cancel_suppresses_callback(self):
        hits = []
        callback = MagicMock()
        async with test_utils.TestServer(_app([200], hits, delay=0.5)) as server, _source() as fs:
            handle = fs.request(str(server.make_url('/tile')), callback)
            await asyncio.sleep(0.05)
            handle.cancel()
            await asyncio.sleep(0.05)
            assert handle.is_cancelled
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_callback_exception_is_contained(self):
        hits = []
        done = asyncio.Event()

        def on_response(response):
            done.set()
            raise RuntimeError('listener bug')

        async with test_utils.TestServer(_app([200], hits)) as server, _source() as fs:
            handle = fs.request(str(server.make_url('/tile')), on_response)
            await asyncio.wait_for(done.wait(), timeout=5)
            await asyncio.sleep(0.01)
            assert handle.is_completed
            assert not handle.is_cancelled

    @pytest.mark.asyncio
    async def test_request_from_foreign_thread(self):
        hits = []
        finished = threading.Event()
        received = []

        def on_response(response):
            received.append((response, threading.current_thread().name))
            finished.set()

        async with test_utils.TestServer(_app([200], hits)) as server:
            url = str(server.make_url('/tile'))
            with BackgroundLoop(name='fs-loop') as bg:
                fs = HttpFileSource(FileSourceSettings(), loop=bg.loop)
                fs.request(url, on_response)
                assert await asyncio.to_thread(finished.wait, 5)
                bg.run(fs.close(), timeout=5)

        response, thread_name = received[0]
        assert response.data == b'payload'
        assert thread_name == 'fs-loop'


class TestSessionOwnership:
    @pytest.mark.asyncio
    async def test_borrowed_session_is_not_closed(self):
        session = MagicMock(closed=False)
        session.close = AsyncMock()
        fs = HttpFileSource(session=session)
        await fs.close()
        session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_own_session_is_closed(self):
        fs = HttpFileSource()
        session = fs._get_session()
        await fs.close()
        assert session.closed
