from __future__ import annotations

import ssl
from typing import TYPE_CHECKING

import aiohttp
import certifi

if TYPE_CHECKING:
    from domain.models import FileSourceSettings


def make_http_session(settings: FileSourceSettings) -> aiohttp.ClientSession:
    # SSL-контекст с сертификатами из certifi
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)
    return aiohttp.ClientSession(
        connector=connector,
        headers={'User-Agent': settings.user_agent},
    )
