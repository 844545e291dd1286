"""HTTP client infrastructure."""
from infrastructure.http.client import make_http_session
from infrastructure.http.file_source import HttpFileSource, HttpRequest
from infrastructure.http.loop_thread import BackgroundLoop
from infrastructure.http.response import AsyncRequest, FileSource, Response

__all__ = [
    'AsyncRequest',
    'BackgroundLoop',
    'FileSource',
    'HttpFileSource',
    'HttpRequest',
    'Response',
    'make_http_session',
]
