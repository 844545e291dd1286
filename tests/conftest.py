"""Pytest configuration and fixtures for tile tests."""

import gzip
import sys
from io import BytesIO
from pathlib import Path

import mapbox_vector_tile
import pytest
from PIL import Image

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))


class FakeRequest:
    """Request handle recorded by FakeFileSource; the test decides when it completes."""

    def __init__(self, url, callback, events):
        self.url = url
        self.callback = callback
        self.cancelled = False
        self.completed = False
        self._events = events

    def cancel(self):
        self.cancelled = True
        self._events.append(('cancel', self.url))

    @property
    def is_completed(self):
        return self.completed

    def respond(self, response):
        """Deliver a response, even if cancelled (a late response the transport could not stop)."""
        self.completed = True
        self.callback(response)


class FakeFileSource:
    def __init__(self):
        self.requests = []
        self.events = []

    def request(self, url, callback):
        req = FakeRequest(url, callback, self.events)
        self.requests.append(req)
        self.events.append(('request', url))
        return req

    @property
    def last(self):
        return self.requests[-1]


@pytest.fixture
def fake_fs():
    return FakeFileSource()


def _png(color, size=(4, 4)):
    buf = BytesIO()
    Image.new('RGB', size, color=color).save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return _png((10, 20, 30))


@pytest.fixture
def terrain_png_bytes():
    # (1, 134, 160) encodes exactly 0 m
    return _png((1, 134, 160), size=(2, 2))


@pytest.fixture
def vector_bytes():
    return mapbox_vector_tile.encode([
        {
            'name': 'water',
            'features': [
                {'geometry': 'POINT(10 10)', 'properties': {'kind': 'lake'}},
            ],
        },
        {
            'name': 'roads',
            'features': [
                {'geometry': 'LINESTRING(0 0, 10 10)', 'properties': {'class': 'street'}},
            ],
        },
    ])


@pytest.fixture
def gzipped_vector_bytes(vector_bytes):
    return gzip.compress(vector_bytes)
