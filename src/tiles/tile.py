"""
Tile request controller.

A Tile owns one fetch attempt at a time. initialize() cancels whatever is in
flight, issues a new request through the file source and remembers the
completion callback; the response handler decodes the payload and fires the
callback once. Every attempt gets a generation number; responses carrying an
older generation are dropped, so a cancelled or superseded request can never
overwrite the state of a newer one or call back twice.

All fields are guarded by a per-tile lock. The lock is never held while
calling into the file source, the decoder or the callback.
"""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from shared.constants import PARSE_ERROR
from tiles.state import TileOutcome, TileState

if TYPE_CHECKING:
    from collections.abc import Callable

    from geo.tile_id import CanonicalTileId
    from infrastructure.http.response import AsyncRequest, FileSource, Response
    from shared.constants import TileKind
    from tiles.variants import TileCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileParameters:
    """
    Parameters for initializing a Tile.

    map_id is the tileset id, usually 'user.mapid'. Style-rendered raster
    tiles take the style URL instead, e.g. mapbox://styles/mapbox/streets-v12.
    """

    id: CanonicalTileId
    map_id: str
    fs: FileSource


class Tile:
    """A map tile: a square of raster, vector or terrain data."""

    def __init__(self, codec: TileCodec):
        self._codec = codec
        self._lock = threading.Lock()
        self._id: CanonicalTileId | None = None
        self._map_id: str | None = None
        self._outcome = TileOutcome()
        self._request: AsyncRequest | None = None
        self._callback: Callable[[Tile], Any] | None = None
        self._generation = 0

    def __str__(self) -> str:
        return str(self._id) if self._id is not None else 'unbound'

    def __repr__(self) -> str:
        return f'<Tile {self._codec.kind.value} {self} {self.current_state.value}>'

    @property
    def kind(self) -> TileKind:
        return self._codec.kind

    @property
    def id(self) -> CanonicalTileId | None:
        return self._id

    @property
    def map_id(self) -> str | None:
        return self._map_id

    @property
    def outcome(self) -> TileOutcome:
        return self._outcome

    @property
    def current_state(self) -> TileState:
        """
        Current state. When LOADED, check error: a tile whose fetch or parse
        failed is loaded too.
        """
        return self._outcome.state

    @property
    def error(self) -> str | None:
        return self._outcome.error

    @property
    def content(self) -> Any:
        return self._outcome.content

    @property
    def is_loading(self) -> bool:
        return self._outcome.state is TileState.LOADING

    @property
    def has_error(self) -> bool:
        return bool(self._outcome.error)

    def initialize(self, params: TileParameters, callback: Callable[[Tile], Any]) -> None:
        """
        Start loading the tile; callback(tile) fires once the data arrived.

        Any attempt in flight is cancelled first. The callback is never
        invoked from inside this call.

        If the request cannot be issued (the resolver or the file source
        raises), the tile is LOADED with the exception text as its error
        and the callback is dropped without being called: the failure is
        known by the time initialize() returns.
        """
        with self._lock:
            previous = self._detach_request()
            self._generation += 1
            generation = self._generation
            self._id = params.id
            self._map_id = params.map_id
            self._outcome = self._outcome.moved_to(TileState.LOADING)
            self._callback = callback
        if previous is not None:
            previous.cancel()

        try:
            resource = self._codec.resolver.resolve(params.id, params.map_id)
            logger.debug('Tile %s: requesting %s (attempt %d)', params.id, resource.url, generation)
            request = params.fs.request(
                resource.get_url(),
                functools.partial(self._handle_response, generation),
            )
        except Exception as e:
            logger.exception('Tile %s: request could not be issued', params.id)
            self._fail_issue(generation, str(e) or type(e).__name__)
            return

        with self._lock:
            superseded = generation != self._generation
            if not superseded:
                self._request = request
        if superseded:
            # cancel() or initialize() got in while the request was being issued,
            # or the response already arrived; either way the handle is not ours
            request.cancel()

    def cancel(self) -> None:
        """Cancel the request in flight (if any) and set the state to CANCELED."""
        with self._lock:
            request = self._detach_request()
            self._generation += 1
            self._outcome = self._outcome.moved_to(TileState.CANCELED)
        if request is not None:
            request.cancel()
            logger.debug('Tile %s: request cancelled', self)

    def set_state(self, state: TileState) -> None:
        """Overwrite the state without touching the request or the callback."""
        with self._lock:
            self._outcome = self._outcome.moved_to(TileState(state))

    def set_error(self, message: str | None) -> None:
        with self._lock:
            self._outcome = self._outcome.with_error(message)

    def _fail_issue(self, generation: int, error: str) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._generation += 1
            self._outcome = TileOutcome.loaded(None, error)
            self._callback = None

    def _detach_request(self) -> AsyncRequest | None:
        request, self._request = self._request, None
        return request

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _decode(self, data: bytes) -> Any:
        try:
            return self._codec.decoder.decode(data)
        except Exception:
            logger.exception('Tile %s: decoder raised', self)
            return None

    def _handle_response(self, generation: int, response: Response) -> None:
        if not self._is_current(generation):
            logger.debug('Tile %s: dropping stale response (attempt %d)', self, generation)
            return

        content = None
        if response.has_error:
            error = response.error
        else:
            content = self._decode(response.data)
            error = None if content is not None else PARSE_ERROR

        with self._lock:
            if generation != self._generation:
                logger.debug('Tile %s: dropping stale response (attempt %d)', self, generation)
                return
            # An attempt completes once; retire its generation
            self._generation += 1
            self._request = None
            self._outcome = TileOutcome.loaded(content, error)
            callback, self._callback = self._callback, None

        if error:
            logger.debug('Tile %s: loaded with error: %s', self, error)
        else:
            logger.debug('Tile %s: loaded', self)
        if callback is None:
            return
        try:
            callback(self)
        except Exception:
            logger.exception('Tile %s: completion callback failed', self)
