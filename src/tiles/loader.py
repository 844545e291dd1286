"""
Awaitable wrappers around the callback-based Tile API.

The tile's callback may run on any thread; it completes an asyncio future
through call_soon_threadsafe so the awaiting coroutine resumes on its own loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from tiles.state import TileState
from tiles.tile import TileParameters
from tiles.variants import make_tile

if TYPE_CHECKING:
    from collections.abc import Iterable

    from geo.tile_id import CanonicalTileId
    from infrastructure.http.response import FileSource
    from shared.constants import TileKind
    from tiles.tile import Tile

logger = logging.getLogger(__name__)


async def wait_loaded(tile: Tile, params: TileParameters) -> Tile:
    """Initialize tile and wait for its completion callback."""
    loop = asyncio.get_running_loop()
    done: asyncio.Future[Tile] = loop.create_future()

    def _resolve(fut: asyncio.Future[Tile], t: Tile) -> None:
        if not fut.done():
            fut.set_result(t)

    def on_loaded(t: Tile) -> None:
        loop.call_soon_threadsafe(_resolve, done, t)

    tile.initialize(params, on_loaded)
    if tile.current_state is TileState.LOADED:
        # запрос не удалось отправить: callback не придёт
        _resolve(done, tile)
    try:
        return await done
    except asyncio.CancelledError:
        tile.cancel()
        raise


async def load_tile(
    kind: TileKind | str,
    tile_id: CanonicalTileId,
    map_id: str,
    fs: FileSource,
    **options: Any,
) -> Tile:
    """
    Загружает один тайл указанного типа.

    Args:
        kind: Тип тайла
        tile_id: Идентификатор тайла
        map_id: Идентификатор набора данных (tileset или URL стиля)
        fs: Источник данных
        options: Параметры резолвера (retina, tile_size, ...)

    Returns:
        Tile in LOADED state; check tile.error

    """
    tile = make_tile(kind, **options)
    return await wait_loaded(tile, TileParameters(tile_id, map_id, fs))


async def load_tiles(
    kind: TileKind | str,
    tile_ids: Iterable[CanonicalTileId],
    map_id: str,
    fs: FileSource,
    **options: Any,
) -> list[Tile]:
    """Load several tiles at once, in the order of tile_ids."""
    tiles = await asyncio.gather(
        *(load_tile(kind, tid, map_id, fs, **options) for tid in tile_ids)
    )
    failed = sum(1 for t in tiles if t.has_error)
    if failed:
        logger.info('%d of %d tiles loaded with errors', failed, len(tiles))
    return list(tiles)
