"""Map tiles and their fetch/parse lifecycle.

This module provides:
- Tile: request controller (initialize / cancel / set_state)
- TileState, TileOutcome: lifecycle states and the atomic outcome record
- Resolvers: URL construction per tile variant
- Decoders: payload parsing per tile variant
- make_tile, load_tile: constructors and awaitable helpers
"""

from tiles.decoders import RasterData, TerrainData, VectorData
from tiles.loader import load_tile, load_tiles, wait_loaded
from tiles.resources import TileResource
from tiles.state import TileOutcome, TileState
from tiles.tile import Tile, TileParameters
from tiles.variants import (
    TileCodec,
    classic_raster_tile,
    codec_for,
    make_tile,
    raster_tile,
    terrain_tile,
    vector_tile,
)

__all__ = [
    'RasterData',
    'TerrainData',
    'Tile',
    'TileCodec',
    'TileOutcome',
    'TileParameters',
    'TileResource',
    'TileState',
    'VectorData',
    'classic_raster_tile',
    'codec_for',
    'load_tile',
    'load_tiles',
    'make_tile',
    'raster_tile',
    'terrain_tile',
    'vector_tile',
    'wait_loaded',
]
