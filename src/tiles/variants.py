"""
Tile variants.

Every variant shares the Tile state machine and differs only in the pair of
capabilities it is built with: the resolver that makes the URL and the
decoder that parses the payload. The pair is chosen once, when the tile is
created.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from shared.constants import TileKind
from tiles.decoders import RasterDecoder, TerrainDecoder, VectorDecoder
from tiles.resources import (
    ClassicRasterResolver,
    StyleRasterResolver,
    TerrainResolver,
    VectorResolver,
)
from tiles.tile import Tile

if TYPE_CHECKING:
    from tiles.decoders import PayloadDecoder
    from tiles.resources import ResourceResolver


@dataclass(frozen=True)
class TileCodec:
    """Resolver and decoder of one tile variant."""

    kind: TileKind
    resolver: ResourceResolver
    decoder: PayloadDecoder


def codec_for(kind: TileKind | str, **options: Any) -> TileCodec:
    """
    Build the capability pair for a tile kind.

    options are passed to the resolver (retina, tile_size, fmt, api_base).
    """
    kind = TileKind(kind)
    if kind is TileKind.RASTER:
        return TileCodec(kind, StyleRasterResolver(**options), RasterDecoder())
    if kind is TileKind.CLASSIC_RASTER:
        return TileCodec(kind, ClassicRasterResolver(**options), RasterDecoder())
    if kind is TileKind.VECTOR:
        return TileCodec(kind, VectorResolver(**options), VectorDecoder())
    return TileCodec(kind, TerrainResolver(**options), TerrainDecoder())


def make_tile(kind: TileKind | str, **options: Any) -> Tile:
    return Tile(codec_for(kind, **options))


def raster_tile(**options: Any) -> Tile:
    return make_tile(TileKind.RASTER, **options)


def classic_raster_tile(**options: Any) -> Tile:
    return make_tile(TileKind.CLASSIC_RASTER, **options)


def vector_tile(**options: Any) -> Tile:
    return make_tile(TileKind.VECTOR, **options)


def terrain_tile(**options: Any) -> Tile:
    return make_tile(TileKind.TERRAIN, **options)
