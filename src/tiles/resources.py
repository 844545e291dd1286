"""
Resource resolvers: turn a tile id and a dataset id into a fetch target.

Each tile variant owns one resolver. Resolvers are configured once at
construction and are pure functions of (tile id, dataset id) afterwards.
Access tokens are not part of the resource; the file source appends them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from shared.constants import (
    MAPBOX_API_BASE,
    MAPBOX_STYLE_URL_PREFIX,
    MAPBOX_TERRAIN_RGB_DATASET,
    RETINA_SUFFIX,
    TILE_SIZE,
    TILE_SIZE_512,
)

if TYPE_CHECKING:
    from geo.tile_id import CanonicalTileId


@dataclass(frozen=True)
class TileResource:
    """Concrete fetch target of a tile."""

    url: str

    def get_url(self) -> str:
        return self.url


class ResourceResolver(Protocol):
    def resolve(self, tile_id: CanonicalTileId, map_id: str) -> TileResource: ...


def _scale_suffix(retina: bool) -> str:
    return RETINA_SUFFIX if retina else ''


class StyleRasterResolver:
    """
    Raster tiles rendered from a Mapbox style.

    map_id is a style URL (mapbox://styles/{owner}/{style}) or the bare
    '{owner}/{style}' pair.
    """

    def __init__(
        self,
        *,
        tile_size: int = TILE_SIZE_512,
        retina: bool = False,
        api_base: str = MAPBOX_API_BASE,
    ):
        self.tile_size = TILE_SIZE_512 if tile_size >= TILE_SIZE_512 else TILE_SIZE
        self.retina = retina
        self.api_base = api_base.rstrip('/')

    def resolve(self, tile_id: CanonicalTileId, map_id: str) -> TileResource:
        style = map_id.removeprefix(MAPBOX_STYLE_URL_PREFIX).strip('/')
        t = tile_id.to_xyz()
        path = (
            f'{self.api_base}/styles/v1/{style}/tiles/{self.tile_size}'
            f'/{t.z}/{t.x}/{t.y}{_scale_suffix(self.retina)}'
        )
        return TileResource(path)


class ClassicRasterResolver:
    """Raster tiles of a tileset served by the v4 API."""

    def __init__(
        self,
        *,
        retina: bool = False,
        fmt: str = 'png',
        api_base: str = MAPBOX_API_BASE,
    ):
        self.retina = retina
        self.fmt = fmt
        self.api_base = api_base.rstrip('/')

    def resolve(self, tile_id: CanonicalTileId, map_id: str) -> TileResource:
        t = tile_id.to_xyz()
        path = (
            f'{self.api_base}/v4/{map_id}/{t.z}/{t.x}/{t.y}'
            f'{_scale_suffix(self.retina)}.{self.fmt}'
        )
        return TileResource(path)


class VectorResolver:
    """
    Mapbox vector tiles (.vector.pbf) of one or more comma-separated tilesets.

    Vector tiles are resolution independent: retina is accepted like for the
    other resolvers and has no effect on the URL.
    """

    def __init__(self, *, retina: bool = False, api_base: str = MAPBOX_API_BASE):
        self.retina = retina
        self.api_base = api_base.rstrip('/')

    def resolve(self, tile_id: CanonicalTileId, map_id: str) -> TileResource:
        t = tile_id.to_xyz()
        return TileResource(f'{self.api_base}/v4/{map_id}/{t.z}/{t.x}/{t.y}.vector.pbf')


class TerrainResolver:
    """Terrain-RGB tiles (.pngraw, lossless PNG)."""

    def __init__(self, *, retina: bool = False, api_base: str = MAPBOX_API_BASE):
        self.retina = retina
        self.api_base = api_base.rstrip('/')

    def resolve(self, tile_id: CanonicalTileId, map_id: str) -> TileResource:
        dataset = map_id or MAPBOX_TERRAIN_RGB_DATASET
        t = tile_id.to_xyz()
        return TileResource(
            f'{self.api_base}/v4/{dataset}/{t.z}/{t.x}/{t.y}'
            f'{_scale_suffix(self.retina)}.pngraw'
        )
