"""
Tile identifiers for the Web Mercator quadtree.

CanonicalTileId is the key the tile collection uses to address a tile: it is
immutable, hashable and always refers to a tile that exists at its zoom level.
UnwrappedTileId may point at a copy of the world to the left or right of the
antimeridian and wraps back to a canonical id.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from geo.mercator import latlng_to_pixel_xy, pixel_xy_to_latlng
from shared.constants import MAX_ZOOM, MERCATOR_MAX_LAT_DEG, TILE_SIZE


class TileScheme(str, Enum):
    """Tile row numbering: XYZ counts rows from the top, TMS from the bottom."""

    XYZ = 'xyz'
    TMS = 'tms'


def _flip_y(z: int, y: int) -> int:
    return (1 << z) - 1 - y


@dataclass(frozen=True)
class CanonicalTileId:
    """Immutable (zoom, x, y, scheme) key of a tile."""

    z: int
    x: int
    y: int
    scheme: TileScheme = TileScheme.XYZ

    def __post_init__(self) -> None:
        if not (0 <= self.z <= MAX_ZOOM):
            msg = f'Zoom level out of range [0, {MAX_ZOOM}]: {self.z}'
            raise ValueError(msg)
        size = 1 << self.z
        if not (0 <= self.x < size and 0 <= self.y < size):
            msg = f'Tile {self.x}/{self.y} does not exist at zoom {self.z}'
            raise ValueError(msg)

    def __str__(self) -> str:
        return f'{self.z}/{self.x}/{self.y}'

    @classmethod
    def parse(cls, text: str, scheme: TileScheme = TileScheme.XYZ) -> CanonicalTileId:
        """Parse a 'z/x/y' string."""
        parts = text.strip().split('/')
        if len(parts) != 3:  # noqa: PLR2004
            msg = f'Expected "z/x/y", got {text!r}'
            raise ValueError(msg)
        z, x, y = (int(p) for p in parts)
        return cls(z, x, y, scheme)

    @classmethod
    def from_lat_lng(cls, lat: float, lng: float, zoom: int) -> CanonicalTileId:
        """Return the XYZ tile containing a WGS84 point."""
        lat = min(max(lat, -MERCATOR_MAX_LAT_DEG), MERCATOR_MAX_LAT_DEG)
        px, py = latlng_to_pixel_xy(lat, lng, zoom)
        last = (1 << zoom) - 1
        x = min(max(math.floor(px / TILE_SIZE), 0), last)
        y = min(max(math.floor(py / TILE_SIZE), 0), last)
        return cls(zoom, x, y)

    def to_xyz(self) -> CanonicalTileId:
        if self.scheme is TileScheme.XYZ:
            return self
        return CanonicalTileId(self.z, self.x, _flip_y(self.z, self.y), TileScheme.XYZ)

    def to_tms(self) -> CanonicalTileId:
        if self.scheme is TileScheme.TMS:
            return self
        return CanonicalTileId(self.z, self.x, _flip_y(self.z, self.y), TileScheme.TMS)

    @property
    def quadkey(self) -> str:
        """Bing-style quadkey of the tile (computed on the XYZ form)."""
        xyz = self.to_xyz()
        digits = []
        for i in range(xyz.z, 0, -1):
            mask = 1 << (i - 1)
            digit = 0
            if xyz.x & mask:
                digit += 1
            if xyz.y & mask:
                digit += 2
            digits.append(str(digit))
        return ''.join(digits)

    def parent(self) -> CanonicalTileId | None:
        if self.z == 0:
            return None
        xyz = self.to_xyz()
        parent = CanonicalTileId(xyz.z - 1, xyz.x >> 1, xyz.y >> 1)
        return parent if self.scheme is TileScheme.XYZ else parent.to_tms()

    def children(self) -> list[CanonicalTileId]:
        xyz = self.to_xyz()
        z, x, y = xyz.z + 1, xyz.x * 2, xyz.y * 2
        kids = [
            CanonicalTileId(z, x, y),
            CanonicalTileId(z, x + 1, y),
            CanonicalTileId(z, x, y + 1),
            CanonicalTileId(z, x + 1, y + 1),
        ]
        if self.scheme is TileScheme.TMS:
            return [k.to_tms() for k in kids]
        return kids

    def bounds(self) -> tuple[float, float, float, float]:
        """Return (west, south, east, north) in degrees."""
        xyz = self.to_xyz()
        north, west = pixel_xy_to_latlng(xyz.x * TILE_SIZE, xyz.y * TILE_SIZE, xyz.z)
        south, east = pixel_xy_to_latlng(
            (xyz.x + 1) * TILE_SIZE, (xyz.y + 1) * TILE_SIZE, xyz.z
        )
        return west, south, east, north


@dataclass(frozen=True)
class UnwrappedTileId:
    """Tile id whose x may fall outside the canonical range (world copies)."""

    z: int
    x: int
    y: int

    def __str__(self) -> str:
        return f'{self.z}/{self.x}/{self.y}'

    @property
    def canonical(self) -> CanonicalTileId:
        return CanonicalTileId(self.z, self.x % (1 << self.z), self.y)
