"""Geo module - tile identifiers and Web Mercator helpers."""

from .mercator import latlng_to_pixel_xy, pixel_xy_to_latlng
from .tile_id import CanonicalTileId, TileScheme, UnwrappedTileId

__all__ = [
    'CanonicalTileId',
    'TileScheme',
    'UnwrappedTileId',
    'latlng_to_pixel_xy',
    'pixel_xy_to_latlng',
]
