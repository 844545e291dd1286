"""
Payload decoders: raw response bytes -> decoded tile content.

A decoder never raises. It returns the decoded content, or None when the
payload cannot be parsed; the tile turns None into a generic parse error.
Decoders run inside the response handler, which may be on a different
thread or loop callback than the one that initialized the tile.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Protocol

import mapbox_vector_tile
import numpy as np
from PIL import Image, UnidentifiedImageError

from shared.constants import GZIP_MAGIC, TERRAIN_RGB_BASE_M, TERRAIN_RGB_SCALE_M

logger = logging.getLogger(__name__)


class PayloadDecoder(Protocol):
    def decode(self, data: bytes) -> Any | None: ...


@dataclass(frozen=True)
class RasterData:
    """Raw image bytes plus the decoded RGB image."""

    data: bytes
    image: Image.Image

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True)
class VectorData:
    """Decoded vector tile: layer name -> {'extent', 'version', 'features'}."""

    layers: dict[str, dict[str, Any]]

    def layer_names(self) -> list[str]:
        return list(self.layers)

    def layer(self, name: str) -> dict[str, Any] | None:
        return self.layers.get(name)

    def features(self, name: str) -> list[dict[str, Any]]:
        layer = self.layers.get(name)
        if layer is None:
            return []
        return list(layer.get('features', []))


@dataclass(frozen=True)
class TerrainData:
    """Terrain-RGB image and the elevations (metres, float32) it encodes."""

    image: Image.Image
    elevations: np.ndarray

    def elevation_at(self, px: int, py: int) -> float:
        return float(self.elevations[py, px])


def _open_rgb(data: bytes) -> Image.Image | None:
    try:
        with Image.open(BytesIO(data)) as img:
            # Контент может быть png/jpg/webp — PIL откроет всё; конвертируем в RGB
            return img.convert('RGB')
    except UnidentifiedImageError as e:
        logger.debug('Image payload rejected: %s', e)
        return None
    except Exception as e:  # noqa: BLE001
        logger.debug('Image payload is corrupt: %s', e)
        return None


def decode_terrain_rgb_to_elevation_m(img: Image.Image) -> np.ndarray:
    """
    Декодирует Terrain-RGB картинку в двумерный массив высот (метры).

    elevation = -10000 + (R*256*256 + G*256 + B) * 0.1
    """
    arr = np.asarray(img, dtype=np.float32)
    r = arr[:, :, 0]
    g = arr[:, :, 1]
    b = arr[:, :, 2]
    elevation = TERRAIN_RGB_BASE_M + (r * 65536.0 + g * 256.0 + b) * TERRAIN_RGB_SCALE_M
    return elevation.astype(np.float32)


class RasterDecoder:
    def decode(self, data: bytes) -> RasterData | None:
        if not data:
            return None
        img = _open_rgb(data)
        if img is None:
            return None
        return RasterData(data=data, image=img)


class VectorDecoder:
    """Decodes Mapbox Vector Tile protobufs, gunzipping them first if needed."""

    def decode(self, data: bytes) -> VectorData | None:
        if not data:
            return None
        try:
            if data[:2] == GZIP_MAGIC:
                data = gzip.decompress(data)
            layers = mapbox_vector_tile.decode(data)
        except (OSError, EOFError, zlib.error) as e:
            logger.debug('Vector payload is not valid gzip: %s', e)
            return None
        except Exception as e:  # noqa: BLE001
            logger.debug('Vector payload rejected: %s', e)
            return None
        return VectorData(layers=layers)


class TerrainDecoder:
    def decode(self, data: bytes) -> TerrainData | None:
        if not data:
            return None
        img = _open_rgb(data)
        if img is None:
            return None
        return TerrainData(image=img, elevations=decode_terrain_rgb_to_elevation_m(img))
