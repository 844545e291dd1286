"""Command line entry point: fetch a single tile and report its outcome."""

import argparse
import asyncio
import logging
import sys

from domain.models import FileSourceSettings
from domain.profiles import load_settings
from geo.tile_id import CanonicalTileId, TileScheme
from infrastructure.http.file_source import HttpFileSource
from shared.constants import TileKind
from tiles.decoders import RasterData, TerrainData, VectorData
from tiles.loader import load_tile
from tiles.variants import codec_for

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure console logging."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def describe_content(content: object) -> str:
    if isinstance(content, RasterData):
        w, h = content.size
        return f'raster {w}x{h}, {len(content.data)} bytes'
    if isinstance(content, VectorData):
        names = ', '.join(content.layer_names()) or '-'
        return f'vector layers: {names}'
    if isinstance(content, TerrainData):
        elev = content.elevations
        return f'terrain {elev.shape[1]}x{elev.shape[0]}, {elev.min():.1f}..{elev.max():.1f} m'
    return 'no content'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='maptiles',
        description='Загрузка и разбор отдельных тайлов Mapbox',
    )
    sub = parser.add_subparsers(dest='command', required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument('kind', choices=[k.value for k in TileKind], help='Тип тайла')
        p.add_argument('tile', help='Идентификатор тайла z/x/y')
        p.add_argument('--map-id', required=True, help='Tileset id или URL стиля')
        p.add_argument('--tms', action='store_true', help='y в схеме TMS')
        p.add_argument('--retina', action='store_true', help='Тайлы @2x')
        p.add_argument('--profile', help='Имя профиля или путь к TOML (api_base)')

    fetch = sub.add_parser('fetch', help='Загрузить тайл и вывести результат')
    add_common(fetch)
    fetch.add_argument('-v', '--verbose', action='store_true', help='Отладочный лог')

    url = sub.add_parser('url', help='Показать URL тайла без загрузки')
    add_common(url)
    return parser


def _tile_id(args: argparse.Namespace) -> CanonicalTileId:
    scheme = TileScheme.TMS if args.tms else TileScheme.XYZ
    return CanonicalTileId.parse(args.tile, scheme)


def _url(args: argparse.Namespace, settings: FileSourceSettings) -> int:
    codec = codec_for(args.kind, retina=args.retina, api_base=settings.api_base)
    print(codec.resolver.resolve(_tile_id(args), args.map_id).get_url())
    return 0


async def _fetch(args: argparse.Namespace, settings: FileSourceSettings) -> int:
    tile_id = _tile_id(args)
    async with HttpFileSource(settings) as fs:
        tile = await load_tile(
            args.kind, tile_id, args.map_id, fs,
            retina=args.retina, api_base=settings.api_base,
        )
    print(f'{tile}: {tile.current_state.value}')
    if tile.has_error:
        print(f'error: {tile.error}')
        return 1
    print(describe_content(tile.content))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    verbose = getattr(args, 'verbose', False)
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    try:
        settings = load_settings(args.profile)
        if args.command == 'url':
            return _url(args, settings)
        return asyncio.run(_fetch(args, settings))
    except (FileNotFoundError, ValueError) as e:
        logger.error('%s', e)
        return 2


if __name__ == '__main__':
    sys.exit(main())
