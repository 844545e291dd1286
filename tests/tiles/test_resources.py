"""Tests for tile resource resolvers."""

import pytest

from geo.tile_id import CanonicalTileId, TileScheme
from tiles.resources import (
    ClassicRasterResolver,
    StyleRasterResolver,
    TerrainResolver,
    TileResource,
    VectorResolver,
)

TILE = CanonicalTileId(10, 545, 361)


class TestStyleRasterResolver:
    def test_style_url(self):
        res = StyleRasterResolver().resolve(TILE, 'mapbox://styles/mapbox/streets-v12')
        assert res.get_url() == (
            'https://api.mapbox.com/styles/v1/mapbox/streets-v12/tiles/512/10/545/361'
        )

    def test_bare_style_id_and_retina(self):
        res = StyleRasterResolver(tile_size=256, retina=True).resolve(
            TILE, 'mapbox/satellite-v9'
        )
        assert res.url.endswith('/styles/v1/mapbox/satellite-v9/tiles/256/10/545/361@2x')

    @pytest.mark.parametrize(('requested', 'used'), [(100, 256), (256, 256), (512, 512), (1024, 512)])
    def test_tile_size_is_snapped(self, requested, used):
        assert StyleRasterResolver(tile_size=requested).tile_size == used


class TestClassicRasterResolver:
    def test_png(self):
        res = ClassicRasterResolver().resolve(TILE, 'mapbox.satellite')
        assert res.url == 'https://api.mapbox.com/v4/mapbox.satellite/10/545/361.png'

    def test_retina_jpg_and_custom_base(self):
        res = ClassicRasterResolver(retina=True, fmt='jpg90', api_base='http://localhost:8080/').resolve(
            TILE, 'mapbox.satellite'
        )
        assert res.url == 'http://localhost:8080/v4/mapbox.satellite/10/545/361@2x.jpg90'


class TestVectorResolver:
    def test_vector_url(self):
        res = VectorResolver().resolve(TILE, 'mapbox.mapbox-streets-v8,mapbox.mapbox-terrain-v2')
        assert res.url == (
            'https://api.mapbox.com/v4/mapbox.mapbox-streets-v8,mapbox.mapbox-terrain-v2'
            '/10/545/361.vector.pbf'
        )

    def test_tms_ids_are_flipped(self):
        tms = CanonicalTileId(2, 1, 0, TileScheme.TMS)
        res = VectorResolver().resolve(tms, 'a.b')
        assert res.url.endswith('/v4/a.b/2/1/3.vector.pbf')


class TestTerrainResolver:
    def test_default_dataset(self):
        res = TerrainResolver().resolve(TILE, '')
        assert res.url == 'https://api.mapbox.com/v4/mapbox.terrain-rgb/10/545/361.pngraw'

    def test_retina(self):
        res = TerrainResolver(retina=True).resolve(TILE, 'mapbox.terrain-rgb')
        assert res.url.endswith('/10/545/361@2x.pngraw')


def test_resolvers_are_deterministic():
    resolver = VectorResolver()
    assert resolver.resolve(TILE, 'a.b') == resolver.resolve(TILE, 'a.b')
    assert TileResource('u').get_url() == 'u'


def test_resolvers_share_retina_and_api_base_options():
    for resolver_cls in (StyleRasterResolver, ClassicRasterResolver, VectorResolver, TerrainResolver):
        resolver = resolver_cls(retina=True, api_base='http://localhost:8080/')
        assert resolver.api_base == 'http://localhost:8080'


def test_vector_ignores_retina():
    assert VectorResolver(retina=True).resolve(TILE, 'a.b') == VectorResolver().resolve(TILE, 'a.b')
