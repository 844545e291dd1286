"""Tests for TOML sectioned profile mapping layer."""

import tomlkit

from domain.models import FileSourceSettings
from domain.toml_sections import (
    SECTION_MAP,
    flat_to_sectioned,
    sectioned_to_flat,
)


class TestFlatToSectioned:
    def test_known_fields_go_to_sections(self):
        result = flat_to_sectioned({'api_base': 'https://h', 'retries': 2})
        assert result == {'api': {'base': 'https://h'}, 'http': {'retries': 2}}

    def test_unknown_fields_go_to_common(self):
        assert flat_to_sectioned({'theme': 'dark'}) == {'common': {'theme': 'dark'}}

    def test_every_settings_field_is_mapped(self):
        mapped = {f for fields in SECTION_MAP.values() for f in fields}
        assert set(FileSourceSettings.model_fields) <= mapped


class TestSectionedToFlat:
    def test_expands_short_names(self):
        flat = sectioned_to_flat({'api': {'base': 'https://h'}, 'http': {'timeout_s': 5}})
        assert flat == {'api_base': 'https://h', 'timeout_s': 5}

    def test_accepts_flat_toml(self):
        assert sectioned_to_flat({'retries': 3}) == {'retries': 3}

    def test_unknown_section_passes_through(self):
        assert sectioned_to_flat({'common': {'theme': 'dark'}}) == {'theme': 'dark'}


def test_toml_round_trip():
    settings = FileSourceSettings(api_base='http://localhost:9000', retries=2, backoff=1.2)
    text = tomlkit.dumps(flat_to_sectioned(settings.model_dump()))
    assert '[api]' in text
    assert '[http]' in text

    restored = FileSourceSettings.model_validate(sectioned_to_flat(tomlkit.parse(text).unwrap()))
    assert restored == settings
