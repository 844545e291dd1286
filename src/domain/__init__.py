"""Domain layer - settings models and profiles."""
from domain.models import FileSourceSettings
from domain.profiles import (
    delete_profile,
    ensure_profiles_dir,
    list_profiles,
    load_settings,
    save_settings,
)

__all__ = [
    'FileSourceSettings',
    'delete_profile',
    'ensure_profiles_dir',
    'list_profiles',
    'load_settings',
    'save_settings',
]
