import logging
import os
from pathlib import Path

import tomlkit
from dotenv import load_dotenv

from domain.models import FileSourceSettings
from domain.toml_sections import flat_to_sectioned, sectioned_to_flat
from shared.constants import ACCESS_TOKEN_ENV, DEFAULT_PROFILE_NAME, PROFILES_DIR

logger = logging.getLogger(__name__)


def _user_profiles_dir() -> Path:
    """
    Determine profiles directory.

    1) If <project_root>/configs/profiles exists, use it (run-from-repo setups).
    2) Otherwise, fall back to $XDG_CONFIG_HOME/maptiles/profiles
       (~/.config/maptiles/profiles when XDG_CONFIG_HOME is not set).
    """
    project_root = Path(__file__).resolve().parent.parent.parent
    local_profiles = project_root / PROFILES_DIR
    if local_profiles.exists():
        return local_profiles

    config_home = os.getenv('XDG_CONFIG_HOME') or (Path.home() / '.config')
    return Path(config_home) / 'maptiles' / 'profiles'


def ensure_profiles_dir() -> Path:
    profiles_dir = _user_profiles_dir()
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir


def list_profiles() -> list[str]:
    """Список имён профилей без расширения."""
    folder = ensure_profiles_dir()
    return sorted(p.stem for p in folder.glob('*.toml') if p.is_file())


def profile_path(name: str) -> Path:
    """Путь к файлу профиля по имени."""
    return ensure_profiles_dir() / f'{name}.toml'


def _resolve(name_or_path: str) -> Path:
    p = Path(name_or_path)
    if p.suffix.lower() == '.toml':
        return p
    return profile_path(name_or_path)


def load_settings(
    name_or_path: str | None = None,
    *,
    env_file: str | Path | None = '.env',
) -> FileSourceSettings:
    """
    Загрузка настроек источника тайлов.

    Profile: a name from the profiles directory or a path to a TOML file.
    Without one, the default profile is used when it exists, otherwise the
    built-in defaults. The access token comes from MAPBOX_ACCESS_TOKEN
    (a .env file is read first) and overrides the profile.
    """
    if env_file is not None and Path(env_file).is_file():
        load_dotenv(env_file)

    data: dict = {}
    if name_or_path is None:
        path = profile_path(DEFAULT_PROFILE_NAME)
        if path.exists():
            data = sectioned_to_flat(tomlkit.parse(path.read_text(encoding='utf-8')).unwrap())
    else:
        path = _resolve(name_or_path)
        if not path.exists():
            msg = f'Профиль не найден: {path}'
            raise FileNotFoundError(msg)
        data = sectioned_to_flat(tomlkit.parse(path.read_text(encoding='utf-8')).unwrap())
        logger.info('Loaded profile %s', path)

    token = os.getenv(ACCESS_TOKEN_ENV, '').strip()
    if token:
        data['access_token'] = token

    settings = FileSourceSettings.model_validate(data)
    logger.debug(
        'File source settings: api_base=%s timeout=%.1fs retries=%d token=%s',
        settings.api_base,
        settings.timeout_s,
        settings.retries,
        settings.masked_token(),
    )
    return settings


def save_settings(name_or_path: str, settings: FileSourceSettings) -> Path:
    """Сохранение профиля в TOML (токен не сохраняется)."""
    path = _resolve(name_or_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(exclude={'access_token'})
    path.write_text(tomlkit.dumps(flat_to_sectioned(data)), encoding='utf-8')
    return path


def delete_profile(name: str) -> None:
    """Удаление файла профиля, если он существует."""
    path = profile_path(name)
    if path.exists():
        path.unlink()
