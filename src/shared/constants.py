from enum import Enum

# Базовый URL Mapbox API
MAPBOX_API_BASE = 'https://api.mapbox.com'

# Префикс ссылок на стили вида mapbox://styles/{owner}/{style}
MAPBOX_STYLE_URL_PREFIX = 'mapbox://styles/'

# Датасет Terrain-RGB по умолчанию
MAPBOX_TERRAIN_RGB_DATASET = 'mapbox.terrain-rgb'

# Environment variable holding the access token
ACCESS_TOKEN_ENV = 'MAPBOX_ACCESS_TOKEN'

# Query parameter carrying the access token
ACCESS_TOKEN_PARAM = 'access_token'

# Number of visible token characters when masking
API_KEY_VISIBLE_PREFIX_LEN = 4

# --- Web Mercator
MERCATOR_MAX_LAT_DEG = 85.05112878
WORLD_LNG_SPAN_DEG = 360.0
WORLD_LNG_HALF_SPAN_DEG = 180.0
WORLD_LAT_MAX_DEG = 90.0
# Ограничение синуса для избежания бесконечностей у полюсов
MERCATOR_MAX_SIN = 0.9999

# Base Web Mercator tile size (px)
TILE_SIZE = 256
TILE_SIZE_512 = 512

# Максимальный уровень приближения, который принимает идентификатор тайла
MAX_ZOOM = 30

# Suffix for HiDPI tiles
RETINA_SUFFIX = '@2x'

# --- Terrain-RGB decoding: elevation = base + (R*65536 + G*256 + B) * scale
TERRAIN_RGB_BASE_M = -10000.0
TERRAIN_RGB_SCALE_M = 0.1

# gzip magic bytes (vector tiles are commonly served gzip-compressed)
GZIP_MAGIC = b'\x1f\x8b'

# Generic marker recorded when a payload could not be decoded
PARSE_ERROR = 'ParseError'

# --- Параметры сетевых запросов по умолчанию
HTTP_TIMEOUT_DEFAULT = 20.0
HTTP_RETRIES_DEFAULT = 4
HTTP_BACKOFF_FACTOR = 1.6
HTTP_USER_AGENT = 'maptiles/0.1'

# HTTP диапазоны ошибок сервера
HTTP_5XX_MIN = 500
HTTP_5XX_MAX = 600

# Profile locations
PROFILES_DIR = 'configs/profiles'
DEFAULT_PROFILE_NAME = 'default'


class TileKind(str, Enum):
    """Supported tile variants."""

    RASTER = 'raster'
    CLASSIC_RASTER = 'classic_raster'
    VECTOR = 'vector'
    TERRAIN = 'terrain'
