from pydantic import BaseModel, field_validator

from shared.constants import (
    API_KEY_VISIBLE_PREFIX_LEN,
    HTTP_BACKOFF_FACTOR,
    HTTP_RETRIES_DEFAULT,
    HTTP_TIMEOUT_DEFAULT,
    HTTP_USER_AGENT,
    MAPBOX_API_BASE,
)


class FileSourceSettings(BaseModel):
    """Настройки HTTP-источника тайлов."""

    model_config = {
        'extra': 'ignore',  # игнорировать лишние поля из профилей
    }

    # Токен доступа Mapbox (обычно берётся из окружения, в профиль не пишется)
    access_token: str = ''
    # Базовый URL API
    api_base: str = MAPBOX_API_BASE
    # Таймаут одного запроса (секунды)
    timeout_s: float = HTTP_TIMEOUT_DEFAULT
    # Число попыток для 429/5xx и сетевых ошибок
    retries: int = HTTP_RETRIES_DEFAULT
    # Основание экспоненциальной задержки между попытками
    backoff: float = HTTP_BACKOFF_FACTOR
    user_agent: str = HTTP_USER_AGENT

    @field_validator('timeout_s')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        v = float(v)
        if v <= 0:
            msg = 'Таймаут должен быть положительным'
            raise ValueError(msg)
        return v

    @field_validator('retries')
    @classmethod
    def validate_retries(cls, v: int) -> int:
        v = int(v)
        if v < 1:
            msg = 'Число попыток должно быть не меньше 1'
            raise ValueError(msg)
        return v

    @field_validator('api_base')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')

    def masked_token(self) -> str:
        """Token safe for logs: first characters only."""
        if not self.access_token:
            return '<none>'
        return self.access_token[:API_KEY_VISIBLE_PREFIX_LEN] + '***'
