"""Схемы Pydantic для аутентификации."""

from pydantic import BaseModel, Field

from .base_schema import BaseSchema
from .user_schema import TimezoneName


class Token(BaseSchema):
    """Схема для JWT токена."""

    access_token: str = Field(..., description="JWT токен доступа")
    token_type: str = Field(default="bearer", description="Тип токена (всегда 'bearer')")


class TokenPayload(BaseModel):
    """
    Схема для данных (payload), закодированных в JWT.
    Содержит ID пользователя и может содержать время истечения (exp).
    """

    user_id: int = Field(..., description="ID пользователя (внутренний)")
    exp: int | None = Field(None, description="Время истечения токена (Unix timestamp)")


class ServiceLoginRequest(BaseModel):
    """Схема запроса от доверенного сервиса (провайдера аутентификации) для получения JWT токена пользователя."""

    external_id: str = Field(..., min_length=1, max_length=255, description="ID пользователя у провайдера")
    username: str | None = Field(None, max_length=100, description="Отображаемое имя пользователя (если есть)")
    timezone: TimezoneName | None = Field(None, max_length=50, description="Часовой пояс IANA (например, Europe/Moscow)")
