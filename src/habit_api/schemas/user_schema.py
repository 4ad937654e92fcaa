"""Схемы Pydantic для модели User."""

from datetime import datetime
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AfterValidator, Field

from .base_schema import BaseSchema


def validate_timezone_name(value: str) -> str:
    """
    Проверяет, что строка является известным часовым поясом IANA.

    Raises:
        ValueError: Если часовой пояс неизвестен.
    """
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Неизвестный часовой пояс: '{value}'") from None

    return value


# Строка с проверкой по базе часовых поясов IANA
TimezoneName = Annotated[str, AfterValidator(validate_timezone_name)]


class UserSchemaBase(BaseSchema):
    """Базовая схема для пользователя."""

    username: str | None = Field(None, max_length=100, description="Отображаемое имя пользователя")
    timezone: str = Field("UTC", max_length=50, description="Часовой пояс (например, Europe/Moscow)")


class UserSchemaCreate(UserSchemaBase):
    """Схема для создания нового пользователя (данные от провайдера аутентификации)."""

    external_id: str = Field(..., min_length=1, max_length=255, description="ID пользователя у провайдера")
    timezone: TimezoneName = Field("UTC", max_length=50, description="Часовой пояс (например, Europe/Moscow)")


class UserSchemaUpdate(BaseSchema):
    """
    Схема для обновления данных пользователя.
    Все поля опциональны.
    """

    username: str | None = Field(None, max_length=100, description="Новое отображаемое имя")
    timezone: TimezoneName | None = Field(None, max_length=50, description="Новый часовой пояс пользователя")


class UserSchemaRead(UserSchemaBase):
    """Схема для чтения данных пользователя (ответа API)."""

    id: int = Field(..., description="Внутренний ID пользователя")
    external_id: str = Field(..., description="ID пользователя у провайдера")
    is_active: bool = Field(..., description="Статус активности пользователя")
    created_at: datetime = Field(..., description="Время создания записи пользователя")
    updated_at: datetime = Field(..., description="Время последнего обновления записи пользователя")
