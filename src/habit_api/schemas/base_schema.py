"""Базовая конфигурация для всех схем Pydantic сервиса."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Базовая схема Pydantic с общей конфигурацией.

    Схемы читаются напрямую из ORM моделей (привычек, записей журнала, стриков),
    а строковый ввод клиента очищается от пробелов по краям.
    """

    model_config = ConfigDict(
        from_attributes=True,  # Позволяет создавать схемы из ORM моделей
        str_strip_whitespace=True,  # "  Бег  " -> "Бег"
        extra="ignore",  # Игнорировать лишние поля при парсинге
    )
