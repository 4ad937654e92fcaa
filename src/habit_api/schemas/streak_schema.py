"""Схемы Pydantic для глобального стрика пользователя."""

from datetime import date

from pydantic import Field

from .base_schema import BaseSchema


class StreakSchemaRead(BaseSchema):
    """
    Схема для чтения глобального стрика.

    Значения по умолчанию нулевые: так выглядит стрик пользователя без записи
    (или при недоступном хранилище).
    """

    current_streak: int = Field(0, description="Текущая серия полностью выполненных дней")
    longest_streak: int = Field(0, description="Максимальная серия полностью выполненных дней")
    last_streak_date: date | None = Field(None, description="Последний день, на который продвинут стрик")
    total_habits_completed: int = Field(0, description="Выполнено привычек в засчитанных днях")
