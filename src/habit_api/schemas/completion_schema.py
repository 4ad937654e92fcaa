"""Схемы Pydantic для модели HabitCompletion."""

from datetime import date, datetime

from pydantic import Field

from .base_schema import BaseSchema


class HabitCompletionSchemaRead(BaseSchema):
    """Схема для чтения записи журнала выполнений (ответа API)."""

    id: int = Field(..., description="ID записи журнала")
    user_id: int = Field(..., description="ID пользователя")
    habit_id: int = Field(..., description="ID привычки, к которой относится выполнение")
    completion_date: date = Field(..., description="Календарный день выполнения (по времени пользователя)")
    completed_at: datetime = Field(..., description="Точный момент выполнения")
    is_completed: bool = Field(..., description="Флаг выполнения")
    category: str = Field(..., description="Категория привычки на момент выполнения")
