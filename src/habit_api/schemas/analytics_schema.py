"""Схемы Pydantic для аналитики выполнений."""

from datetime import date

from pydantic import Field

from src.habit_api.utils.motivation import MotivationTier

from .base_schema import BaseSchema


class CategoryShareSchema(BaseSchema):
    """Доля категории в журнале выполнений."""

    category: str = Field(..., description="Категория")
    count: int = Field(..., description="Количество выполнений")
    percentage: float = Field(..., description="Процент от всех выполнений (один знак после запятой)")


class RhythmDaySchema(BaseSchema):
    """Один день недельного ритма."""

    day: date = Field(..., description="Календарный день пользователя")
    weekday: str = Field(..., description="День недели (Monday ... Sunday)")
    due: int = Field(..., description="Запланировано привычек")
    completed: int = Field(..., description="Выполнено из запланированных")


class AnalyticsSummarySchema(BaseSchema):
    """Сводка аналитики пользователя."""

    total_completions: int = Field(0, description="Всего записей в журнале")
    completions_last_7_days: int = Field(0, description="Выполнений за последние 7 дней")
    completions_last_30_days: int = Field(0, description="Выполнений за последние 30 дней")
    category_distribution: list[CategoryShareSchema] = Field(default_factory=list)
    most_frequent_weekday: str | None = Field(None, description="День недели с наибольшим числом выполнений")
    most_productive_hour: int | None = Field(None, description="Час суток с наибольшим числом выполнений")
    weekly_rhythm: list[RhythmDaySchema] = Field(default_factory=list, description="Ритм за последние дни")
    completion_rate: float = Field(0.0, description="Процент выполнения запланированных привычек за окно")
    current_streak: int = Field(0, description="Текущий глобальный стрик")
    longest_streak: int = Field(0, description="Рекордный глобальный стрик")
    total_habits_completed: int = Field(0, description="Выполнено привычек в засчитанных днях")
    motivation_tier: MotivationTier = Field(MotivationTier.STARTER, description="Уровень мотивации")
    motivational_message: str = Field("", description="Мотивирующее сообщение")
