"""Схемы Pydantic для модели Habit."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, StringConstraints, model_validator

from src.habit_api.models import HabitFrequency

from .base_schema import BaseSchema
from .streak_schema import StreakSchemaRead

WeekdayName = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
DayOfMonth = Annotated[int, Field(ge=1, le=31)]
# Строка только из пробелов после очистки становится пустой и отклоняется
HabitTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
HabitCategory = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]

# Порядок дней недели для канонической сортировки
_WEEKDAY_ORDER: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def normalize_recurrence(
    frequency: HabitFrequency,
    days_of_week: list[str] | None,
    days_of_month: list[int] | None,
) -> tuple[list[str] | None, list[int] | None]:
    """
    Проверяет и нормализует правило повторения привычки.

    Для weekly нужен непустой набор дней недели, для monthly непустой набор чисел месяца.
    Наборы дедуплицируются и сортируются, набор другой частоты очищается.

    Args:
        frequency (HabitFrequency): Частота.
        days_of_week (list[str] | None): Дни недели.
        days_of_month (list[int] | None): Числа месяца.

    Returns:
        tuple[list[str] | None, list[int] | None]: Нормализованные (days_of_week, days_of_month).

    Raises:
        ValueError: Если для частоты не задан нужный набор дней.
    """
    if frequency == HabitFrequency.WEEKLY:
        if not days_of_week:
            raise ValueError("Для еженедельной привычки выберите хотя бы один день недели.")
        return sorted(set(days_of_week), key=_WEEKDAY_ORDER.index), None

    if frequency == HabitFrequency.MONTHLY:
        if not days_of_month:
            raise ValueError("Для ежемесячной привычки выберите хотя бы одно число месяца.")
        return None, sorted(set(days_of_month))

    return None, None


class HabitSchemaBase(BaseSchema):
    """Базовая схема для привычки."""

    title: HabitTitle = Field(..., description="Название привычки")
    description: str | None = Field(None, description="Описание привычки (может отсутствовать)")
    category: HabitCategory = Field(..., description="Категория привычки (например, Health)")
    frequency: HabitFrequency = Field(HabitFrequency.DAILY, description="Частота: daily, weekly или monthly")
    days_of_week: list[WeekdayName] | None = Field(None, description="Дни недели для weekly-привычки")
    days_of_month: list[DayOfMonth] | None = Field(None, description="Числа месяца (1-31) для monthly-привычки")


class HabitSchemaCreate(HabitSchemaBase):
    """Схема для создания новой привычки."""

    # user_id будет взят из JWT токена аутентифицированного пользователя на стороне сервера
    # streak, longest_streak и история выполнений всегда начинаются с нуля

    @model_validator(mode="after")
    def check_recurrence(self) -> "HabitSchemaCreate":
        self.days_of_week, self.days_of_month = normalize_recurrence(
            self.frequency, self.days_of_week, self.days_of_month
        )

        # Пустое описание хранится как NULL
        self.description = self.description or None

        return self


class HabitSchemaUpdate(BaseSchema):
    """
    Схема для обновления существующей привычки.
    Все поля опциональны. Согласованность частоты и наборов дней проверяет сервис
    после слияния с текущими значениями привычки.
    """

    title: HabitTitle | None = Field(None, description="Новое название привычки")
    description: str | None = Field(None, description="Новое описание привычки")
    category: HabitCategory | None = Field(None, description="Новая категория привычки")
    frequency: HabitFrequency | None = Field(None, description="Новая частота")
    days_of_week: list[WeekdayName] | None = Field(None, description="Новые дни недели")
    days_of_month: list[DayOfMonth] | None = Field(None, description="Новые числа месяца")
    # streak, longest_streak и история не обновляются напрямую через API пользователем,
    # они управляются движком стриков

    @model_validator(mode="after")
    def check_required_not_null(self) -> "HabitSchemaUpdate":
        for field_name in ("title", "category", "frequency"):
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"Поле '{field_name}' не может быть пустым.")

        # Пустое описание хранится как NULL. Присваивание помечает поле переданным,
        # поэтому трогаем его, только если клиент сам прислал description
        if "description" in self.model_fields_set:
            self.description = self.description or None

        return self


class HabitSchemaRead(HabitSchemaBase):
    """
    Схема для чтения данных привычки (ответа API).

    Флаги is_due_today и is_completed_today вычисляются при каждом чтении
    по календарю пользователя и не хранятся.
    """

    id: int = Field(..., description="ID привычки")
    user_id: int = Field(..., description="ID пользователя, которому принадлежит привычка")
    streak: int = Field(..., description="Текущая серия последовательных дней с выполнением")
    longest_streak: int = Field(..., description="Максимальная достигнутая серия")
    last_completed_at: datetime | None = Field(None, description="Момент последнего выполнения")
    completion_history: list[datetime] = Field(default_factory=list, description="Моменты выполнений (UTC)")
    is_due_today: bool = Field(False, description="Запланирована ли привычка на сегодня")
    is_completed_today: bool = Field(False, description="Выполнена ли привычка сегодня")
    created_at: datetime = Field(..., description="Время создания привычки")
    updated_at: datetime = Field(..., description="Время последнего обновления привычки")


class MarkCompleteResult(BaseSchema):
    """Результат отметки привычки выполненной."""

    habit: HabitSchemaRead = Field(..., description="Привычка после отметки")
    already_completed: bool = Field(..., description="True, если привычка уже была выполнена сегодня")
    global_streak: StreakSchemaRead = Field(..., description="Глобальный стрик пользователя после отметки")


class TodayStats(BaseSchema):
    """Статистика на сегодня: сколько из запланированных привычек выполнено."""

    completed: int = Field(0, description="Выполнено из запланированных на сегодня")
    total: int = Field(0, description="Запланировано на сегодня")
