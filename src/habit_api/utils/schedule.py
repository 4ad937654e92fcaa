"""
Вычислитель расписания привычек.

Чистые функции без побочных эффектов: решают, запланирована ли привычка на дату
и выполнена ли она в этот день. Пригодны для любых прошлых и будущих дат.
"""

from datetime import date
from typing import Protocol, Sequence
from zoneinfo import ZoneInfo

from src.habit_api.models import HabitFrequency

from .date_utils import parse_instant, to_user_date, weekday_name


class SchedulableHabit(Protocol):
    """Минимальный набор полей привычки, нужный вычислителю расписания."""

    frequency: HabitFrequency | str
    days_of_week: list[str] | None
    days_of_month: list[int] | None
    completion_history: list[str] | None


def is_due(habit: SchedulableHabit, on_date: date) -> bool:
    """
    Проверяет, запланирована ли привычка на указанную дату.

    Дата уже должна быть в календаре пользователя: день недели и число месяца берутся из нее самой.
    Для monthly-привычек несуществующее в месяце число (например, 31 в апреле) просто не наступает.

    Args:
        habit (SchedulableHabit): Привычка.
        on_date (date): Календарная дата пользователя.

    Returns:
        bool: True, если привычку нужно выполнить в этот день.
    """
    if habit.frequency == HabitFrequency.DAILY:
        return True

    if habit.frequency == HabitFrequency.WEEKLY:
        return weekday_name(on_date) in (habit.days_of_week or ())

    if habit.frequency == HabitFrequency.MONTHLY:
        return on_date.day in (habit.days_of_month or ())

    return False


def exists_on(habit: SchedulableHabit, on_date: date, tz: ZoneInfo) -> bool:
    """
    Проверяет, существовала ли привычка в `on_date` (создана в этот день или раньше).

    Привычка без даты создания (еще не сохранена) считается существующей всегда.
    """
    created_at = getattr(habit, "created_at", None)

    if created_at is None:
        return True

    return to_user_date(created_at, tz) <= on_date


def completion_dates(habit: SchedulableHabit, tz: ZoneInfo) -> list[date]:
    """Переводит историю выполнений привычки в календарные даты пользователя (в порядке истории)."""
    return [to_user_date(parse_instant(moment), tz) for moment in habit.completion_history or ()]


def is_completed_on(habit: SchedulableHabit, on_date: date, tz: ZoneInfo) -> bool:
    """Проверяет, есть ли в истории выполнений момент, приходящийся на `on_date` в часовом поясе `tz`."""
    return on_date in completion_dates(habit, tz)


def is_completed_today(habit: SchedulableHabit, today: date, tz: ZoneInfo) -> bool:
    """
    Вычисляет флаг "выполнено сегодня".

    Флаг не хранится: вчерашнее значение сегодня недействительно, поэтому он пересчитывается
    при каждом чтении из правила повторения и истории выполнений.

    Args:
        habit (SchedulableHabit): Привычка.
        today (date): "Сегодня" в календаре пользователя.
        tz (ZoneInfo): Часовой пояс пользователя.

    Returns:
        bool: True, если привычка запланирована на сегодня и сегодня уже выполнена.
    """
    return is_due(habit, today) and is_completed_on(habit, today, tz)


def due_habits(habits: Sequence[SchedulableHabit], on_date: date) -> list[SchedulableHabit]:
    """Отбирает привычки, запланированные на `on_date`."""
    return [habit for habit in habits if is_due(habit, on_date)]
