"""
Чистые функции аналитики по журналу выполнений.

Функции принимают уже загруженные записи журнала и ничего не читают из хранилища.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, Protocol, Sequence
from zoneinfo import ZoneInfo

from .date_utils import parse_instant, weekday_name
from .motivation import MotivationTier


class CompletionEntry(Protocol):
    """Поля записи журнала, используемые аналитикой."""

    habit_id: int
    completion_date: date
    completed_at: datetime
    category: str


def count_in_window(entries: Iterable[CompletionEntry], today: date, days: int) -> int:
    """Считает записи журнала за последние `days` дней, включая `today`."""
    window_start = today - timedelta(days=days - 1)
    return sum(1 for entry in entries if window_start <= entry.completion_date <= today)


def category_distribution(entries: Sequence[CompletionEntry]) -> list[dict[str, object]]:
    """
    Распределение выполнений по категориям.

    Returns:
        list[dict]: Элементы {"category", "count", "percentage"} по убыванию количества;
                    процент округлен до одного знака.
    """
    total = len(entries)

    if total == 0:
        return []

    counts = Counter(entry.category for entry in entries)

    return [
        {"category": category, "count": count, "percentage": round(count / total * 100, 1)}
        for category, count in counts.most_common()
    ]


def most_frequent_weekday(entries: Iterable[CompletionEntry]) -> str | None:
    """
    День недели, в который выполнений больше всего.

    При равенстве побеждает день, встреченный первым в порядке записей.
    """
    # Counter сохраняет порядок вставки, а most_common использует устойчивую сортировку
    counts = Counter(weekday_name(entry.completion_date) for entry in entries)
    top = counts.most_common(1)
    return top[0][0] if top else None


def most_productive_hour(entries: Iterable[CompletionEntry], tz: ZoneInfo) -> int | None:
    """Час суток (0-23, по времени пользователя), в который выполнений больше всего."""
    counts = Counter(parse_instant(entry.completed_at).astimezone(tz).hour for entry in entries)
    top = counts.most_common(1)
    return top[0][0] if top else None


def completion_rate(completed_counts: Iterable[int], due_counts: Iterable[int]) -> float:
    """
    Процент выполнения за окно: сумма выполненных / сумма запланированных * 100.

    Returns:
        float: Процент с одним знаком после запятой; 0.0, если ничего не было запланировано.
    """
    due_total = sum(due_counts)

    if due_total == 0:
        return 0.0

    return round(sum(completed_counts) / due_total * 100, 1)


def motivation_tier(current_streak: int, rate: float) -> MotivationTier:
    """
    Классифицирует пользователя по глобальному стрику и проценту выполнения.

    Args:
        current_streak (int): Текущий глобальный стрик.
        rate (float): Процент выполнения (0-100).

    Returns:
        MotivationTier: champion, consistent, building или starter.
    """
    if current_streak >= 21 and rate >= 85:
        return MotivationTier.CHAMPION

    if current_streak >= 7 and rate >= 70:
        return MotivationTier.CONSISTENT

    if current_streak >= 3 or rate >= 50:
        return MotivationTier.BUILDING

    return MotivationTier.STARTER
