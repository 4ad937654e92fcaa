"""
Правила подсчета стриков.

Здесь только чистая арифметика над уже загруженными данными: переходы стрика привычки
и глобального стрика пользователя. Чтение и запись в хранилище выполняют сервисы.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Protocol
from zoneinfo import ZoneInfo

from src.habit_api.core.logging import api_log as log

from .date_utils import parse_instant, previous_day, to_user_date
from .schedule import SchedulableHabit, completion_dates, exists_on, is_due

UTC = ZoneInfo("UTC")


class StreakHabit(SchedulableHabit, Protocol):
    """Привычка с производным состоянием стрика."""

    id: int
    streak: int
    longest_streak: int
    last_completed_at: datetime | None
    created_at: datetime | None


class GlobalStreakRecord(Protocol):
    """Запись глобального стрика пользователя."""

    current_streak: int
    longest_streak: int
    last_streak_date: date | None
    total_habits_completed: int


@dataclass(frozen=True)
class DayEvaluation:
    """Итог проверки дня: все ли запланированные привычки выполнены."""

    day: date
    due_count: int
    completed_count: int

    @property
    def is_complete(self) -> bool:
        # Пустой набор запланированных привычек не считается выполненным днем
        return self.due_count > 0 and self.completed_count == self.due_count


def next_habit_streak(current_streak: int, last_completed_on: date | None, today: date) -> int:
    """
    Вычисляет новый стрик привычки при выполнении в `today`.

    Стрик считает подряд идущие календарные дни с выполнением для любых правил повторения.

    Args:
        current_streak (int): Текущий стрик.
        last_completed_on (date | None): Календарный день последнего выполнения.
        today (date): Календарный день текущего выполнения.

    Returns:
        int: current_streak + 1, если последнее выполнение было вчера, иначе 1.
    """
    if last_completed_on is not None and last_completed_on == previous_day(today):
        return current_streak + 1

    return 1


def apply_completion(habit: StreakHabit, now: datetime, tz: ZoneInfo) -> StreakHabit:
    """
    Применяет выполнение привычки в момент `now` к ее производному состоянию.

    Если на сегодняшнюю дату в истории уже есть выполнение, ничего не меняет.
    Если `now` раньше последнего момента в истории (сбитые часы), тоже ничего не меняет,
    чтобы история оставалась неубывающей.

    Args:
        habit (StreakHabit): Привычка (изменяется на месте).
        now (datetime): Момент выполнения.
        tz (ZoneInfo): Часовой пояс пользователя.

    Returns:
        StreakHabit: Та же привычка с обновленными streak, longest_streak, историей и last_completed_at.
    """
    now_utc = parse_instant(now)
    today = to_user_date(now_utc, tz)
    history = list(habit.completion_history or [])

    if today in completion_dates(habit, tz):
        log.debug(f"Привычка ID {habit.id} уже выполнена {today}, стрик не меняется.")
        return habit

    if history and parse_instant(history[-1]) > now_utc:
        log.warning(
            f"Момент выполнения {now_utc.isoformat()} раньше последнего в истории привычки ID {habit.id}. "
            "Выполнение не применено."
        )
        return habit

    last_completed_on = to_user_date(habit.last_completed_at, tz) if habit.last_completed_at else None
    new_streak = next_habit_streak(habit.streak or 0, last_completed_on, today)

    habit.streak = new_streak
    habit.longest_streak = max(habit.longest_streak or 0, new_streak)
    # Присваиваем новый список, чтобы SQLAlchemy заметил изменение JSON поля
    habit.completion_history = [*history, now_utc.isoformat()]
    habit.last_completed_at = now_utc

    log.debug(f"Стрик привычки ID {habit.id}: {new_streak} (рекорд {habit.longest_streak}).")
    return habit


def evaluate_day(
    habits: Iterable[StreakHabit],
    completed_habit_ids: set[int],
    day: date,
    tz: ZoneInfo = UTC,
) -> DayEvaluation:
    """
    Проверяет, выполнены ли в `day` все запланированные на этот день привычки.

    Привычки, созданные после `day`, в этот день не были запланированы.
    Дубликаты привычек (по ID) схлопываются, лишние ID в `completed_habit_ids` игнорируются.

    Args:
        habits (Iterable[StreakHabit]): Привычки пользователя.
        completed_habit_ids (set[int]): ID привычек, имеющих запись в журнале на `day`.
        day (date): Проверяемый календарный день.
        tz (ZoneInfo): Часовой пояс пользователя (для даты создания привычки).

    Returns:
        DayEvaluation: Количество запланированных и выполненных из них привычек.
    """
    due_ids = {habit.id for habit in habits if exists_on(habit, day, tz) and is_due(habit, day)}

    return DayEvaluation(
        day=day,
        due_count=len(due_ids),
        completed_count=len(due_ids & completed_habit_ids),
    )


def next_global_streak(record: GlobalStreakRecord, day: date, completed_count: int) -> dict[str, object] | None:
    """
    Вычисляет новое состояние глобального стрика после полностью выполненного дня.

    `last_streak_date` всегда хранит последний засчитанный день, поэтому один и тот же день
    не засчитывается дважды, какой бы триггер его ни проверил.

    Args:
        record (GlobalStreakRecord): Текущая запись глобального стрика.
        day (date): Полностью выполненный день.
        completed_count (int): Количество выполненных привычек в этом дне.

    Returns:
        dict | None: Новые значения полей записи или None, если день уже засчитан
                     или раньше последнего засчитанного.
    """
    last_streak_date = record.last_streak_date

    if last_streak_date is not None and last_streak_date >= day:
        return None

    if last_streak_date == previous_day(day):
        current_streak = (record.current_streak or 0) + 1
    else:
        # Первый раз или был пропуск: разрыв обнаруживается лениво, здесь
        current_streak = 1

    return {
        "current_streak": current_streak,
        "longest_streak": max(record.longest_streak or 0, current_streak),
        "last_streak_date": day,
        "total_habits_completed": (record.total_habits_completed or 0) + completed_count,
    }
