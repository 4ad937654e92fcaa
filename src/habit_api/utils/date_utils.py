"""Модуль вспомогательных утилит для работы с датами/таймзонами."""

from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.habit_api.core.config import settings
from src.habit_api.core.logging import api_log as log

if TYPE_CHECKING:  # pragma: no cover
    from src.habit_api.models import User

# Названия дней недели в порядке date.weekday() (0 - понедельник)
WEEKDAY_NAMES: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def utc_now() -> datetime:
    """Часы приложения: текущий момент времени в UTC."""
    return datetime.now(timezone.utc)


def get_user_timezone(user: "User | None") -> ZoneInfo:
    """
    Возвращает часовой пояс пользователя.

    Если пользователь не передан или его часовой пояс некорректен, используется таймзона по умолчанию.

    Args:
        user (User | None): Экземпляр пользователя.

    Returns:
        ZoneInfo: Объект часового пояса IANA.
    """
    # Если поле пустое или None, используем таймзону по умолчанию
    user_timezone_str = (user.timezone if user else None) or settings.DEFAULT_TIMEZONE

    try:
        return ZoneInfo(user_timezone_str)

    except (ZoneInfoNotFoundError, ValueError):
        # Если записана несуществующая таймзона (например, опечатка),
        # не роняем запрос, а логируем проблему и откатываемся к UTC
        log.warning(
            f"Некорректный часовой пояс '{user_timezone_str}' у пользователя ID {getattr(user, 'id', None)}. "
            "Используется UTC."
        )
        return ZoneInfo("UTC")


def to_user_date(moment: datetime, tz: ZoneInfo) -> date:
    """
    Переводит момент времени в календарную дату пользователя.

    Наивные datetime (например, прочитанные из SQLite) считаются моментами в UTC.

    Args:
        moment (datetime): Момент времени.
        tz (ZoneInfo): Часовой пояс пользователя.

    Returns:
        date: Календарный день этого момента в часовом поясе пользователя.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    # astimezone() сохраняет абсолютный момент, но пересчитывает год, месяц, день под смещение таймзоны
    return moment.astimezone(tz).date()


def get_today_date_for_user(user: "User | None", now: datetime | None = None) -> date:
    """
    Вычисляет текущую дату ("сегодня") с учетом часового пояса пользователя.

    Args:
        user (User | None): Экземпляр пользователя.
        now (datetime | None): Момент времени. Если None, берется текущее время.

    Returns:
        date: Объект даты (YYYY-MM-DD), соответствующий "сегодня" для пользователя.
    """
    return to_user_date(now or utc_now(), get_user_timezone(user))


def weekday_name(day: date) -> str:
    """Возвращает английское название дня недели ("Monday" ... "Sunday")."""
    return WEEKDAY_NAMES[day.weekday()]


def previous_day(day: date) -> date:
    """Возвращает предыдущий календарный день."""
    return day - timedelta(days=1)


def parse_instant(value: str | datetime) -> datetime:
    """
    Разбирает момент времени из истории выполнений (ISO-8601) в datetime в UTC.

    Args:
        value (str | datetime): Строка ISO-8601 или datetime.

    Returns:
        datetime: Осведомленный о таймзоне datetime в UTC.
    """
    moment = value if isinstance(value, datetime) else datetime.fromisoformat(value)

    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)

    return moment.astimezone(timezone.utc)


def trailing_days(today: date, days: int) -> list[date]:
    """
    Возвращает последние `days` календарных дней, заканчивая `today` (в хронологическом порядке).

    Например, для окна в 7 дней: [today - 6, ..., today].
    """
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
