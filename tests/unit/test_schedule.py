from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from src.habit_api.models import HabitFrequency
from src.habit_api.utils.date_utils import to_user_date
from src.habit_api.utils.schedule import due_habits, exists_on, is_completed_on, is_completed_today, is_due

BERLIN = ZoneInfo("Europe/Berlin")
MOSCOW = ZoneInfo("Europe/Moscow")
UTC = ZoneInfo("UTC")


def make_habit(frequency=HabitFrequency.DAILY, days_of_week=None, days_of_month=None, history=None):
    return SimpleNamespace(
        frequency=frequency,
        days_of_week=days_of_week,
        days_of_month=days_of_month,
        completion_history=history or [],
    )


def test_daily_habit_is_due_every_day():
    habit = make_habit()
    start = date(2024, 1, 1)

    assert all(is_due(habit, start + timedelta(days=offset)) for offset in range(366))


def test_weekly_habit_due_only_on_selected_weekday():
    habit = make_habit(HabitFrequency.WEEKLY, days_of_week=["Monday"])

    assert is_due(habit, date(2024, 5, 13)) is True  # Понедельник
    assert is_due(habit, date(2024, 5, 14)) is False  # Вторник


def test_weekly_habit_follows_local_calendar_across_dst_for_a_whole_year():
    """Поздний вечер понедельника в Берлине остается понедельником и зимой, и летом."""
    habit = make_habit(HabitFrequency.WEEKLY, days_of_week=["Monday"])
    day = date(2024, 1, 1)
    due_days = []

    while day.year == 2024:
        local_evening = datetime.combine(day, time(23, 30), tzinfo=BERLIN)
        moment_utc = local_evening.astimezone(timezone.utc)

        if is_due(habit, to_user_date(moment_utc, BERLIN)):
            due_days.append(day)

        day += timedelta(days=1)

    # 2024 начинается с понедельника и високосный: 53 понедельника
    assert len(due_days) == 53
    assert all(due_day.weekday() == 0 for due_day in due_days)


def test_monthly_day_missing_in_month_never_occurs():
    habit = make_habit(HabitFrequency.MONTHLY, days_of_month=[31])
    april = [date(2024, 4, 1) + timedelta(days=offset) for offset in range(30)]

    assert not any(is_due(habit, day) for day in april)
    assert is_due(habit, date(2024, 5, 31)) is True


def test_monthly_habit_due_on_selected_days():
    habit = make_habit(HabitFrequency.MONTHLY, days_of_month=[1, 15])

    assert is_due(habit, date(2024, 5, 1)) is True
    assert is_due(habit, date(2024, 5, 15)) is True
    assert is_due(habit, date(2024, 5, 16)) is False


def test_completion_is_attributed_to_user_local_date():
    # 22:30 UTC 15 мая - это уже 01:30 16 мая в Москве
    habit = make_habit(history=["2024-05-15T22:30:00+00:00"])

    assert is_completed_on(habit, date(2024, 5, 16), MOSCOW) is True
    assert is_completed_on(habit, date(2024, 5, 15), MOSCOW) is False
    assert is_completed_on(habit, date(2024, 5, 15), UTC) is True


def test_completed_today_resets_on_next_day_without_writes():
    habit = make_habit(history=["2024-05-15T08:00:00+00:00"])

    assert is_completed_today(habit, date(2024, 5, 15), UTC) is True
    assert is_completed_today(habit, date(2024, 5, 16), UTC) is False


def test_completed_today_is_false_when_habit_not_due():
    # Выполнена во вторник, хотя запланирована только на понедельник
    habit = make_habit(HabitFrequency.WEEKLY, days_of_week=["Monday"], history=["2024-05-14T08:00:00+00:00"])

    assert is_completed_on(habit, date(2024, 5, 14), UTC) is True
    assert is_completed_today(habit, date(2024, 5, 14), UTC) is False


def test_due_habits_filters_by_date():
    daily = make_habit()
    weekly = make_habit(HabitFrequency.WEEKLY, days_of_week=["Friday"])

    assert due_habits([daily, weekly], date(2024, 5, 17)) == [daily, weekly]
    assert due_habits([daily, weekly], date(2024, 5, 16)) == [daily]


def test_habit_exists_from_its_local_creation_day():
    # Наивное время из SQLite считается UTC: 23:30 UTC 14 мая - уже 15 мая в Москве
    habit = SimpleNamespace(created_at=datetime(2024, 5, 14, 23, 30))

    assert exists_on(habit, date(2024, 5, 14), UTC) is True
    assert exists_on(habit, date(2024, 5, 13), UTC) is False
    assert exists_on(habit, date(2024, 5, 14), MOSCOW) is False
    assert exists_on(habit, date(2024, 5, 15), MOSCOW) is True
    # Еще не сохраненная привычка без даты создания
    assert exists_on(make_habit(), date(2000, 1, 1), UTC) is True
