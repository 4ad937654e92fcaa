from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.models import HabitCompletion, HabitFrequency
from src.habit_api.services import StreakService

# Фиксированный "сейчас": среда, 15 мая 2024, 12:00 UTC
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)

# Помечаем все тесты в модуле как асинхронные
pytestmark = pytest.mark.asyncio

TODAY = NOW.date()
YESTERDAY = TODAY - timedelta(days=1)


async def add_ledger_entry(db_session: AsyncSession, habit, day) -> None:
    db_session.add(
        HabitCompletion(
            user_id=habit.user_id,
            habit_id=habit.id,
            completion_date=day,
            completed_at=NOW - (TODAY - day),
            is_completed=True,
            category=habit.category,
        )
    )
    await db_session.commit()


async def test_record_is_created_lazily_with_zero_counters(
    db_session: AsyncSession, streak_service: StreakService, test_user
):
    record = await streak_service.get_or_create_record(db_session, user_id=test_user.id)
    again = await streak_service.get_or_create_record(db_session, user_id=test_user.id)

    assert record.id == again.id
    assert record.current_streak == 0
    assert record.longest_streak == 0
    assert record.last_streak_date is None
    assert record.total_habits_completed == 0


async def test_daily_trigger_checks_yesterday(
    db_session: AsyncSession, streak_service: StreakService, test_user, make_habit
):
    habit = await make_habit(test_user)
    await add_ledger_entry(db_session, habit, YESTERDAY)

    record = await streak_service.advance_if_day_complete(db_session, user_id=test_user.id, today=TODAY)

    assert record.current_streak == 1
    assert record.last_streak_date == YESTERDAY
    assert record.total_habits_completed == 1


async def test_each_day_is_counted_once(
    db_session: AsyncSession, streak_service: StreakService, test_user, make_habit
):
    habit = await make_habit(test_user)
    await add_ledger_entry(db_session, habit, YESTERDAY)
    await add_ledger_entry(db_session, habit, TODAY)

    await streak_service.advance_if_day_complete(db_session, user_id=test_user.id, today=TODAY)
    record = await streak_service.advance_if_day_complete(db_session, user_id=test_user.id, today=TODAY)

    assert (record.current_streak, record.total_habits_completed) == (1, 1)

    # Сегодняшний день продолжает серию, повторные проверки ничего не меняют
    for _ in range(2):
        record = await streak_service.advance_if_day_complete(
            db_session, user_id=test_user.id, today=TODAY, evaluated_day=TODAY
        )
    record = await streak_service.advance_if_day_complete(db_session, user_id=test_user.id, today=TODAY)

    assert record.current_streak == 2
    assert record.longest_streak == 2
    assert record.last_streak_date == TODAY
    assert record.total_habits_completed == 2


async def test_habit_created_today_does_not_block_yesterday(
    db_session: AsyncSession, streak_service: StreakService, test_user, make_habit
):
    old_habit = await make_habit(test_user, title="Read")
    await make_habit(test_user, title="Run", created_at=NOW)
    await add_ledger_entry(db_session, old_habit, YESTERDAY)

    record = await streak_service.advance_if_day_complete(db_session, user_id=test_user.id, today=TODAY)

    assert record.current_streak == 1
    assert record.last_streak_date == YESTERDAY
    assert record.total_habits_completed == 1


async def test_habit_created_in_user_timezone_day(
    db_session: AsyncSession, streak_service: StreakService, make_user, make_habit
):
    # 22:00 UTC 14 мая - это уже 15 мая во Владивостоке: для его 14 мая привычки еще не было
    user = await make_user(timezone="Asia/Vladivostok")
    old_habit = await make_habit(user, title="Read")
    await make_habit(user, title="Run", created_at=datetime(2024, 5, 14, 22, 0, tzinfo=timezone.utc))
    await add_ledger_entry(db_session, old_habit, YESTERDAY)

    record = await streak_service.advance_if_day_complete(
        db_session, user_id=user.id, today=TODAY, tz=ZoneInfo("Asia/Vladivostok")
    )

    assert record.current_streak == 1


async def test_no_advance_without_due_habits(
    db_session: AsyncSession, streak_service: StreakService, test_user, make_habit
):
    # Вчера был вторник, а привычка запланирована только на понедельник
    await make_habit(test_user, frequency=HabitFrequency.WEEKLY, days_of_week=["Monday"])

    record = await streak_service.advance_if_day_complete(db_session, user_id=test_user.id, today=TODAY)

    assert record.current_streak == 0
    assert record.last_streak_date is None


async def test_no_advance_when_day_incomplete(
    db_session: AsyncSession, streak_service: StreakService, test_user, make_habit
):
    done = await make_habit(test_user, title="Read")
    await make_habit(test_user, title="Run")
    await add_ledger_entry(db_session, done, YESTERDAY)

    record = await streak_service.advance_if_day_complete(db_session, user_id=test_user.id, today=TODAY)

    assert record.current_streak == 0
    assert record.total_habits_completed == 0


async def test_fetch_streaks_runs_daily_trigger(
    db_session: AsyncSession, streak_service: StreakService, test_user, make_habit
):
    habit = await make_habit(test_user)
    await add_ledger_entry(db_session, habit, YESTERDAY)

    streak = await streak_service.fetch_streaks(db_session, current_user=test_user, now=NOW)

    assert streak.current_streak == 1
    assert streak.last_streak_date == YESTERDAY
