from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.models import HabitCompletion, UserStreak
from src.habit_api.services import HabitService
from src.scheduler.tasks import sync_user_streaks

# Фиксированный "сейчас": среда, 15 мая 2024, 12:00 UTC
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)
YESTERDAY = NOW.date() - timedelta(days=1)

# Помечаем все тесты в модуле как асинхронные
pytestmark = pytest.mark.asyncio


async def complete_yesterday(db_session: AsyncSession, habit) -> None:
    db_session.add(
        HabitCompletion(
            user_id=habit.user_id,
            habit_id=habit.id,
            completion_date=YESTERDAY,
            completed_at=NOW - timedelta(days=1),
            is_completed=True,
            category=habit.category,
        )
    )
    await db_session.commit()


async def get_record(db_session: AsyncSession, user_id: int) -> UserStreak | None:
    result = await db_session.execute(select(UserStreak).where(UserStreak.user_id == user_id))
    return result.scalar_one_or_none()


async def test_sync_advances_only_users_with_complete_yesterday(
    db_session: AsyncSession, make_user, make_habit
):
    diligent = await make_user()
    lazy = await make_user()
    inactive = await make_user(is_active=False)
    diligent_id, lazy_id, inactive_id = diligent.id, lazy.id, inactive.id

    await complete_yesterday(db_session, await make_habit(diligent))
    await make_habit(lazy)
    await complete_yesterday(db_session, await make_habit(inactive))

    advanced = await sync_user_streaks(db_session, now=NOW)

    assert advanced == 1

    diligent_record = await get_record(db_session, diligent_id)
    assert diligent_record.current_streak == 1
    assert diligent_record.last_streak_date == YESTERDAY

    lazy_record = await get_record(db_session, lazy_id)
    assert lazy_record.current_streak == 0

    assert await get_record(db_session, inactive_id) is None


async def test_sync_is_idempotent(db_session: AsyncSession, make_user, make_habit):
    user = await make_user()
    user_id = user.id
    await complete_yesterday(db_session, await make_habit(user))

    assert await sync_user_streaks(db_session, now=NOW) == 1
    assert await sync_user_streaks(db_session, now=NOW) == 0

    record = await get_record(db_session, user_id)
    assert record.current_streak == 1
    assert record.total_habits_completed == 1


async def test_sync_does_not_recount_day_already_counted_on_completion(
    db_session: AsyncSession, habit_service: HabitService, make_user, make_habit
):
    user = await make_user()
    user_id = user.id
    habit = await make_habit(user)

    # Вчерашний день засчитан еще при отметке выполнения
    await habit_service.mark_habit_complete(
        db_session, habit_id=habit.id, current_user=user, now=NOW - timedelta(days=1)
    )

    assert await sync_user_streaks(db_session, now=NOW) == 0
    assert await sync_user_streaks(db_session, now=NOW + timedelta(days=1)) == 0

    record = await get_record(db_session, user_id)
    assert record.current_streak == 1
    assert record.longest_streak == 1
    assert record.last_streak_date == YESTERDAY
    assert record.total_habits_completed == 1
