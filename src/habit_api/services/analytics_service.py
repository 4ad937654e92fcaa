"""Сервис аналитики выполнений привычек."""

from collections import defaultdict
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.config import settings
from src.habit_api.core.logging import api_log as log
from src.habit_api.models import User
from src.habit_api.repositories import HabitCompletionRepository, HabitRepository, UserStreakRepository
from src.habit_api.schemas import AnalyticsSummarySchema, CategoryShareSchema, RhythmDaySchema
from src.habit_api.utils.analytics import (
    category_distribution,
    completion_rate,
    count_in_window,
    most_frequent_weekday,
    most_productive_hour,
    motivation_tier,
)
from src.habit_api.utils.date_utils import get_user_timezone, to_user_date, trailing_days, utc_now, weekday_name
from src.habit_api.utils.motivation import MotivationTier, get_motivational_message
from src.habit_api.utils.streaks import evaluate_day


def empty_summary() -> AnalyticsSummarySchema:
    """Нулевая сводка (нет пользователя или хранилище недоступно)."""
    return AnalyticsSummarySchema(
        motivation_tier=MotivationTier.STARTER,
        motivational_message=get_motivational_message(MotivationTier.STARTER),
    )


class AnalyticsService:
    """
    Сервис аналитики.

    Только читает данные: журнал выполнений, привычки и запись глобального стрика.
    Запись стрика здесь не создается и не продвигается.
    """

    def __init__(
        self,
        completion_repository: HabitCompletionRepository,
        habit_repository: HabitRepository,
        streak_repository: UserStreakRepository,
    ):
        self.completion_repository = completion_repository
        self.habit_repository = habit_repository
        self.streak_repository = streak_repository

    async def get_summary(
        self,
        db_session: AsyncSession,
        *,
        current_user: User | None,
        now: datetime | None = None,
    ) -> AnalyticsSummarySchema:
        """
        Собирает сводку аналитики пользователя.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            current_user (User | None): Пользователь. Без пользователя возвращается нулевая сводка.
            now (datetime | None): Момент времени. Если None, берется текущее время.

        Returns:
            AnalyticsSummarySchema: Сводка (при ошибке хранилища нулевая).
        """
        if current_user is None:
            return empty_summary()

        user_id = current_user.id
        tz = get_user_timezone(current_user)
        today = to_user_date(now or utc_now(), tz)

        try:
            entries = await self.completion_repository.get_completions_for_user(
                db_session, user_id=user_id, is_completed=True, limit=None
            )
            habits = await self.habit_repository.get_habits_by_user_id(db_session, user_id=user_id)
            record = await self.streak_repository.get_by_user_id(db_session, user_id=user_id)

        except SQLAlchemyError as exc:
            await db_session.rollback()
            log.error(f"Ошибка хранилища при сборе аналитики пользователя ID {user_id}: {exc}", exc_info=True)
            return empty_summary()

        completed_by_day: dict[date, set[int]] = defaultdict(set)
        for entry in entries:
            completed_by_day[entry.completion_date].add(entry.habit_id)

        rhythm = []
        for day in trailing_days(today, settings.COMPLETION_RATE_WINDOW_DAYS):
            evaluation = evaluate_day(habits, completed_by_day.get(day, set()), day, tz)
            rhythm.append(
                RhythmDaySchema(
                    day=day,
                    weekday=weekday_name(day),
                    due=evaluation.due_count,
                    completed=evaluation.completed_count,
                )
            )

        rate = completion_rate([item.completed for item in rhythm], [item.due for item in rhythm])
        current_streak = record.current_streak if record else 0
        tier = motivation_tier(current_streak, rate)

        log.debug(f"Аналитика пользователя ID {user_id}: {len(entries)} выполнений, {rate}% за окно, уровень {tier}.")

        return AnalyticsSummarySchema(
            total_completions=len(entries),
            completions_last_7_days=count_in_window(entries, today, 7),
            completions_last_30_days=count_in_window(entries, today, 30),
            category_distribution=[CategoryShareSchema(**item) for item in category_distribution(entries)],
            most_frequent_weekday=most_frequent_weekday(entries),
            most_productive_hour=most_productive_hour(entries, tz),
            weekly_rhythm=rhythm,
            completion_rate=rate,
            current_streak=current_streak,
            longest_streak=record.longest_streak if record else 0,
            total_habits_completed=record.total_habits_completed if record else 0,
            motivation_tier=tier,
            motivational_message=get_motivational_message(tier),
        )
