"""
Задачи для планировщика.

Содержит ежедневный триггер глобального стрика: для каждого активного пользователя
проверяется вчерашний день в его часовом поясе.
"""

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core_shared.logging_setup import setup_logger
from src.habit_api.core.database import db
from src.habit_api.models import Habit, HabitCompletion, User, UserStreak
from src.habit_api.repositories import (
    HabitCompletionRepository,
    HabitRepository,
    UserRepository,
    UserStreakRepository,
)
from src.habit_api.services import StreakService
from src.habit_api.utils.date_utils import get_today_date_for_user, get_user_timezone, utc_now
from src.scheduler.config import settings

# Настраиваем логгер
log = setup_logger(
    "SchedulerTasks",
    log_level_override=settings.LOG_LEVEL,
    log_to_file_override=settings.LOG_TO_FILE,
)


def build_streak_service() -> StreakService:
    return StreakService(
        streak_repository=UserStreakRepository(UserStreak),
        habit_repository=HabitRepository(Habit),
        completion_repository=HabitCompletionRepository(HabitCompletion),
    )


async def sync_user_streaks(db_session: AsyncSession, now: datetime | None = None) -> int:
    """
    Выполняет ежедневную проверку глобального стрика для всех активных пользователей.

    Проверка идемпотентна: если вчерашний день пользователя уже засчитан, ничего не меняется.
    Ошибка хранилища у одного пользователя откатывается и не прерывает обработку остальных.

    Args:
        db_session (AsyncSession): Асинхронная сессия базы данных.
        now (datetime | None): Момент запуска. Если None, берется текущее время.

    Returns:
        int: Количество пользователей, у которых стрик продвинулся.
    """
    now = now or utc_now()
    streak_service = build_streak_service()

    users = await UserRepository(User).get_active_users(db_session)

    # Снимаем нужные поля заранее: откат транзакции сбрасывает состояние объектов сессии
    targets = [(user.id, get_user_timezone(user), get_today_date_for_user(user, now)) for user in users]

    advanced = 0

    for user_id, tz, today in targets:
        try:
            record = await streak_service.get_or_create_record(db_session, user_id=user_id)
            previous_date = record.last_streak_date

            record = await streak_service.advance_if_day_complete(db_session, user_id=user_id, today=today, tz=tz)

            if record.last_streak_date != previous_date:
                advanced += 1

        except SQLAlchemyError as exc:
            await db_session.rollback()
            log.error(f"Ошибка синхронизации стрика пользователя ID {user_id}: {exc}", exc_info=True)

    log.info(f"Синхронизация стриков: пользователей {len(targets)}, продвинуто {advanced}.")
    return advanced


async def sync_global_streaks() -> None:
    """Периодическая задача: открывает сессию и запускает синхронизацию стриков."""
    log.info("🔍 Запуск синхронизации глобальных стриков...")

    async with db.session() as session:
        try:
            await sync_user_streaks(session)

        except Exception as exc:
            # Глобальная ошибка в задаче (например, отвал БД)
            log.error(f"💥 Критическая ошибка в задаче sync_global_streaks: {exc}", exc_info=True)
