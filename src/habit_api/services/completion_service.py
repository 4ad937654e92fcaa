"""Сервис журнала выполнений привычек."""

from datetime import date, datetime
from typing import Sequence

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.exceptions import AlreadyCompletedException
from src.habit_api.core.logging import api_log as log
from src.habit_api.models import Habit, HabitCompletion, User
from src.habit_api.repositories import HabitCompletionRepository
from src.habit_api.utils.date_utils import parse_instant

from .base_service import BaseService


class CompletionService(BaseService[HabitCompletion, HabitCompletionRepository, BaseModel, BaseModel]):
    """
    Сервис журнала выполнений.

    Журнал только дополняется и хранит не более одной записи на привычку в календарный день:
    проверка перед вставкой плюс уникальное ограничение в БД на случай гонки.
    """

    def __init__(self, completion_repository: HabitCompletionRepository):
        """
        Инициализирует сервис журнала.

        Args:
            completion_repository (HabitCompletionRepository): Репозиторий журнала выполнений.
        """
        super().__init__(repository=completion_repository)

    async def record_completion(
        self,
        db_session: AsyncSession,
        *,
        user_id: int,
        habit: Habit,
        completion_date: date,
        completed_at: datetime,
    ) -> HabitCompletion:
        """
        Добавляет запись в журнал выполнений.

        Транзакцию не фиксирует: это делает вызывающий сервис вместе с обновлением привычки.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            user_id (int): ID пользователя.
            habit (Habit): Выполненная привычка (категория копируется в запись).
            completion_date (date): Календарный день пользователя.
            completed_at (datetime): Момент выполнения.

        Returns:
            HabitCompletion: Новая запись журнала.

        Raises:
            AlreadyCompletedException: Если запись на этот день уже есть (журнал не изменяется).
        """
        existing = await self.repository.get_by_habit_and_date(
            db_session, habit_id=habit.id, completion_date=completion_date
        )

        if existing:
            log.info(f"Привычка ID {habit.id} уже есть в журнале на {completion_date} (запись ID {existing.id}).")
            raise AlreadyCompletedException(
                message=f"Привычка уже отмечена выполненной {completion_date.isoformat()}.",
            )

        try:
            completion = await self.repository.create(
                db_session,
                obj_in={
                    "user_id": user_id,
                    "habit_id": habit.id,
                    "completion_date": completion_date,
                    "completed_at": parse_instant(completed_at),
                    "is_completed": True,
                    "category": habit.category,
                },
            )

        # Обрабатываем Race Conditions
        # Если попадаем сюда, значит запись на этот день вставила параллельная транзакция
        except IntegrityError:
            await db_session.rollback()

            log.warning(f"Race condition при записи выполнения привычки ID {habit.id} на {completion_date}.")
            raise AlreadyCompletedException(
                message=f"Привычка уже отмечена выполненной {completion_date.isoformat()}.",
            ) from None

        log.info(f"Запись журнала ID {completion.id}: привычка ID {habit.id} выполнена {completion_date}.")
        return completion

    async def list_completions(
        self,
        db_session: AsyncSession,
        *,
        current_user: User | None,
        habit_id: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        is_completed: bool | None = None,
        skip: int = 0,
        limit: int | None = 100,
    ) -> Sequence[HabitCompletion]:
        """
        Получает записи журнала пользователя с фильтрами (от новых к старым).

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            current_user (User | None): Пользователь. Без пользователя возвращается пустой список.
            habit_id (int | None): Фильтр по привычке.
            start_date (date | None): Начальная дата (включительно).
            end_date (date | None): Конечная дата (включительно).
            is_completed (bool | None): Фильтр по флагу выполнения.
            skip (int): Количество записей для пропуска.
            limit (int | None): Максимальное количество записей.

        Returns:
            Sequence[HabitCompletion]: Записи журнала.
        """
        if current_user is None:
            return []

        return await self.repository.get_completions_for_user(
            db_session,
            user_id=current_user.id,
            habit_id=habit_id,
            start_date=start_date,
            end_date=end_date,
            is_completed=is_completed,
            skip=skip,
            limit=limit,
        )
