"""Репозиторий для работы с журналом выполнений (модель HabitCompletion)."""

from datetime import date
from typing import Sequence

from pydantic import BaseModel
from sqlalchemy import ColumnElement, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.logging import api_log as log
from src.habit_api.models import HabitCompletion
from src.habit_api.repositories import BaseRepository


class HabitCompletionRepository(BaseRepository[HabitCompletion, BaseModel, BaseModel]):
    """
    Репозиторий журнала выполнений.

    Журнал только дополняется: методов изменения записей нет.
    """

    async def get_by_habit_and_date(
        self, db_session: AsyncSession, *, habit_id: int, completion_date: date
    ) -> HabitCompletion | None:
        """
        Получает запись журнала по ID привычки и календарному дню.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            habit_id (int): ID привычки.
            completion_date (date): Календарный день пользователя.

        Returns:
            HabitCompletion | None: Запись журнала или None.
        """
        log.debug(f"Поиск записи журнала для привычки ID: {habit_id} на дату: {completion_date}")
        return await self.get_by_filter_first_or_none(
            db_session,
            self.model.habit_id == habit_id,
            self.model.completion_date == completion_date,
        )

    async def get_completed_habit_ids_for_date(
        self, db_session: AsyncSession, *, user_id: int, completion_date: date
    ) -> set[int]:
        """
        Возвращает множество ID привычек пользователя, выполненных в указанный день.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            user_id (int): ID пользователя.
            completion_date (date): Календарный день пользователя.

        Returns:
            set[int]: Множество ID привычек.
        """
        statement = select(self.model.habit_id).where(
            self.model.user_id == user_id,
            self.model.completion_date == completion_date,
            self.model.is_completed.is_(True),
        )
        result = await db_session.execute(statement)

        # Преобразуем в множество ID (set) для быстрого поиска
        habit_ids = set(result.scalars().all())

        log.debug(f"Пользователь ID {user_id}: выполнено {len(habit_ids)} привычек на {completion_date}.")
        return habit_ids

    async def get_completions_for_user(
        self,
        db_session: AsyncSession,
        *,
        user_id: int,
        habit_id: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        is_completed: bool | None = None,
        skip: int = 0,
        limit: int | None = 100,
    ) -> Sequence[HabitCompletion]:
        """
        Получает записи журнала пользователя с фильтрами, от новых к старым.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            user_id (int): ID пользователя.
            habit_id (int | None): Опциональный фильтр по привычке.
            start_date (date | None): Начальная дата (включительно).
            end_date (date | None): Конечная дата (включительно).
            is_completed (bool | None): Опциональный фильтр по флагу выполнения.
            skip (int): Количество записей для пропуска.
            limit (int | None): Максимальное количество записей (None - все).

        Returns:
            Sequence[HabitCompletion]: Записи журнала.
        """
        filters: list[ColumnElement[bool]] = [self.model.user_id == user_id]

        if habit_id is not None:
            filters.append(self.model.habit_id == habit_id)
        if start_date is not None:
            filters.append(self.model.completion_date >= start_date)
        if end_date is not None:
            filters.append(self.model.completion_date <= end_date)
        if is_completed is not None:
            filters.append(self.model.is_completed.is_(is_completed))

        completions = await self.get_multi_by_filter(
            db_session,
            *filters,
            skip=skip,
            limit=limit,
            order_by=[self.model.completion_date.desc(), self.model.completed_at.desc(), self.model.id.desc()],
        )

        log.debug(f"Найдено {len(completions)} записей журнала для пользователя ID: {user_id}.")
        return completions

    async def delete_by_habit_id(self, db_session: AsyncSession, *, habit_id: int) -> int:
        """
        Удаляет все записи журнала привычки (без фиксации транзакции).

        Returns:
            int: Количество удаленных записей.
        """
        result = await db_session.execute(delete(self.model).where(self.model.habit_id == habit_id))
        log.debug(f"Удалено {result.rowcount} записей журнала привычки ID: {habit_id}.")
        return result.rowcount
