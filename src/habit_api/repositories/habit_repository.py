"""Репозиторий для работы с моделью Habit."""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.logging import api_log as log
from src.habit_api.models import Habit
from src.habit_api.repositories import BaseRepository
from src.habit_api.schemas import HabitSchemaCreate, HabitSchemaUpdate


class HabitRepository(BaseRepository[Habit, HabitSchemaCreate, HabitSchemaUpdate]):
    """Репозиторий привычек: создание с нулевым стриком, выборка с блокировкой строки, список пользователя."""

    async def create_habit(self, db_session: AsyncSession, *, habit_in: HabitSchemaCreate, user_id: int) -> Habit:
        """
        Создает привычку пользователя с нулевым стриком и пустой историей выполнений.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            habit_in (HabitSchemaCreate): Проверенные данные привычки.
            user_id (int): ID владельца.

        Returns:
            Habit: Созданная привычка.
        """
        values = habit_in.model_dump() | {
            "user_id": user_id,
            "streak": 0,
            "longest_streak": 0,
            "last_completed_at": None,
            "completion_history": [],
        }
        return await self.create(db_session, obj_in=values)

    async def get_habit_by_id_for_update(self, db_session: AsyncSession, *, habit_id: int) -> Habit | None:
        """
        Получает привычку с блокировкой строки до конца транзакции (SELECT ... FOR UPDATE).

        Две одновременные отметки одной привычки выполняются по очереди.
        """
        result = await db_session.execute(self._select(self.model.id == habit_id).with_for_update())
        habit = result.scalar_one_or_none()

        log.debug(f"Привычка ID {habit_id} для обновления: {'найдена' if habit else 'не найдена'}.")
        return habit

    async def get_habits_by_user_id(
        self,
        db_session: AsyncSession,
        *,
        user_id: int,
        skip: int = 0,
        limit: int | None = None,
    ) -> Sequence[Habit]:
        """
        Получает привычки пользователя в порядке создания.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            user_id (int): ID пользователя.
            skip (int): Количество записей для пропуска.
            limit (int | None): Максимальное количество записей (None - все привычки).

        Returns:
            Sequence[Habit]: Привычки пользователя.
        """
        habits = await self.get_multi_by_filter(
            db_session,
            self.model.user_id == user_id,
            skip=skip,
            limit=limit,
            order_by=[self.model.created_at.asc(), self.model.id.asc()],
        )

        log.debug(f"Найдено {len(habits)} привычек для пользователя ID: {user_id}.")
        return habits
