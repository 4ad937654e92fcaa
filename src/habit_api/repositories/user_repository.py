"""Репозиторий для работы с моделью User."""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.logging import api_log as log
from src.habit_api.models import User
from src.habit_api.repositories import BaseRepository
from src.habit_api.schemas import UserSchemaCreate, UserSchemaUpdate


class UserRepository(BaseRepository[User, UserSchemaCreate, UserSchemaUpdate]):
    """
    Репозиторий для выполнения CRUD-операций с моделью User.

    Наследует общие методы от BaseRepository и содержит специфичные для User методы.
    """

    async def get_by_external_id(self, db_session: AsyncSession, *, external_id: str) -> User | None:
        """
        Получает пользователя по его ID у внешнего провайдера аутентификации.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            external_id (str): Уникальный идентификатор пользователя у провайдера.

        Returns:
            User | None: Экземпляр модели User или None, если пользователь не найден.
        """
        user = await self.get_by_filter_first_or_none(db_session, self.model.external_id == external_id)

        status = f"найден (ID: {user.id})" if user else "не найден"
        log.debug(f"Пользователь с внешним ID {external_id} {status}.")

        return user

    async def get_active_users(self, db_session: AsyncSession) -> Sequence[User]:
        """Получает всех активных пользователей (для периодической синхронизации стриков)."""
        return await self.get_multi_by_filter(
            db_session,
            self.model.is_active.is_(True),
            limit=None,
            order_by=[self.model.id.asc()],
        )
