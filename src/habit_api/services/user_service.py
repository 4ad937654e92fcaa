"""Сервис для работы с пользователями."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.logging import api_log as log
from src.habit_api.models import User
from src.habit_api.repositories import UserRepository
from src.habit_api.schemas import UserSchemaCreate, UserSchemaUpdate

from .base_service import BaseService


class UserService(BaseService[User, UserRepository, UserSchemaCreate, UserSchemaUpdate]):
    """
    Сервис для управления пользователями.

    Пользователи приходят от внешнего провайдера аутентификации и хранят
    только то, что нужно для календаря (часовой пояс).
    """

    def __init__(self, user_repository: UserRepository):
        """
        Инициализирует сервис для репозитория UserRepository.

        Args:
            user_repository (UserRepository): Репозиторий для работы с пользователями.
        """
        super().__init__(repository=user_repository)

    async def get_or_create_user(self, db_session: AsyncSession, *, user_in: UserSchemaCreate) -> User:
        """
        Получает существующего пользователя по внешнему ID или создает нового, если он не найден.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            user_in (UserSchemaCreate): Данные пользователя для поиска или создания.

        Returns:
            User: Существующий или созданный пользователь.
        """
        existing_user = await self.repository.get_by_external_id(db_session, external_id=user_in.external_id)

        if existing_user:
            return existing_user

        try:
            return await super().create(db_session, obj_in=user_in)  # Родительский метод .create() делает коммит

        # Обрабатываем Race Conditions
        # Если попадаем сюда, значит пользователь с таким external_id был создан параллельным запросом
        except IntegrityError:
            log.warning(
                f"Race condition при создании пользователя {user_in.external_id}. "
                "Получаем пользователя, созданного параллельным запросом."
            )

            user = await self.repository.get_by_external_id(db_session, external_id=user_in.external_id)

            if not user:
                raise RuntimeError(
                    f"Пользователь {user_in.external_id} существует (IntegrityError), но не найден."
                ) from None

            return user

    async def update_user(self, db_session: AsyncSession, *, current_user: User, user_in: UserSchemaUpdate) -> User:
        """
        Обновляет профиль пользователя (имя, часовой пояс).

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            current_user (User): Аутентифицированный пользователь.
            user_in (UserSchemaUpdate): Данные для обновления.

        Returns:
            User: Обновленный пользователь.
        """
        log.info(f"Обновление профиля пользователя ID: {current_user.id}")
        return await super().update(db_session, db_obj=current_user, obj_in=user_in)
