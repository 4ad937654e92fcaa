"""
Базовый класс для сервисов.

Сервис представляет собой "единицу работы (Unit of Work)": репозиторий готовит изменения
в сессии, а сервис фиксирует транзакцию или откатывает ее при ошибке.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, TypeVar, cast

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.exceptions import NotFoundException
from src.habit_api.core.logging import api_log as log
from src.habit_api.models import Base as SQLAlchemyBaseModel
from src.habit_api.repositories import BaseRepository

ModelType = TypeVar("ModelType", bound=SQLAlchemyBaseModel)
RepositoryType = TypeVar("RepositoryType", bound=BaseRepository)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseService(Generic[ModelType, RepositoryType, CreateSchemaType, UpdateSchemaType]):
    """
    Базовый сервис: поиск по ID с 404 и операции записи, каждая в своей транзакции.

    Attributes:
        repository (RepositoryType): Репозиторий модели.
    """

    def __init__(self, repository: RepositoryType):
        self.repository = repository

    @property
    def model_name(self) -> str:
        return self.repository.model.__name__

    @asynccontextmanager
    async def _transaction(self, db_session: AsyncSession, action: str) -> AsyncIterator[None]:
        """
        Фиксирует изменения, сделанные внутри блока, или откатывает их при любой ошибке.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            action (str): Описание операции для лога ошибки.
        """
        try:
            yield
            await db_session.commit()

        except Exception as exc:
            await db_session.rollback()
            log.error(f"Ошибка при операции '{action}' ({self.model_name}): {exc}", exc_info=True)
            raise

    async def get_by_id(self, db_session: AsyncSession, *, obj_id: int) -> ModelType:
        """
        Получает объект по ID.

        Raises:
            NotFoundException: Если объект с указанным ID не найден.
        """
        db_obj = await self.repository.get_by_id(db_session, obj_id=obj_id)

        if db_obj is None:
            raise NotFoundException(
                message=f"{self.model_name} с ID {obj_id} не найден.",
                error_type=f"{self.model_name.lower()}_not_found",
            )

        return cast(ModelType, db_obj)

    async def create(self, db_session: AsyncSession, *, obj_in: CreateSchemaType | dict[str, Any]) -> ModelType:
        """
        Создает объект и фиксирует транзакцию.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            obj_in (CreateSchemaType | dict[str, Any]): Данные для создания.

        Returns:
            ModelType: Созданный объект.
        """
        async with self._transaction(db_session, "создание"):
            db_obj = await self.repository.create(db_session, obj_in=obj_in)

        log.info(f"{self.model_name} (ID: {db_obj.id}) создан.")
        return cast(ModelType, db_obj)

    async def update(
        self,
        db_session: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | dict[str, Any],
    ) -> ModelType:
        """
        Применяет частичное обновление и фиксирует транзакцию.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            db_obj (ModelType): Объект для обновления.
            obj_in (UpdateSchemaType | dict[str, Any]): Данные для обновления (только переданные поля).

        Returns:
            ModelType: Обновленный объект.
        """
        # После отката объект истекает, поэтому ID сохраняем заранее
        obj_id = db_obj.id

        async with self._transaction(db_session, f"обновление ID {obj_id}"):
            updated_obj = await self.repository.update(db_session, db_obj=db_obj, obj_in=obj_in)

        log.info(f"{self.model_name} (ID: {obj_id}) обновлен.")
        return cast(ModelType, updated_obj)

    async def delete(self, db_session: AsyncSession, *, db_obj: ModelType) -> None:
        """Удаляет объект и фиксирует транзакцию."""
        obj_id = db_obj.id

        async with self._transaction(db_session, f"удаление ID {obj_id}"):
            await self.repository.remove(db_session, db_obj=db_obj)

        log.info(f"{self.model_name} (ID: {obj_id}) удален.")
