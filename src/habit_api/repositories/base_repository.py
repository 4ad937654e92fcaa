"""Базовый репозиторий с общими CRUD-операциями."""

from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.logging import api_log as log
from src.habit_api.models import Base as SQLAlchemyBaseModel

ModelType = TypeVar("ModelType", bound=SQLAlchemyBaseModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Базовый класс репозитория для асинхронных CRUD-операций.

    Репозиторий только готовит запросы и изменения в сессии (add/flush).
    Фиксацией транзакций (commit/rollback) управляют сервисы.

    Attributes:
        model: Класс модели SQLAlchemy, с которым работает репозиторий.
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    def _select(self, *filters: ColumnElement[bool]) -> Select[tuple[ModelType]]:
        """Запрос по модели с условиями, объединенными через AND."""
        statement = select(self.model)
        return statement.where(*filters) if filters else statement

    async def get_by_id(self, db_session: AsyncSession, *, obj_id: int) -> ModelType | None:
        """
        Получает запись по первичному ключу.

        Returns:
            ModelType | None: Экземпляр модели или None, если записи нет.
        """
        result = await db_session.execute(self._select(self.model.id == obj_id))
        instance = result.scalar_one_or_none()

        log.debug(f"{self.model.__name__} ID {obj_id}: {'найден' if instance else 'не найден'}.")
        return instance

    async def get_by_filter_first_or_none(
        self, db_session: AsyncSession, *filters: ColumnElement[bool]
    ) -> ModelType | None:
        """Первая запись, удовлетворяющая фильтрам, или None."""
        result = await db_session.execute(self._select(*filters).limit(1))
        return result.scalar_one_or_none()

    async def get_multi_by_filter(
        self,
        db_session: AsyncSession,
        *filters: ColumnElement[bool],
        skip: int = 0,
        limit: int | None = 100,
        order_by: list[ColumnElement[Any]] | None = None,
    ) -> Sequence[ModelType]:
        """
        Получает список записей по фильтрам с пагинацией.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            *filters (ColumnElement[bool]): Критерии фильтрации SQLAlchemy.
            skip (int): Сколько записей пропустить.
            limit (int | None): Максимум записей (None - без ограничения).
            order_by (list[ColumnElement[Any]] | None): Сортировка.

        Returns:
            Sequence[ModelType]: Список экземпляров модели.
        """
        statement = self._select(*filters)

        if order_by:
            statement = statement.order_by(*order_by)

        statement = statement.offset(skip)

        if limit is not None:
            statement = statement.limit(limit)

        result = await db_session.execute(statement)
        return result.scalars().all()

    async def create(self, db_session: AsyncSession, *, obj_in: CreateSchemaType | dict[str, Any]) -> ModelType:
        """
        Добавляет новую запись в сессию и получает значения, сгенерированные БД (ID, created_at).

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            obj_in (CreateSchemaType | dict[str, Any]): Схема или словарь с данными.

        Returns:
            ModelType: Созданный экземпляр модели.
        """
        values = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**values)

        db_session.add(db_obj)
        await db_session.flush()
        await db_session.refresh(db_obj)

        log.debug(f"{self.model.__name__} (ID: {db_obj.id}) добавлен в сессию.")
        return db_obj

    async def update(
        self,
        db_session: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | dict[str, Any],
    ) -> ModelType:
        """
        Применяет изменения к существующей записи.

        Схема применяется частично (exclude_unset), словарь целиком.
        Ключи, которых нет у модели, пропускаются с предупреждением.
        """
        changes = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)

        for field, value in changes.items():
            if not hasattr(self.model, field):
                log.warning(f"{self.model.__name__} ID {db_obj.id}: неизвестное поле '{field}' пропущено.")
                continue
            setattr(db_obj, field, value)

        db_session.add(db_obj)
        await db_session.flush()
        # updated_at обновляется на стороне БД
        await db_session.refresh(db_obj)

        log.debug(f"{self.model.__name__} ID {db_obj.id} обновлен в сессии ({', '.join(changes) or 'без изменений'}).")
        return db_obj

    async def remove(self, db_session: AsyncSession, *, db_obj: ModelType) -> None:
        """Удаляет запись в рамках текущей транзакции."""
        await db_session.delete(db_obj)
        await db_session.flush()
