"""Подключение к базе данных: движок SQLAlchemy, фабрика сессий и зависимость FastAPI."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import settings
from .logging import api_log as log


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    Включает проверку внешних ключей для каждого нового соединения SQLite.

    Без PRAGMA foreign_keys SQLite не выполняет ON DELETE CASCADE, и записи журнала
    и стрика переживают удаление пользователя.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Создает фабрику сессий для движка.

    Объекты не истекают после commit: сервисы возвращают их в ответ API уже после фиксации.
    Flush выполняется явно в репозиториях.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


class Database:
    """
    Менеджер подключения к хранилищу привычек, журнала выполнений и стриков.

    Один экземпляр на процесс (API или планировщик): `connect` при старте,
    `session()` на каждую единицу работы, `disconnect` при остановке.
    """

    def __init__(self) -> None:
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None

    async def connect(self, database_url: str | None = None, **kwargs: Any) -> None:
        """
        Создает движок и проверяет подключение.

        Args:
            database_url: URL базы данных. Если не передан, используется `DATABASE_URL` из настроек.
            **kwargs: Дополнительные параметры для create_async_engine.

        Raises:
            RuntimeError: При неудачной проверке подключения.
        """
        url = make_url(database_url or settings.DATABASE_URL)
        is_sqlite = url.get_backend_name() == "sqlite"

        # Пул с проверкой соединений нужен только сетевой БД
        if not is_sqlite:
            kwargs.setdefault("pool_pre_ping", True)

        self.engine = create_async_engine(url, echo=settings.DEVELOPMENT, **kwargs)

        if is_sqlite:
            enable_sqlite_foreign_keys(self.engine)

        self.session_factory = create_session_factory(self.engine)

        await self._verify_connection()
        log.success(f"Подключение к базе данных установлено ({url.get_backend_name()}).")

    async def disconnect(self) -> None:
        """Закрывает пул соединений."""
        if self.engine is None:
            return

        log.info("Закрытие подключения к базе данных...")
        await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        log.info("Подключение к базе данных закрыто.")

    async def _verify_connection(self) -> None:
        """
        Выполняет пробный запрос.

        Raises:
            RuntimeError: Если БД недоступна.
        """
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))

        except Exception as exc:
            log.critical(f"Ошибка подключения к базе данных: {exc}", exc_info=True)
            raise RuntimeError("Не удалось проверить подключение к БД.") from exc

        log.debug("Проверка подключения к БД прошла успешно.")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Открывает сессию БД и гарантированно закрывает ее.

        Незафиксированные изменения откатываются, если внутри блока возникла ошибка.

        Yields:
            AsyncSession: Экземпляр сессии БД.

        Raises:
            RuntimeError: При вызове до `await db.connect()`.
        """
        if self.session_factory is None:
            raise RuntimeError(
                "База данных не инициализирована. Вызовите `await db.connect()` перед использованием сессий."
            )

        async with self.session_factory() as session:
            try:
                yield session

            except Exception as exc:
                # Трейсбек только в DEVELOPMENT
                log.error(f"Ошибка во время сессии БД, выполняется откат: {exc}", exc_info=settings.DEVELOPMENT)
                await session.rollback()
                raise


# Глобальный экземпляр менеджера БД
db = Database()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Зависимость FastAPI: сессия БД на время запроса.

    Yields:
        AsyncSession: Сессия базы данных, управляемая через `db.session()`.
    """
    async with db.session() as session:
        yield session
