from datetime import datetime, timezone
from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.habit_api.core.config import settings
from src.habit_api.core.database import create_session_factory, enable_sqlite_foreign_keys
from src.habit_api.models import Base, Habit, HabitCompletion, HabitFrequency, User, UserStreak
from src.habit_api.repositories import (
    HabitCompletionRepository,
    HabitRepository,
    UserRepository,
    UserStreakRepository,
)
from src.habit_api.services import (
    AnalyticsService,
    CompletionService,
    HabitService,
    StreakService,
)

# База данных в памяти: у каждого теста своя, поэтому тесты полностью изолированы
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Привычки фабрики существуют задолго до фиксированных моментов времени в тестах
HABITS_CREATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


# --- ФИКСТУРА БЕЗОПАСНОСТИ ---


@pytest.fixture(scope="session", autouse=True)
def verify_test_environment():
    """
    Проверяет, что тесты запускаются с корректными настройками окружения.

    Эта фикстура выполняется автоматически перед началом тестовой сессии.
    """
    assert settings.DEVELOPMENT is True, (
        "❌ ОШИБКА КОНФИГУРАЦИИ: Тесты должны запускаться в режиме разработки/тестирования (DEVELOPMENT=True). "
        "Проверьте настройки [tool.pytest.ini_options] в pyproject.toml"
    )


# --- ГЛОБАЛЬНЫЕ ФИКСТУРЫ ДЛЯ ВСЕГО ПРОЕКТА ---


@pytest_asyncio.fixture(scope="function")
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Создает движок SQLAlchemy над чистой базой в памяти и создает в ней все таблицы."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,  # Одно соединение на всю базу в памяти
        connect_args={"check_same_thread": False},
    )

    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def db_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Фабрика сессий с теми же параметрами, что и в приложении."""
    return create_session_factory(async_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(db_session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Предоставляет сессию БД для теста. Используется тестами API, сервисов и планировщика."""
    async with db_session_factory() as session:
        yield session


# --- ФАБРИКИ ДАННЫХ ---

UserFactory = Callable[..., Awaitable[User]]
HabitFactory = Callable[..., Awaitable[Habit]]


@pytest.fixture(scope="function")
def make_user(db_session: AsyncSession) -> UserFactory:
    """Фабрика пользователей."""
    counter = {"value": 0}

    async def factory(timezone: str = "UTC", is_active: bool = True, username: str | None = None) -> User:
        counter["value"] += 1
        user = User(
            external_id=f"external-{counter['value']}",
            username=username or f"user_{counter['value']}",
            timezone=timezone,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return factory


@pytest.fixture(scope="function")
def make_habit(db_session: AsyncSession) -> HabitFactory:
    """Фабрика привычек с нулевым состоянием стрика."""

    async def factory(
        user: User,
        title: str = "Drink Water",
        category: str = "Health",
        frequency: HabitFrequency = HabitFrequency.DAILY,
        days_of_week: list[str] | None = None,
        days_of_month: list[int] | None = None,
        created_at: datetime = HABITS_CREATED_AT,
    ) -> Habit:
        habit = Habit(
            created_at=created_at,
            user_id=user.id,
            title=title,
            category=category,
            frequency=frequency,
            days_of_week=days_of_week,
            days_of_month=days_of_month,
            streak=0,
            longest_streak=0,
            completion_history=[],
        )
        db_session.add(habit)
        await db_session.commit()
        await db_session.refresh(habit)
        return habit

    return factory


@pytest_asyncio.fixture(scope="function")
async def test_user(make_user: UserFactory) -> User:
    return await make_user()


# --- СЕРВИСЫ ---


@pytest.fixture(scope="function")
def streak_service() -> StreakService:
    return StreakService(
        streak_repository=UserStreakRepository(UserStreak),
        habit_repository=HabitRepository(Habit),
        completion_repository=HabitCompletionRepository(HabitCompletion),
    )


@pytest.fixture(scope="function")
def completion_service() -> CompletionService:
    return CompletionService(completion_repository=HabitCompletionRepository(HabitCompletion))


@pytest.fixture(scope="function")
def habit_service(completion_service: CompletionService, streak_service: StreakService) -> HabitService:
    return HabitService(
        habit_repository=HabitRepository(Habit),
        completion_repository=HabitCompletionRepository(HabitCompletion),
        completion_service=completion_service,
        streak_service=streak_service,
    )


@pytest.fixture(scope="function")
def analytics_service() -> AnalyticsService:
    return AnalyticsService(
        completion_repository=HabitCompletionRepository(HabitCompletion),
        habit_repository=HabitRepository(Habit),
        streak_repository=UserStreakRepository(UserStreak),
    )


@pytest.fixture(scope="function")
def user_repository() -> UserRepository:
    return UserRepository(User)
