from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.database import get_db_session
from src.habit_api.core.security import create_access_token
from src.habit_api.main import app
from src.habit_api.models import User

# --- ФИКСТУРЫ, СПЕЦИФИЧНЫЕ ДЛЯ ТЕСТИРОВАНИЯ API ---


@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Создает и предоставляет тестовый клиент FastAPI для каждого API-теста.

    Зависит от фикстуры `db_session` (в корневом conftest.py)
    для переопределения зависимости get_db_session.
    """

    # Функция для переопределения зависимости `get_db_session` в приложении
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    del app.dependency_overrides[get_db_session]


@pytest.fixture(scope="function")
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Фабрика заголовков авторизации (JWT) для произвольного пользователя."""

    def factory(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id=user.id)}"}

    return factory


@pytest.fixture(scope="function")
def user_auth_headers(test_user: User, auth_headers: Callable[[User], dict[str, str]]) -> dict[str, str]:
    """Заголовки авторизации для `test_user`."""
    return auth_headers(test_user)
