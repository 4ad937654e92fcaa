from typing import AsyncGenerator

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from starlette import status

from src.habit_api.core.database import get_db_session
from src.habit_api.main import app

# Помечаем все тесты в модуле как асинхронные
pytestmark = pytest.mark.asyncio


async def test_health_check_returns_ok(test_client: AsyncClient):
    """Проверяет, что эндпоинт /healthcheck возвращает 200 OK и сообщает о доступности базы данных."""
    response = await test_client.get("/healthcheck")

    assert response.status_code == status.HTTP_200_OK

    response_json = response.json()
    assert response_json["api_status"] == "ok"
    assert response_json["dependencies"]["database"] == "ok"


async def test_health_check_reports_unavailable_database(test_client: AsyncClient):
    """Без доступа к базе данных /healthcheck отвечает 503, но сам API жив."""

    class UnavailableSession:
        async def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def override_get_db_session() -> AsyncGenerator[UnavailableSession, None]:
        yield UnavailableSession()

    app.dependency_overrides[get_db_session] = override_get_db_session

    response = await test_client.get("/healthcheck")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {"api_status": "ok", "dependencies": {"database": "error"}}
