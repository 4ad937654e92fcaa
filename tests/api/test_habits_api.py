from typing import Callable

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from src.habit_api.models import Habit, HabitCompletion, User

# Помечаем все тесты в модуле как асинхронные
pytestmark = pytest.mark.asyncio

HABITS_URL = "/api/v1/habits/"


async def create_habit(test_client: AsyncClient, headers: dict[str, str], **overrides) -> dict:
    payload = {"title": "Drink Water", "category": "Health", **overrides}
    response = await test_client.post(HABITS_URL, json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


async def test_create_habit(test_client: AsyncClient, user_auth_headers: dict[str, str], db_session: AsyncSession):
    """Тест создания новой привычки."""
    payload = {"title": "Drink Water", "description": "2 liters per day", "category": "Health"}

    response = await test_client.post(HABITS_URL, json=payload, headers=user_auth_headers)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["title"] == payload["title"]
    assert data["frequency"] == "daily"
    assert data["streak"] == 0
    assert data["longest_streak"] == 0
    assert data["completion_history"] == []
    assert data["is_due_today"] is True
    assert data["is_completed_today"] is False

    # Проверяем в БД
    result = await db_session.execute(select(Habit).where(Habit.title == "Drink Water"))
    assert result.scalar_one_or_none() is not None


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "Gym", "category": "Health", "frequency": "weekly"},
        {"title": "Gym", "category": "Health", "frequency": "weekly", "days_of_week": []},
        {"title": "Gym", "category": "Health", "frequency": "weekly", "days_of_week": ["Funday"]},
        {"title": "Rent", "category": "Money", "frequency": "monthly", "days_of_month": [32]},
        {"title": "Rent", "category": "Money", "frequency": "monthly"},
        {"title": "", "category": "Health"},
        {"title": "   ", "category": "Health"},
        {"title": "Gym", "category": " \t "},
        {"title": "No category"},
        {"title": "Gym", "category": "Health", "frequency": "hourly"},
    ],
)
async def test_create_habit_rejects_invalid_payload(
    test_client: AsyncClient, user_auth_headers: dict[str, str], db_session: AsyncSession, payload: dict
):
    response = await test_client.post(HABITS_URL, json=payload, headers=user_auth_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    # Ничего не записано
    result = await db_session.execute(select(Habit))
    assert result.scalars().all() == []


async def test_create_weekly_habit_normalizes_days(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    data = await create_habit(
        test_client,
        user_auth_headers,
        frequency="weekly",
        days_of_week=["Friday", "Monday", "Friday"],
        days_of_month=[1],
    )

    assert data["days_of_week"] == ["Monday", "Friday"]
    assert data["days_of_month"] is None


async def test_create_habit_requires_token(test_client: AsyncClient):
    response = await test_client.post(HABITS_URL, json={"title": "Read", "category": "Mind"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


async def test_get_habits_list(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    """Тест получения списка привычек (должен быть пуст сначала, потом 1)."""
    response = await test_client.get(HABITS_URL, headers=user_auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []

    await create_habit(test_client, user_auth_headers)

    response = await test_client.get(HABITS_URL, headers=user_auth_headers)
    assert len(response.json()) == 1
    assert response.json()[0]["is_completed_today"] is False


async def test_get_habits_without_token_is_empty(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    await create_habit(test_client, user_auth_headers)

    response = await test_client.get(HABITS_URL)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []


async def test_get_habits_with_invalid_token_is_unauthorized(test_client: AsyncClient):
    response = await test_client.get(HABITS_URL, headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"][0]["type"] == "invalid_token"


async def test_habit_of_another_user_is_forbidden(
    test_client: AsyncClient,
    user_auth_headers: dict[str, str],
    make_user: Callable,
    auth_headers: Callable[[User], dict[str, str]],
):
    habit = await create_habit(test_client, user_auth_headers)
    stranger_headers = auth_headers(await make_user())

    for method in ("get", "patch", "delete"):
        kwargs = {"json": {"title": "Mine now"}} if method == "patch" else {}
        response = await getattr(test_client, method)(
            f"{HABITS_URL}{habit['id']}", headers=stranger_headers, **kwargs
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    response = await test_client.post(f"{HABITS_URL}{habit['id']}/complete", headers=stranger_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


async def test_update_habit(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    habit = await create_habit(test_client, user_auth_headers, description="Morning")

    response = await test_client.patch(
        f"{HABITS_URL}{habit['id']}",
        json={"title": "Drink More Water", "frequency": "monthly", "days_of_month": [10, 1]},
        headers=user_auth_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == "Drink More Water"
    assert data["description"] == "Morning"
    assert data["frequency"] == "monthly"
    assert data["days_of_month"] == [1, 10]


async def test_update_habit_rejects_inconsistent_recurrence(
    test_client: AsyncClient, user_auth_headers: dict[str, str]
):
    habit = await create_habit(test_client, user_auth_headers)
    url = f"{HABITS_URL}{habit['id']}"

    response = await test_client.patch(url, json={"frequency": "weekly"}, headers=user_auth_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"][0]["type"] == "validation_error"

    # Дни недели для ежедневной привычки без смены частоты не применились бы
    response = await test_client.patch(url, json={"days_of_week": ["Friday"]}, headers=user_auth_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"][0]["loc"] == ["body", "days_of_week"]

    for bad_update in ({"title": None}, {"title": "   "}, {"category": "  "}):
        response = await test_client.patch(url, json=bad_update, headers=user_auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    response = await test_client.get(url, headers=user_auth_headers)
    assert response.json()["frequency"] == "daily"
    assert response.json()["title"] == "Drink Water"


async def test_delete_habit(test_client: AsyncClient, user_auth_headers: dict[str, str], db_session: AsyncSession):
    """Тест удаления привычки вместе с журналом."""
    habit = await create_habit(test_client, user_auth_headers)
    await test_client.post(f"{HABITS_URL}{habit['id']}/complete", headers=user_auth_headers)

    delete_response = await test_client.delete(f"{HABITS_URL}{habit['id']}", headers=user_auth_headers)
    assert delete_response.status_code == status.HTTP_204_NO_CONTENT

    get_response = await test_client.get(f"{HABITS_URL}{habit['id']}", headers=user_auth_headers)
    assert get_response.status_code == status.HTTP_404_NOT_FOUND

    result = await db_session.execute(select(HabitCompletion).where(HabitCompletion.habit_id == habit["id"]))
    assert result.scalars().all() == []


async def test_complete_habit(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    habit = await create_habit(test_client, user_auth_headers)
    url = f"{HABITS_URL}{habit['id']}/complete"

    response = await test_client.post(url, headers=user_auth_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["already_completed"] is False
    assert data["habit"]["streak"] == 1
    assert data["habit"]["is_completed_today"] is True
    assert len(data["habit"]["completion_history"]) == 1
    assert data["global_streak"]["current_streak"] == 1
    assert data["global_streak"]["total_habits_completed"] == 1

    # Повторная отметка в тот же день ничего не меняет
    repeat = await test_client.post(url, headers=user_auth_headers)

    assert repeat.status_code == status.HTTP_200_OK
    assert repeat.json()["already_completed"] is True
    assert repeat.json()["habit"]["streak"] == 1
    assert len(repeat.json()["habit"]["completion_history"]) == 1
    assert repeat.json()["global_streak"]["current_streak"] == 1


async def test_complete_missing_habit(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    response = await test_client.post(f"{HABITS_URL}999/complete", headers=user_auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"][0]["type"] == "habit_not_found"


async def test_today_stats(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    first = await create_habit(test_client, user_auth_headers, title="First")
    await create_habit(test_client, user_auth_headers, title="Second")
    await test_client.post(f"{HABITS_URL}{first['id']}/complete", headers=user_auth_headers)

    response = await test_client.get(f"{HABITS_URL}today", headers=user_auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"completed": 1, "total": 2}

    anonymous = await test_client.get(f"{HABITS_URL}today")
    assert anonymous.json() == {"completed": 0, "total": 0}


async def test_habit_completions(test_client: AsyncClient, user_auth_headers: dict[str, str]):
    habit = await create_habit(test_client, user_auth_headers, category="Mind")
    await test_client.post(f"{HABITS_URL}{habit['id']}/complete", headers=user_auth_headers)

    response = await test_client.get(f"{HABITS_URL}{habit['id']}/completions", headers=user_auth_headers)

    assert response.status_code == status.HTTP_200_OK
    entries = response.json()
    assert len(entries) == 1
    assert entries[0]["habit_id"] == habit["id"]
    assert entries[0]["category"] == "Mind"
    assert entries[0]["is_completed"] is True
