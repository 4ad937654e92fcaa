"""
Эндпоинты для работы с профилем пользователя.
"""

from fastapi import APIRouter, status

from src.habit_api.core.dependencies import CurrentUser, DBSession, UserSvc
from src.habit_api.models import User
from src.habit_api.schemas import UserSchemaRead, UserSchemaUpdate

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=UserSchemaRead,
    status_code=status.HTTP_200_OK,
    summary="Получение информации о текущем пользователе",
)
async def read_users_me(current_user: CurrentUser) -> User:
    return current_user


@router.patch(
    "/me",
    response_model=UserSchemaRead,
    status_code=status.HTTP_200_OK,
    summary="Обновление профиля текущего пользователя",
    description="Позволяет изменить отображаемое имя и часовой пояс (от него зависит, какой день считается сегодня).",
)
async def update_user_me(
    db_session: DBSession,
    current_user: CurrentUser,
    user_service: UserSvc,
    user_update_data: UserSchemaUpdate,
) -> User:
    return await user_service.update_user(db_session, current_user=current_user, user_in=user_update_data)
