"""
Эндпоинты для аутентификации.

Предоставляет маршрут для получения JWT токена пользователя по его внешнему ID.
Этот эндпоинт предназначен для вызова доверенным провайдером аутентификации.
"""

from fastapi import APIRouter, Depends, status

from src.habit_api.core.dependencies import DBSession, UserSvc, verify_service_api_key
from src.habit_api.core.exceptions import BadRequestException
from src.habit_api.core.logging import api_log as log
from src.habit_api.core.security import create_access_token
from src.habit_api.schemas.auth_schema import ServiceLoginRequest, Token
from src.habit_api.schemas.user_schema import UserSchemaCreate

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    dependencies=[Depends(verify_service_api_key)],  # Защищаем все эндпоинты в этом роутере ключом сервиса
)


@router.post(
    "/token",
    response_model=Token,
    status_code=status.HTTP_200_OK,
    summary="Получение JWT токена для пользователя",
    description=(
        "Провайдер аутентификации отправляет внешний ID пользователя (и, при желании, имя и часовой пояс). "
        "Сервис находит или создает пользователя в БД и возвращает JWT токен доступа."
    ),
)
async def login_for_access_token(
    request_data: ServiceLoginRequest,
    db_session: DBSession,
    user_service: UserSvc,
) -> Token:
    """
    Выдает JWT токен для пользователя.

    Args:
        request_data: Данные пользователя от провайдера.
        db_session: Асинхронная сессия базы данных.
        user_service: Сервис пользователей.

    Returns:
        Token: Объект с JWT токеном доступа.

    Raises:
        BadRequestException: Если пользователь неактивен.
    """
    log.info(f"Запрос на токен для внешнего ID: {request_data.external_id}")

    user_create_schema = UserSchemaCreate(
        external_id=request_data.external_id,
        username=request_data.username,
        timezone=request_data.timezone or "UTC",  # Если пришло None, то по умолчанию "UTC"
    )

    user = await user_service.get_or_create_user(db_session, user_in=user_create_schema)

    if not user.is_active:
        log.warning(f"Попытка входа неактивного пользователя: внешний ID {user.external_id}")
        raise BadRequestException(message="Пользователь неактивен и не может войти.", error_type="user_inactive")

    access_token = create_access_token(user_id=user.id)
    log.info(f"Токен успешно создан для пользователя ID: {user.id}")

    return Token(access_token=access_token, token_type="bearer")  # noqa: S106
