"""Зависимости FastAPI: сессия БД, репозитории, сервисы, аутентификация."""

from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.models import Habit, HabitCompletion, User, UserStreak
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
    UserService,
)

from .config import settings
from .database import get_db_session
from .exceptions import ForbiddenException, UnauthorizedException
from .logging import api_log as log
from .security import verify_and_decode_token

# --- Типизация для инъекции зависимостей ---

# Сессия базы данных
DBSession = Annotated[AsyncSession, Depends(get_db_session)]


# --- Фабрики Репозиториев ---


def get_habit_repository() -> HabitRepository:
    return HabitRepository(Habit)


def get_completion_repository() -> HabitCompletionRepository:
    return HabitCompletionRepository(HabitCompletion)


def get_user_streak_repository() -> UserStreakRepository:
    return UserStreakRepository(UserStreak)


def get_user_repository() -> UserRepository:
    return UserRepository(User)


# Типизация для репозиториев
HabitRepo = Annotated[HabitRepository, Depends(get_habit_repository)]
CompletionRepo = Annotated[HabitCompletionRepository, Depends(get_completion_repository)]
UserStreakRepo = Annotated[UserStreakRepository, Depends(get_user_streak_repository)]
UserRepo = Annotated[UserRepository, Depends(get_user_repository)]


# --- Фабрики Сервисов ---


def get_completion_service(repository: CompletionRepo) -> CompletionService:
    return CompletionService(completion_repository=repository)


def get_streak_service(
    repository: UserStreakRepo,
    habit_repository: HabitRepo,
    completion_repository: CompletionRepo,
) -> StreakService:
    return StreakService(
        streak_repository=repository,
        habit_repository=habit_repository,
        completion_repository=completion_repository,
    )


CompletionSvc = Annotated[CompletionService, Depends(get_completion_service)]
StreakSvc = Annotated[StreakService, Depends(get_streak_service)]


# HabitService собирает цепочку отметки выполнения: журнал -> привычка -> глобальный стрик
def get_habit_service(
    repository: HabitRepo,
    completion_repository: CompletionRepo,
    completion_service: CompletionSvc,
    streak_service: StreakSvc,
) -> HabitService:
    return HabitService(
        habit_repository=repository,
        completion_repository=completion_repository,
        completion_service=completion_service,
        streak_service=streak_service,
    )


def get_analytics_service(
    completion_repository: CompletionRepo,
    habit_repository: HabitRepo,
    streak_repository: UserStreakRepo,
) -> AnalyticsService:
    return AnalyticsService(
        completion_repository=completion_repository,
        habit_repository=habit_repository,
        streak_repository=streak_repository,
    )


def get_user_service(repository: UserRepo) -> UserService:
    return UserService(user_repository=repository)


# Типизация для сервисов
HabitSvc = Annotated[HabitService, Depends(get_habit_service)]
AnalyticsSvc = Annotated[AnalyticsService, Depends(get_analytics_service)]
UserSvc = Annotated[UserService, Depends(get_user_service)]


# --- Зависимость для доверенного сервиса (провайдера аутентификации) ---

api_key_header_auth = APIKeyHeader(name="X-SERVICE-API-KEY", auto_error=False)


async def verify_service_api_key(
    api_key: str | None = Security(api_key_header_auth),
) -> bool:
    """
    Проверяет API-ключ доверенного сервиса.

    Используется для защиты эндпоинтов, к которым обращается только провайдер
    аутентификации (выдача JWT пользователя).

    Args:
        api_key (str | None): API-ключ из заголовка X-SERVICE-API-KEY.

    Returns:
        bool: True, если ключ валиден.

    Raises:
        ForbiddenException: Если ключ отсутствует или невалиден.
    """
    if not api_key:
        log.warning("Попытка доступа к защищенному эндпоинту без X-SERVICE-API-KEY.")
        raise ForbiddenException(message="API ключ сервиса отсутствует.", error_type="service_api_key_missing")

    if api_key != settings.SERVICE_API_KEY:
        log.warning("Попытка доступа к защищенному эндпоинту с неверным X-SERVICE-API-KEY.")
        raise ForbiddenException(message="Неверный API ключ сервиса.", error_type="service_api_key_invalid")

    return True


ServiceAPIKeyAuth = Annotated[bool, Depends(verify_service_api_key)]


# --- Зависимость для получения текущего пользователя ---

# Схема для JWT Bearer токена
bearer_schema = HTTPBearer(auto_error=False)


async def _resolve_user(db_session: AsyncSession, user_repo: UserRepository, token: str) -> User:
    """
    Находит активного пользователя по JWT токену.

    Raises:
        UnauthorizedException: Если токен невалиден или пользователь не найден.
        ForbiddenException: Если пользователь неактивен.
    """
    # UnauthorizedException будет выброшен из verify_and_decode_token в случае проблем
    token_payload = verify_and_decode_token(token)

    user = await user_repo.get_by_id(db_session, obj_id=token_payload.user_id)

    if user is None:
        log.warning(f"Пользователь с ID {token_payload.user_id} из токена не найден в БД.")
        raise UnauthorizedException(message="Пользователь не найден.", error_type="token_user_not_found")

    if not user.is_active:
        log.warning(f"Пользователь ID {user.id} неактивен, доступ запрещен.")
        raise ForbiddenException(message="Пользователь неактивен.", error_type="user_inactive")

    log.debug(f"Аутентифицирован пользователь: ID {user.id}, внешний ID {user.external_id}")
    return user


async def get_current_user(
    db_session: DBSession,
    user_repo: UserRepo,
    token_credentials: HTTPAuthorizationCredentials | None = Security(bearer_schema),
) -> User:
    """
    Получает текущего аутентифицированного пользователя на основе JWT токена.

    Args:
        db_session (AsyncSession): Асинхронная сессия базы данных.
        user_repo (UserRepo): Экземпляр репозитория пользователей.
        token_credentials (HTTPAuthorizationCredentials | None): Учетные данные из заголовка Authorization.

    Returns:
        User: Экземпляр модели текущего пользователя.

    Raises:
        UnauthorizedException: Если токен отсутствует, невалиден или пользователь не найден.
    """
    if token_credentials is None or not token_credentials.credentials:
        log.debug("Отсутствует токен авторизации.")
        raise UnauthorizedException(message="Токен авторизации не предоставлен.")

    return await _resolve_user(db_session, user_repo, token_credentials.credentials)


async def get_optional_user(
    db_session: DBSession,
    user_repo: UserRepo,
    token_credentials: HTTPAuthorizationCredentials | None = Security(bearer_schema),
) -> User | None:
    """
    Получает текущего пользователя, если токен передан, иначе None.

    Пути чтения (список привычек, стрики, аналитика) без пользователя возвращают пустые данные.
    Переданный, но невалидный токен по-прежнему приводит к 401.
    """
    if token_credentials is None or not token_credentials.credentials:
        return None

    return await _resolve_user(db_session, user_repo, token_credentials.credentials)


# --- Типизация для инъекции текущего пользователя ---
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
