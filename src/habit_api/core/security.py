"""
Утилиты для работы с JWT токенами пользователей.

Аутентификация как таковая вне зоны ответственности сервиса: токен лишь переносит
внутренний ID пользователя между внешним провайдером и API. Используется библиотека PyJWT.
"""

from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from pydantic import ValidationError

from src.habit_api.core.config import settings
from src.habit_api.core.exceptions import UnauthorizedException
from src.habit_api.core.logging import api_log as log
from src.habit_api.schemas.auth_schema import TokenPayload


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Создает JWT токен доступа для пользователя.

    Args:
        user_id (int): Внутренний ID пользователя.
        expires_delta (timedelta | None): Время жизни токена. Если None, используется значение из настроек.

    Returns:
        str: Сгенерированный JWT токен.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    # 'exp' должно быть Unix timestamp (int)
    payload = {"user_id": user_id, "exp": int(expire.timestamp())}

    log.debug(f"Создание JWT токена для пользователя ID {user_id}, истекает {expire.isoformat()}")

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_and_decode_token(token: str) -> TokenPayload:
    """
    Проверяет и декодирует JWT токен, возвращая его payload.

    Args:
        token (str): JWT токен для проверки.

    Returns:
        TokenPayload: Pydantic модель с данными из payload токена.

    Raises:
        UnauthorizedException: Если токен невалиден, истек или payload некорректен.
    """
    try:
        # PyJWT автоматически проверяет подпись и срок действия (exp)
        payload_dict = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        token_payload = TokenPayload(**payload_dict)

    except ExpiredSignatureError:
        log.warning("Срок действия JWT токена истек.")
        raise UnauthorizedException(message="Срок действия токена истек.", error_type="token_expired") from None

    except InvalidTokenError as exc:
        # PyJWT выбрасывает InvalidTokenError для неверных подписей, форматов и т.д.
        log.warning(f"Невалидный токен: {exc}")
        raise UnauthorizedException(message="Невалидный токен.", error_type="invalid_token") from exc

    except ValidationError as exc:
        log.warning(f"Ошибка валидации payload токена: {exc.errors()}")
        raise UnauthorizedException(
            message="Некорректные данные в токене.", error_type="invalid_token_payload"
        ) from exc

    return token_payload
