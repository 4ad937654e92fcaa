"""
Исключения приложения и их обработчики FastAPI.

Все бизнес-ошибки наследуются от AppException и превращаются в ответ вида:
{"detail": [{"type": ..., "msg": ..., "loc": [...]}]}.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .logging import api_log as log


class AppException(Exception):
    """
    Базовое исключение приложения.

    Attributes:
        message: Человекочитаемое описание ошибки.
        error_type: Машиночитаемый тип ошибки.
        status_code: HTTP статус ответа.
        loc: Место возникновения ошибки (по аналогии с ошибками валидации FastAPI).
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_error_type: str = "app_error"

    def __init__(
        self,
        message: str = "Внутренняя ошибка приложения.",
        error_type: str | None = None,
        loc: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type or self.default_error_type
        self.loc = loc or []

    def to_detail(self) -> list[dict[str, Any]]:
        return [{"type": self.error_type, "msg": self.message, "loc": self.loc}]


class BadRequestException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_error_type = "bad_request"


class UnauthorizedException(AppException):
    """Нет контекста пользователя (NotAuthenticated) или токен невалиден."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_error_type = "not_authenticated"


class ForbiddenException(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    default_error_type = "forbidden"


class NotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    default_error_type = "not_found"


class AlreadyCompletedException(AppException):
    """
    Привычка уже отмечена выполненной на эту дату.

    Это не сбой, а распознанный no-op: журнал выполнений не изменяется.
    """

    status_code = status.HTTP_409_CONFLICT
    default_error_type = "already_completed"


class ValidationException(AppException):
    """Ошибка бизнес-валидации, обнаруженная до любых изменений данных."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_error_type = "validation_error"


async def app_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Преобразует AppException в JSON ответ."""
    assert isinstance(exc, AppException)

    log.debug(f"{exc.__class__.__name__} на {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


async def persistence_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Обрабатывает ошибки хранилища (PersistenceError), пробрасываемые путями изменения данных.

    Клиент получает 503, чтобы показать пользователю предложение повторить попытку.
    """
    log.error(f"Ошибка хранилища на {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": [
                {
                    "type": "persistence_error",
                    "msg": "Хранилище данных временно недоступно. Повторите попытку.",
                    "loc": [],
                }
            ]
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Регистрирует обработчики исключений приложения.

    Args:
        app (FastAPI): Экземпляр приложения.
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_exception_handler)
