"""Основной файл приложения FastAPI для сервиса стриков привычек.

Отвечает за:
- Создание и конфигурацию экземпляра FastAPI.
- Управление жизненным циклом приложения (подключение к БД).
- Регистрацию роутеров и обработчиков исключений.
- Предоставление эндпоинта для проверки работоспособности (health check).
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.core_shared.sentry_sdk_setup import setup_sentry
from src.habit_api.core.config import settings
from src.habit_api.core.database import db
from src.habit_api.core.dependencies import DBSession
from src.habit_api.core.exceptions import setup_exception_handlers
from src.habit_api.core.logging import api_log as log
from src.habit_api.routes import api_router

# Вызываем инициализацию Sentry, передавая настройки и уровень логирования
if settings.SENTRY_DSN:
    setup_sentry(settings, log_level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # pragma: no cover
    """
    Контекстный менеджер жизненного цикла: подключение к БД при старте и отключение при остановке.

    Args:
        app (FastAPI): Экземпляр приложения FastAPI.
    """
    log.info("Инициализация приложения...")
    try:
        await db.connect()
        yield
    except Exception as exc:
        # Приложение не должно запуститься в нерабочем состоянии
        log.critical(f"Критическая ошибка при старте приложения: {exc}", exc_info=True)
        raise exc
    finally:
        log.info("Остановка приложения...")
        await db.disconnect()
        log.info("Приложение остановлено.")


def create_app() -> FastAPI:
    """
    Создает и конфигурирует экземпляр приложения FastAPI.

    Returns:
        FastAPI: Сконфигурированный экземпляр приложения.
    """
    log.info(f"Создание экземпляра FastAPI для '{settings.PROJECT_NAME}@{settings.API_VERSION}'")
    log.info(f"Режим разработки: {settings.DEVELOPMENT}, Режим продакшена: {settings.PRODUCTION}")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.API_VERSION,
        debug=settings.DEVELOPMENT,
        lifespan=lifespan,
        description="API трекера привычек: расписание, журнал выполнений, стрики и аналитика",
    )

    setup_exception_handlers(app)
    log.info("Обработчики исключений настроены.")

    app.include_router(api_router, prefix="/api")
    app.add_api_route(
        "/healthcheck",
        health_check,
        methods=["GET"],
        tags=["Health Check"],
        summary="Проверка работоспособности сервиса и его зависимостей",
    )

    log.info(f"Приложение '{settings.PROJECT_NAME} {settings.API_VERSION}' сконфигурировано и готово к запуску.")
    return app


async def health_check(response: Response, db_session: DBSession) -> dict[str, Any]:
    """
    Проверяет, что API запущен и имеет доступ к базе данных.

    В случае недоступности базы данных возвращает HTTP статус 503.

    Args:
        response (Response): Объект ответа FastAPI для управления статус-кодом.
        db_session (DBSession): Зависимость, предоставляющая сессию БД.

    Returns:
        dict: Словарь со статусом API и его зависимостей.
    """
    try:
        await db_session.execute(text("SELECT 1"))
        is_db_ok = True
    except (SQLAlchemyError, OSError) as exc:
        log.warning(f"Health check провален: нет подключения к базе данных ({exc}).")
        is_db_ok = False

    if not is_db_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "api_status": "ok",
        "dependencies": {"database": "ok" if is_db_ok else "error"},
    }


# Создаем основной экземпляр приложения
app = create_app()
