"""Конфигурация планировщика."""

from pydantic import Field

from src.core_shared.config import AppSettings


class Settings(AppSettings):
    """
    Основные настройки планировщика.

    Подключение к БД берется из настроек API, здесь только параметры расписания.
    """

    # Минута каждого часа, в которую запускается проверка глобальных стриков.
    # Полночь у пользователей наступает в разное время, поэтому задача запускается ежечасно.
    STREAK_SYNC_MINUTE: int = Field(default=5, ge=0, le=59, description="Минута запуска синхронизации стриков")


# Создаем глобальный экземпляр настроек
settings = Settings()
