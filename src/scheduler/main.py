"""
Главный файл запуска планировщика (Scheduler).

Отвечает за:
- Инициализацию подключения к БД.
- Настройку и запуск Apscheduler.
- Корректное завершение работы (Graceful Shutdown).
"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.core_shared.logging_setup import intercept_standard_logging, setup_logger
from src.core_shared.sentry_sdk_setup import setup_sentry
from src.habit_api.core.database import db
from src.scheduler.config import settings
from src.scheduler.tasks import sync_global_streaks

# Настраиваем логгер
log = setup_logger("SchedulerMain", log_level_override=settings.LOG_LEVEL, log_to_file_override=settings.LOG_TO_FILE)

# Логи самого apscheduler тоже направляем в Loguru
intercept_standard_logging("SchedulerMain")

# Планировщику не нужны веб-интеграции Sentry
if settings.SENTRY_DSN:
    setup_sentry(settings, log_level=settings.LOG_LEVEL, with_web=False)


async def main():
    """Запуск сервиса планировщика."""
    log.info("⏳ Запуск сервиса планировщика (Scheduler Service)...")

    # Инициализируем подключение к базе данных
    try:
        await db.connect()
    except Exception as exc:
        log.critical(f"Не удалось подключиться к БД: {exc}")
        return

    # Настраиваем планировщик (AsyncIOScheduler работает поверх asyncio event loop)
    scheduler = AsyncIOScheduler()

    # Ежечасно: "вчера" у пользователей из разных часовых поясов наступает в разное время
    scheduler.add_job(
        sync_global_streaks,
        trigger=CronTrigger(minute=settings.STREAK_SYNC_MINUTE),
        id="sync_global_streaks_job",
        name="Ежечасная проверка глобальных стриков",
        replace_existing=True,
        max_instances=1,
    )

    try:
        scheduler.start()
        log.info("✅ Планировщик (Scheduler) успешно запущен и работает. Нажмите Ctrl+C для выхода.")

        # Apscheduler работает в фоне, поэтому нужно удерживать event loop
        while True:
            await asyncio.sleep(3600)

    except (KeyboardInterrupt, SystemExit):
        log.info("Получен сигнал остановки (Ctrl+C) планировщика...")

    except Exception as exc:
        log.critical(f"Непредвиденное падение сервиса планировщика: {exc}", exc_info=True)

    finally:
        log.info("🛑 Остановка сервиса планировщика...")

        scheduler.shutdown()
        await db.disconnect()

        log.info("Планировщик (Scheduler) остановлен корректно.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        # Без трейсбека asyncio при Ctrl+C до запуска main
        pass
