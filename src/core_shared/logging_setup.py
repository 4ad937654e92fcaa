"""Настройка логирования Loguru, общая для API, планировщика и миграций."""

import logging
import os
import sys
from typing import TYPE_CHECKING

from loguru import logger as global_loguru_logger
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from loguru import Logger


class LogConfig(BaseModel):
    """Параметры обработчиков Loguru."""

    level: str = Field(default="INFO", description="Уровень логирования")
    format: str = Field(
        default=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[service_name]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        ),
        description="Формат строки лога",
    )
    rotation: str = Field(default="10 MB", description="Размер файла, после которого начинается новый")
    retention: str = Field(default="7 days", description="Сколько хранить старые файлы")
    serialize: bool = Field(default=False, description="Писать логи в JSON")
    enable_file_logging: bool = Field(default=True, description="Дублировать логи в файл")
    log_file_path: str = Field(
        default="logs/{service_name}_{time:YYYY-MM-DD}.log",
        description="Шаблон пути к файлу логов",
    )


def _log_directory(file_path: str) -> str:
    """Директория файла логов без шаблонной части {time...}."""
    static_part = file_path.split("{time", 1)[0]
    return os.path.dirname(static_part)


def _add_file_sink(service_logger: "Logger", config: LogConfig, service_name: str) -> None:
    """Добавляет файловый обработчик. Если директорию создать нельзя, остается только stderr."""
    file_path = config.log_file_path.replace("{service_name}", service_name.lower())
    log_dir = _log_directory(file_path)

    try:
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
    except OSError as exc:
        service_logger.warning(f"Логи '{service_name}' не будут писаться в файл: директория '{log_dir}' недоступна ({exc}).")
        return

    service_logger.add(
        file_path,
        level=config.level,
        format=config.format,
        rotation=config.rotation,
        retention=config.retention,
        serialize=config.serialize,
        encoding="utf-8",
    )


def setup_logger(
    service_name: str,
    log_config: LogConfig | None = None,
    log_level_override: str | None = None,
    log_to_file_override: bool | None = None,
) -> "Logger":
    """
    Настраивает Loguru и возвращает логгер, привязанный к имени сервиса.

    Обработчики пересоздаются при каждом вызове, поэтому повторная настройка
    (другой модуль того же процесса, тесты) не дублирует сообщения.

    Args:
        service_name: Имя сервиса ("API", "SchedulerMain", "Alembic"), попадает в {extra[service_name]}.
        log_config: Конфигурация. Если None, используются значения по умолчанию.
        log_level_override: Уровень вместо уровня из конфигурации.
        log_to_file_override: Флаг записи в файл вместо флага из конфигурации.

    Returns:
        Логгер Loguru с привязанным service_name.
    """
    config = log_config.model_copy() if log_config else LogConfig()
    config.level = (log_level_override or config.level).upper()

    if log_to_file_override is not None:
        config.enable_file_logging = log_to_file_override

    global_loguru_logger.remove()
    service_logger = global_loguru_logger.bind(service_name=service_name)

    service_logger.add(
        sys.stderr,
        level=config.level,
        format=config.format,
        colorize=True,
        serialize=config.serialize,
    )

    if config.enable_file_logging:
        _add_file_sink(service_logger, config, service_name)

    service_logger.debug(f"Логирование '{service_name}' настроено, уровень {config.level}.")
    return service_logger


class InterceptHandler(logging.Handler):
    """Обработчик стандартного logging, пересылающий записи в Loguru."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = global_loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Пропускаем кадры модуля logging, чтобы в логе было настоящее место вызова
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        global_loguru_logger.bind(service_name=self.service_name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def intercept_standard_logging(service_name: str, level: int = logging.INFO) -> None:
    """
    Направляет логи сторонних библиотек (alembic, apscheduler, sqlalchemy) в Loguru.

    Args:
        service_name: Имя сервиса для {extra[service_name]}.
        level: Минимальный уровень перехватываемых сообщений.
    """
    logging.basicConfig(handlers=[InterceptHandler(service_name)], level=level, force=True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ["setup_logger", "LogConfig", "InterceptHandler", "intercept_standard_logging"]
