"""Инициализация Sentry SDK для API и планировщика."""

from logging import ERROR, INFO
from typing import Protocol

from sentry_sdk import init as sentry_init
from sentry_sdk.integrations import Integration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from .logging_setup import setup_logger


class SentrySettingsProtocol(Protocol):
    """Поля настроек, которые читает Sentry."""

    SENTRY_DSN: str | None
    PRODUCTION: bool
    PROJECT_NAME: str
    API_VERSION: str


def build_integrations(with_web: bool) -> list[Integration]:
    """
    Собирает интеграции Sentry.

    Loguru отправляет ERROR как события, INFO и выше как breadcrumbs.
    FastAPI/Starlette нужны только процессу API.
    """
    integrations: list[Integration] = [
        SqlalchemyIntegration(),
        LoguruIntegration(level=INFO, event_level=ERROR),
    ]

    if with_web:
        integrations.append(StarletteIntegration(transaction_style="endpoint"))
        integrations.append(FastApiIntegration(transaction_style="endpoint"))

    return integrations


def setup_sentry(settings: SentrySettingsProtocol, log_level: str, with_web: bool = True) -> bool:
    """
    Инициализирует Sentry SDK, если задан DSN.

    Args:
        settings (SentrySettingsProtocol): Объект настроек.
        log_level (str): Уровень логирования для сообщений о настройке.
        with_web (bool): Подключать ли интеграции FastAPI/Starlette.

    Returns:
        bool: True, если Sentry SDK был инициализирован.
    """
    sentry_log = setup_logger(service_name="SentrySetup", log_level_override=log_level)

    if not settings.SENTRY_DSN:
        sentry_log.info("SENTRY_DSN не задан, мониторинг ошибок отключен.")
        return False

    environment = "production" if settings.PRODUCTION else "development"
    # В продакшене трассируется каждый десятый запрос
    sample_rate = 0.1 if settings.PRODUCTION else 1.0

    try:
        sentry_init(
            dsn=settings.SENTRY_DSN,
            integrations=build_integrations(with_web),
            environment=environment,
            traces_sample_rate=sample_rate,
            profiles_sample_rate=sample_rate,
            release=f"{settings.PROJECT_NAME}@{settings.API_VERSION}",
        )
    except Exception as exc:
        sentry_log.exception(f"Не удалось инициализировать Sentry SDK: {exc}")
        return False

    sentry_log.info(f"Sentry SDK инициализирован: environment={environment}, traces_sample_rate={sample_rate}.")
    return True
