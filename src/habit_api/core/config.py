"""Конфигурация приложения."""

from urllib.parse import quote_plus

from pydantic import Field, computed_field

from src.core_shared.config import AppSettings


class Settings(AppSettings):
    """Основные настройки API сервиса."""

    # --- Статические настройки ---

    # Хост API
    API_HOST: str = "0.0.0.0"  # noqa: S104 - 0.0.0.0 необходимо для Docker контейнера
    # Порт API
    API_PORT: int = 8000
    # Алгоритм подписи JWT
    JWT_ALGORITHM: str = "HS256"
    # Срок годности JWT токена в минутах
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # --- Настройки, читаемые из .env ---

    # Настройки БД
    DB_NAME: str = Field(default="habit_streaks_db", description="Название базы данных")
    DB_USER: str = Field(default="habit_streaks_user", description="Имя пользователя базы данных")
    DB_PASSWORD: str = Field(..., description="Пароль пользователя базы данных")
    DB_HOST: str = Field(
        default="db",
        description="Имя хоста базы данных (название сервиса в Docker)",
    )
    DB_PORT: int = Field(default=5432, description="Порт хоста базы данных")

    # Настройки безопасности
    SERVICE_API_KEY: str = Field(..., description="Ключ внешнего сервиса аутентификации для выдачи токенов")
    JWT_SECRET_KEY: str = Field(..., description="Секрет для подписи JWT")

    # Бизнес-константы проекта
    DEFAULT_TIMEZONE: str = Field(
        default="UTC",
        description="Часовой пояс по умолчанию для новых пользователей и при некорректной таймзоне",
    )
    COMPLETION_RATE_WINDOW_DAYS: int = Field(
        default=7,
        gt=0,
        description="Размер скользящего окна (в днях) для расчета процента выполнения",
    )

    # --- Вычисляемые поля ---

    # Формируем URL основной базы данных
    @computed_field(repr=False)  # type: ignore[prop-decorator]
    @property
    def DATABASE_URL(self) -> str:
        """Собирает URL для SQLAlchemy."""

        # Экранируем пользователя и пароль, чтобы спецсимволы не ломали URL
        encoded_user = quote_plus(self.DB_USER)
        encoded_password = quote_plus(self.DB_PASSWORD)

        return f"postgresql+psycopg://{encoded_user}:{encoded_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"


# Создаем глобальный экземпляр настроек
settings = Settings()  # type: ignore[call-arg]
