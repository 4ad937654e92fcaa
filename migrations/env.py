from os import getenv
from urllib.parse import quote_plus

from alembic import context
from sqlalchemy import engine_from_config, pool

# Импортируем базовую модель SQLAlchemy
from src.habit_api.models import Base  # Это подтянет все модели через __init__
from src.core_shared.logging_setup import intercept_standard_logging, setup_logger

# Настройка логирования: логи alembic и sqlalchemy направляем в Loguru
logger = setup_logger("Alembic", log_to_file_override=False)
intercept_standard_logging("Alembic")


# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Указываем Alembic на метаданные базовой модели
target_metadata = Base.metadata


def get_database_url() -> str:
    """
    Читает переменные окружения и формирует URL базы данных.

    Raises:
        ValueError, если одна или несколько переменных окружения отсутствуют.
    """
    db_user = getenv("DB_USER")
    db_password = getenv("DB_PASSWORD")
    db_host = getenv("DB_HOST")
    db_port = getenv("DB_PORT")
    db_name = getenv("DB_NAME")

    if not all([db_user, db_password, db_host, db_port, db_name]):
        raise ValueError("Отсутствуют переменные окружения для базы данных (DB_USER, DB_PASSWORD, ...)")

    # Экранируем пользователя и пароль, чтобы спецсимволы не ломали URL
    encoded_user = quote_plus(db_user)
    encoded_password = quote_plus(db_password)

    return f"postgresql+psycopg://{encoded_user}:{encoded_password}@{db_host}:{db_port}/{db_name}"


# URL, заданный извне (alembic.ini или тесты), имеет приоритет над переменными окружения
current_db_url = config.get_main_option("sqlalchemy.url")

if not current_db_url:
    try:
        current_db_url = get_database_url()
    except ValueError as db_url_exc:
        logger.error(f"Ошибка конфигурации: {db_url_exc}")
        raise db_url_exc


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Configures the context with just a URL, so no DBAPI is required.
    Calls to context.execute() emit the given string to the script output.
    """
    context.configure(
        url=current_db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=current_db_url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable_config = config.get_section(config.config_ini_section, {})
    connectable_config["sqlalchemy.url"] = current_db_url

    connectable = engine_from_config(
        connectable_config,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # SQLite не поддерживает ALTER TABLE для большинства операций
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
