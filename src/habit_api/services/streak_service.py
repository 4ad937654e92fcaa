"""Сервис глобального стрика пользователя."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.logging import api_log as log
from src.habit_api.models import User, UserStreak
from src.habit_api.repositories import HabitCompletionRepository, HabitRepository, UserStreakRepository
from src.habit_api.schemas import StreakSchemaRead
from src.habit_api.utils.date_utils import get_user_timezone, previous_day, to_user_date, utc_now
from src.habit_api.utils.streaks import UTC, evaluate_day, next_global_streak

from .base_service import BaseService


class StreakService(BaseService[UserStreak, UserStreakRepository, BaseModel, BaseModel]):
    """
    Сервис глобального стрика: подряд идущие дни, в которые выполнены все запланированные привычки.

    Каждый календарный день засчитывается не более одного раза, поэтому проверку можно безопасно
    вызывать сколько угодно раз (после каждой отметки, при каждом чтении, из планировщика).
    Разрыв серии не обрабатывается отдельно: следующее продвижение просто начинает серию с 1.
    """

    def __init__(
        self,
        streak_repository: UserStreakRepository,
        habit_repository: HabitRepository,
        completion_repository: HabitCompletionRepository,
    ):
        """
        Инициализирует сервис глобального стрика.

        Args:
            streak_repository (UserStreakRepository): Репозиторий записей стрика.
            habit_repository (HabitRepository): Репозиторий привычек (для набора запланированных).
            completion_repository (HabitCompletionRepository): Репозиторий журнала выполнений.
        """
        super().__init__(repository=streak_repository)
        self.habit_repository = habit_repository
        self.completion_repository = completion_repository

    async def get_or_create_record(self, db_session: AsyncSession, *, user_id: int) -> UserStreak:
        """
        Получает запись стрика пользователя или лениво создает ее с нулевыми счетчиками.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            user_id (int): ID пользователя.

        Returns:
            UserStreak: Существующая или созданная запись.
        """
        record = await self.repository.get_by_user_id(db_session, user_id=user_id)

        if record:
            return record

        try:
            return await super().create(
                db_session,
                obj_in={
                    "user_id": user_id,
                    "current_streak": 0,
                    "longest_streak": 0,
                    "last_streak_date": None,
                    "total_habits_completed": 0,
                },
            )

        # Запись создала параллельная транзакция (уникальный user_id)
        except IntegrityError:
            log.warning(f"Race condition при создании записи стрика пользователя ID {user_id}.")

            record = await self.repository.get_by_user_id(db_session, user_id=user_id)

            if not record:
                raise RuntimeError(
                    f"Запись стрика пользователя ID {user_id} существует (IntegrityError), но не найдена."
                ) from None

            return record

    async def advance_if_day_complete(
        self,
        db_session: AsyncSession,
        *,
        user_id: int,
        today: date,
        evaluated_day: date | None = None,
        tz: ZoneInfo | None = None,
    ) -> UserStreak:
        """
        Засчитывает проверяемый день в глобальный стрик, если он выполнен полностью.

        Ежедневный триггер (чтение стрика, планировщик) проверяет вчерашний день,
        триггер после отметки привычки передает `evaluated_day=today`. Оба триггера
        записывают в `last_streak_date` сам засчитанный день, поэтому день, уже засчитанный
        одним триггером, другим не засчитывается повторно.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            user_id (int): ID пользователя.
            today (date): "Сегодня" в календаре пользователя.
            evaluated_day (date | None): Проверяемый день. По умолчанию вчера относительно `today`.
            tz (ZoneInfo | None): Часовой пояс пользователя. По умолчанию UTC.

        Returns:
            UserStreak: Запись стрика (обновленная или без изменений).
        """
        record = await self.get_or_create_record(db_session, user_id=user_id)
        day = evaluated_day or previous_day(today)

        if record.last_streak_date is not None and record.last_streak_date >= day:
            log.debug(f"День {day} пользователя ID {user_id} уже учтен (последний засчитанный {record.last_streak_date}).")
            return record

        habits = await self.habit_repository.get_habits_by_user_id(db_session, user_id=user_id)
        completed_ids = await self.completion_repository.get_completed_habit_ids_for_date(
            db_session, user_id=user_id, completion_date=day
        )
        evaluation = evaluate_day(habits, completed_ids, day, tz or UTC)

        if not evaluation.is_complete:
            log.debug(
                f"День {day} пользователя ID {user_id} не выполнен полностью "
                f"({evaluation.completed_count}/{evaluation.due_count}), стрик не меняется."
            )
            return record

        changes = next_global_streak(record, day, evaluation.completed_count)

        if changes is None:
            return record

        record = await super().update(db_session, db_obj=record, obj_in=changes)
        log.info(
            f"Глобальный стрик пользователя ID {user_id}: {record.current_streak} "
            f"(рекорд {record.longest_streak}, засчитан день {day})."
        )
        return record

    async def fetch_streaks(
        self,
        db_session: AsyncSession,
        *,
        current_user: User | None,
        now: datetime | None = None,
    ) -> StreakSchemaRead:
        """
        Возвращает глобальный стрик, предварительно выполнив ежедневную проверку вчерашнего дня.

        Без пользователя и при недоступном хранилище возвращает нулевую запись.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            current_user (User | None): Пользователь.
            now (datetime | None): Момент времени. Если None, берется текущее время.

        Returns:
            StreakSchemaRead: Состояние глобального стрика.
        """
        if current_user is None:
            return StreakSchemaRead()

        user_id = current_user.id
        tz = get_user_timezone(current_user)
        today = to_user_date(now or utc_now(), tz)

        try:
            record = await self.advance_if_day_complete(db_session, user_id=user_id, today=today, tz=tz)
            return StreakSchemaRead.model_validate(record)

        except SQLAlchemyError as exc:
            await db_session.rollback()
            log.error(f"Ошибка хранилища при получении стрика пользователя ID {user_id}: {exc}", exc_info=True)
            return StreakSchemaRead()
