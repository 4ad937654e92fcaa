"""Сервис для работы с привычками."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.core.exceptions import (
    AlreadyCompletedException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from src.habit_api.core.logging import api_log as log
from src.habit_api.models import Habit, HabitFrequency, User
from src.habit_api.repositories import HabitCompletionRepository, HabitRepository
from src.habit_api.schemas import (
    HabitSchemaCreate,
    HabitSchemaRead,
    HabitSchemaUpdate,
    MarkCompleteResult,
    StreakSchemaRead,
    TodayStats,
    normalize_recurrence,
)
from src.habit_api.utils.date_utils import get_user_timezone, to_user_date, utc_now
from src.habit_api.utils.schedule import is_completed_on, is_completed_today, is_due
from src.habit_api.utils.streaks import apply_completion

from .base_service import BaseService
from .completion_service import CompletionService
from .streak_service import StreakService


def build_habit_projection(habit: Habit, today: date, tz: ZoneInfo) -> HabitSchemaRead:
    """
    Строит представление привычки с вычисленными флагами на `today`.

    Args:
        habit (Habit): Привычка.
        today (date): "Сегодня" в календаре пользователя.
        tz (ZoneInfo): Часовой пояс пользователя.

    Returns:
        HabitSchemaRead: Схема привычки с is_due_today и is_completed_today.
    """
    return HabitSchemaRead.model_validate(habit).model_copy(
        update={
            "is_due_today": is_due(habit, today),
            "is_completed_today": is_completed_today(habit, today, tz),
        }
    )


class HabitService(BaseService[Habit, HabitRepository, HabitSchemaCreate, HabitSchemaUpdate]):
    """
    Сервис для управления привычками.

    Отвечает за создание, чтение, обновление и удаление привычек, а также за цепочку
    отметки выполнения: журнал -> стрик привычки -> глобальный стрик.
    """

    def __init__(
        self,
        habit_repository: HabitRepository,
        completion_repository: HabitCompletionRepository,
        completion_service: CompletionService,
        streak_service: StreakService,
    ):
        """
        Инициализирует сервис привычек.

        Args:
            habit_repository (HabitRepository): Репозиторий для работы с привычками.
            completion_repository (HabitCompletionRepository): Репозиторий журнала выполнений.
            completion_service (CompletionService): Сервис журнала выполнений.
            streak_service (StreakService): Сервис глобального стрика.
        """
        super().__init__(repository=habit_repository)
        self.completion_repository = completion_repository
        self.completion_service = completion_service
        self.streak_service = streak_service

    def _check_habit_ownership(self, habit: Habit, user_id: int) -> None:
        """
        Проверяет принадлежность привычки пользователю.

        Raises:
            ForbiddenException: Если привычка не принадлежит пользователю.
        """
        if habit.user_id != user_id:
            log.warning(f"Пользователь ID: {user_id} пытался получить доступ к чужой привычке ID: {habit.id}")
            raise ForbiddenException(
                message="У вас нет прав для доступа к этой привычке.",
                error_type="habit_access_forbidden",
            )

    def to_projection(self, habit: Habit, current_user: User, now: datetime | None = None) -> HabitSchemaRead:
        """Строит представление привычки по календарю пользователя на момент `now`."""
        tz = get_user_timezone(current_user)
        return build_habit_projection(habit, to_user_date(now or utc_now(), tz), tz)

    async def create_habit_for_user(
        self,
        db_session: AsyncSession,
        *,
        habit_in: HabitSchemaCreate,
        current_user: User,
    ) -> Habit:
        """
        Создает новую привычку для пользователя.

        Данные уже проверены схемой HabitSchemaCreate, поэтому до записи в БД доходят
        только корректные привычки.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            habit_in (HabitSchemaCreate): Данные для создания привычки.
            current_user (User): Аутентифицированный пользователь, создающий привычку.

        Returns:
            Habit: Созданная привычка.
        """
        user_id = current_user.id

        try:
            habit = await self.repository.create_habit(db_session, habit_in=habit_in, user_id=user_id)
            await db_session.commit()

            log.info(f"Привычка ID {habit.id} для пользователя (ID: {user_id}) успешно создана.")
            return habit

        except Exception as exc:
            # При любой ошибке откатываем транзакцию, чтобы сохранить целостность данных
            await db_session.rollback()
            log.error(f"Ошибка при создании привычки для пользователя ID: {user_id}: {exc}", exc_info=True)
            raise exc

    async def fetch_habits(
        self,
        db_session: AsyncSession,
        *,
        current_user: User | None,
        now: datetime | None = None,
    ) -> list[HabitSchemaRead]:
        """
        Загружает привычки пользователя и вычисляет для каждой флаги "нужно сегодня" и "выполнено сегодня".

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            current_user (User | None): Пользователь. Без пользователя возвращается пустой список.
            now (datetime | None): Момент времени. Если None, берется текущее время.

        Returns:
            list[HabitSchemaRead]: Представления привычек.
        """
        if current_user is None:
            return []

        tz = get_user_timezone(current_user)
        today = to_user_date(now or utc_now(), tz)
        habits = await self.repository.get_habits_by_user_id(db_session, user_id=current_user.id)

        return [build_habit_projection(habit, today, tz) for habit in habits]

    async def get_habit_by_id_for_user(self, db_session: AsyncSession, *, habit_id: int, current_user: User) -> Habit:
        """
        Получает привычку по ID, проверяя существует ли она и принадлежит ли текущему пользователю.

        Raises:
            NotFoundException: Если привычка не найдена.
            ForbiddenException: Если привычка не принадлежит пользователю.
        """
        habit = await self.get_by_id(db_session, obj_id=habit_id)
        self._check_habit_ownership(habit, current_user.id)
        return habit

    async def update_habit_for_user(
        self,
        db_session: AsyncSession,
        *,
        habit_id: int,
        habit_in: HabitSchemaUpdate,
        current_user: User,
    ) -> Habit:
        """
        Обновляет привычку, проверяя, что она принадлежит текущему пользователю.

        Правило повторения проверяется после слияния с текущими значениями: смена частоты
        требует соответствующего набора дней, а наборы других частот очищаются.
        Набор дней без смены частоты должен подходить к текущей частоте привычки.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            habit_id (int): ID привычки для обновления.
            habit_in (HabitSchemaUpdate): Данные для обновления.
            current_user (User): Аутентифицированный пользователь.

        Returns:
            Habit: Обновленная привычка.

        Raises:
            ValidationException: Если итоговое правило повторения некорректно.
        """
        habit = await self.get_habit_by_id_for_user(db_session, habit_id=habit_id, current_user=current_user)
        update_data = habit_in.model_dump(exclude_unset=True)

        if update_data.keys() & {"frequency", "days_of_week", "days_of_month"}:
            if "frequency" not in update_data:
                self._check_days_match_frequency(habit.frequency, update_data)

            try:
                days_of_week, days_of_month = normalize_recurrence(
                    update_data.get("frequency", habit.frequency),
                    update_data.get("days_of_week", habit.days_of_week),
                    update_data.get("days_of_month", habit.days_of_month),
                )
            except ValueError as exc:
                raise ValidationException(message=str(exc), loc=["body", "frequency"]) from exc

            update_data["days_of_week"] = days_of_week
            update_data["days_of_month"] = days_of_month

        log.info(f"Обновление привычки ID: {habit_id} для пользователя ID: {current_user.id}")
        return await super().update(db_session, db_obj=habit, obj_in=update_data)

    @staticmethod
    def _check_days_match_frequency(frequency: HabitFrequency, update_data: dict) -> None:
        """
        Отклоняет набор дней, который не применим к текущей частоте привычки.

        Без смены частоты такой набор был бы молча очищен нормализацией.

        Raises:
            ValidationException: Если прислан непустой набор дней другой частоты.
        """
        expected = {HabitFrequency.WEEKLY: "days_of_week", HabitFrequency.MONTHLY: "days_of_month"}.get(frequency)

        for field_name in ("days_of_week", "days_of_month"):
            if update_data.get(field_name) and field_name != expected:
                raise ValidationException(
                    message=(
                        f"Поле '{field_name}' не применимо к частоте '{HabitFrequency(frequency).value}'. "
                        "Чтобы задать эти дни, передайте и новую частоту."
                    ),
                    loc=["body", field_name],
                )

    async def remove_habit_for_user(self, db_session: AsyncSession, *, habit_id: int, current_user: User) -> None:
        """
        Удаляет привычку вместе с ее записями в журнале выполнений.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            habit_id (int): ID привычки для удаления.
            current_user (User): Аутентифицированный пользователь.
        """
        habit = await self.get_habit_by_id_for_user(db_session, habit_id=habit_id, current_user=current_user)

        log.info(f"Удаление привычки ID: {habit_id} для пользователя ID: {current_user.id}")
        # Записи журнала удаляются явно, не полагаясь на ON DELETE CASCADE конкретной БД
        await self.completion_repository.delete_by_habit_id(db_session, habit_id=habit_id)
        await super().delete(db_session, db_obj=habit)

    async def mark_habit_complete(
        self,
        db_session: AsyncSession,
        *,
        habit_id: int,
        current_user: User,
        now: datetime | None = None,
    ) -> MarkCompleteResult:
        """
        Отмечает привычку выполненной сегодня.

        Шаги выполняются строго последовательно: запись в журнал, обновление стрика привычки
        (в одной транзакции с заблокированной строкой привычки), затем проверка глобального стрика
        за сегодняшний день. Повторная отметка в тот же день ничего не меняет, но проверку
        глобального стрика все равно повторяет, поэтому повтор после частичного сбоя доводит
        состояние до согласованного.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            habit_id (int): ID привычки.
            current_user (User): Аутентифицированный пользователь.
            now (datetime | None): Момент выполнения. Если None, берется текущее время.

        Returns:
            MarkCompleteResult: Привычка, признак повторной отметки и глобальный стрик.

        Raises:
            NotFoundException: Если привычка не найдена.
            ForbiddenException: Если привычка не принадлежит пользователю.
            SQLAlchemyError: Если хранилище недоступно (транзакция откатывается).
        """
        now = now or utc_now()
        user_id = current_user.id
        tz = get_user_timezone(current_user)
        today = to_user_date(now, tz)

        # Блокируем строку привычки до конца транзакции
        habit = await self.repository.get_habit_by_id_for_update(db_session, habit_id=habit_id)

        if habit is None:
            raise NotFoundException(message=f"Привычка с ID {habit_id} не найдена.", error_type="habit_not_found")

        self._check_habit_ownership(habit, user_id)

        already_completed = is_completed_on(habit, today, tz)

        if not already_completed:
            try:
                await self.completion_service.record_completion(
                    db_session, user_id=user_id, habit=habit, completion_date=today, completed_at=now
                )
                apply_completion(habit, now, tz)
                db_session.add(habit)
                await db_session.commit()

            except AlreadyCompletedException:
                already_completed = True
                # Закрываем транзакцию (и снимаем блокировку), если она еще открыта
                await db_session.rollback()

            except SQLAlchemyError as exc:
                await db_session.rollback()
                log.error(f"Ошибка при отметке выполнения привычки ID {habit_id}: {exc}", exc_info=True)
                raise

        if already_completed:
            log.info(f"Привычка ID {habit_id} уже выполнена {today}, повторная отметка без изменений.")

        # Обновляем данные привычки из БД (updated_at меняется на стороне БД)
        await db_session.refresh(habit)
        projection = build_habit_projection(habit, today, tz)

        streak = await self.streak_service.advance_if_day_complete(
            db_session, user_id=user_id, today=today, evaluated_day=today, tz=tz
        )

        return MarkCompleteResult(
            habit=projection,
            already_completed=already_completed,
            global_streak=StreakSchemaRead.model_validate(streak),
        )

    async def get_today_stats(
        self,
        db_session: AsyncSession,
        *,
        current_user: User | None,
        now: datetime | None = None,
    ) -> TodayStats:
        """
        Считает, сколько из запланированных на сегодня привычек уже выполнено.

        Args:
            db_session (AsyncSession): Асинхронная сессия базы данных.
            current_user (User | None): Пользователь. Без пользователя возвращаются нули.
            now (datetime | None): Момент времени. Если None, берется текущее время.

        Returns:
            TodayStats: Выполнено и всего запланировано на сегодня.
        """
        projections = await self.fetch_habits(db_session, current_user=current_user, now=now)
        due_today = [habit for habit in projections if habit.is_due_today]

        return TodayStats(
            completed=sum(1 for habit in due_today if habit.is_completed_today),
            total=len(due_today),
        )

