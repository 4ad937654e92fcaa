"""
Эндпоинты для управления привычками (Habits) и их выполнением.
"""

from datetime import date
from typing import Annotated, Sequence

from fastapi import APIRouter, Query, status

from src.habit_api.core.dependencies import CompletionSvc, CurrentUser, DBSession, HabitSvc, OptionalUser
from src.habit_api.models import HabitCompletion
from src.habit_api.schemas import (
    HabitCompletionSchemaRead,
    HabitSchemaCreate,
    HabitSchemaRead,
    HabitSchemaUpdate,
    MarkCompleteResult,
    TodayStats,
)

router = APIRouter(prefix="/habits", tags=["Habits"])


@router.post(
    "/",
    response_model=HabitSchemaRead,
    status_code=status.HTTP_201_CREATED,
    summary="Создание новой привычки",
    description="Создает новую привычку для пользователя. Стрик начинается с нуля, история пуста.",
)
async def create_habit(
    db_session: DBSession,
    current_user: CurrentUser,
    habit_service: HabitSvc,
    habit_in: HabitSchemaCreate,
) -> HabitSchemaRead:
    """
    Создает новую привычку для текущего пользователя.

    Args:
        db_session: Асинхронная сессия базы данных.
        current_user: Аутентифицированный пользователь.
        habit_service: Сервис для работы с привычками.
        habit_in: Данные привычки (название, категория, частота и дни).

    Returns:
        HabitSchemaRead: Созданная привычка с флагами на сегодня.
    """
    habit = await habit_service.create_habit_for_user(db_session, habit_in=habit_in, current_user=current_user)
    return habit_service.to_projection(habit, current_user)


@router.get(
    "/",
    response_model=list[HabitSchemaRead],
    status_code=status.HTTP_200_OK,
    summary="Получение списка привычек пользователя",
    description=(
        "Возвращает привычки пользователя; для каждой вычисляются флаги is_due_today и is_completed_today. "
        "Без токена возвращается пустой список."
    ),
)
async def get_habits(
    db_session: DBSession,
    current_user: OptionalUser,
    habit_service: HabitSvc,
) -> list[HabitSchemaRead]:
    return await habit_service.fetch_habits(db_session, current_user=current_user)


@router.get(
    "/today",
    response_model=TodayStats,
    status_code=status.HTTP_200_OK,
    summary="Статистика на сегодня",
    description="Сколько из запланированных на сегодня привычек уже выполнено.",
)
async def get_today_stats(
    db_session: DBSession,
    current_user: OptionalUser,
    habit_service: HabitSvc,
) -> TodayStats:
    return await habit_service.get_today_stats(db_session, current_user=current_user)


@router.get(
    "/{habit_id}",
    response_model=HabitSchemaRead,
    status_code=status.HTTP_200_OK,
    summary="Получение привычки по ID",
)
async def get_habit(
    db_session: DBSession,
    current_user: CurrentUser,
    habit_service: HabitSvc,
    habit_id: int,
) -> HabitSchemaRead:
    """
    Получает привычку, если она принадлежит текущему пользователю.

    Raises:
        NotFoundException: Если привычка не найдена.
        ForbiddenException: Если привычка принадлежит другому пользователю.
    """
    habit = await habit_service.get_habit_by_id_for_user(db_session, habit_id=habit_id, current_user=current_user)
    return habit_service.to_projection(habit, current_user)


@router.patch(
    "/{habit_id}",
    response_model=HabitSchemaRead,
    status_code=status.HTTP_200_OK,
    summary="Обновление привычки по ID",
    description="Частично обновляет данные привычки (PATCH). Стрики и история через API не меняются.",
)
async def update_habit(
    db_session: DBSession,
    current_user: CurrentUser,
    habit_service: HabitSvc,
    habit_id: int,
    habit_in: HabitSchemaUpdate,
) -> HabitSchemaRead:
    """
    Частично обновляет данные существующей привычки.

    Raises:
        NotFoundException: Если привычка не найдена.
        ForbiddenException: Если привычка принадлежит другому пользователю.
        ValidationException: Если частота не согласована с наборами дней.
    """
    habit = await habit_service.update_habit_for_user(
        db_session,
        habit_id=habit_id,
        habit_in=habit_in,
        current_user=current_user,
    )
    return habit_service.to_projection(habit, current_user)


@router.delete(
    "/{habit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удаление привычки по ID",
    description="Удаляет привычку вместе с ее записями в журнале выполнений.",
)
async def delete_habit(
    db_session: DBSession,
    current_user: CurrentUser,
    habit_service: HabitSvc,
    habit_id: int,
) -> None:  # Возвращаем None, так как статус 204 No Content
    await habit_service.remove_habit_for_user(db_session, habit_id=habit_id, current_user=current_user)


@router.post(
    "/{habit_id}/complete",
    response_model=MarkCompleteResult,
    status_code=status.HTTP_200_OK,
    summary="Отметка привычки выполненной сегодня",
    description=(
        "Записывает выполнение в журнал, обновляет стрик привычки и проверяет глобальный стрик. "
        "Повторная отметка в тот же день ничего не меняет и возвращает already_completed=true."
    ),
)
async def complete_habit(
    db_session: DBSession,
    current_user: CurrentUser,
    habit_service: HabitSvc,
    habit_id: int,
) -> MarkCompleteResult:
    return await habit_service.mark_habit_complete(db_session, habit_id=habit_id, current_user=current_user)


@router.get(
    "/{habit_id}/completions",
    response_model=list[HabitCompletionSchemaRead],
    status_code=status.HTTP_200_OK,
    summary="Журнал выполнений привычки",
    description="Возвращает записи журнала для привычки, от новых к старым.",
)
async def get_habit_completions(
    db_session: DBSession,
    current_user: CurrentUser,
    habit_service: HabitSvc,
    completion_service: CompletionSvc,
    habit_id: int,
    start_date: Annotated[date | None, Query(description="Начальная дата (ГГГГ-ММ-ДД)")] = None,
    end_date: Annotated[date | None, Query(description="Конечная дата (ГГГГ-ММ-ДД)")] = None,
    skip: Annotated[int, Query(ge=0, description="Количество записей для пропуска")] = 0,
    limit: Annotated[int, Query(ge=1, le=500, description="Максимальное количество записей")] = 100,
) -> Sequence[HabitCompletion]:
    # Проверяем существование привычки и ее принадлежность пользователю
    await habit_service.get_habit_by_id_for_user(db_session, habit_id=habit_id, current_user=current_user)

    return await completion_service.list_completions(
        db_session,
        current_user=current_user,
        habit_id=habit_id,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
