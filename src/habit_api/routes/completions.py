"""
Эндпоинты журнала выполнений.
"""

from datetime import date
from typing import Annotated, Sequence

from fastapi import APIRouter, Query, status

from src.habit_api.core.dependencies import CompletionSvc, DBSession, OptionalUser
from src.habit_api.models import HabitCompletion
from src.habit_api.schemas import HabitCompletionSchemaRead

router = APIRouter(prefix="/completions", tags=["Completions"])


@router.get(
    "/",
    response_model=list[HabitCompletionSchemaRead],
    status_code=status.HTTP_200_OK,
    summary="Журнал выполнений пользователя",
    description=(
        "Возвращает записи журнала с фильтрами по привычке, диапазону дат и флагу выполнения, "
        "от новых к старым. Без токена возвращается пустой список."
    ),
)
async def list_completions(
    db_session: DBSession,
    current_user: OptionalUser,
    completion_service: CompletionSvc,
    habit_id: Annotated[int | None, Query(gt=0, description="Фильтр по привычке")] = None,
    start_date: Annotated[date | None, Query(description="Начальная дата (ГГГГ-ММ-ДД)")] = None,
    end_date: Annotated[date | None, Query(description="Конечная дата (ГГГГ-ММ-ДД)")] = None,
    is_completed: Annotated[bool | None, Query(description="Фильтр по флагу выполнения")] = None,
    skip: Annotated[int, Query(ge=0, description="Количество записей для пропуска")] = 0,
    limit: Annotated[int, Query(ge=1, le=500, description="Максимальное количество записей")] = 100,
) -> Sequence[HabitCompletion]:
    return await completion_service.list_completions(
        db_session,
        current_user=current_user,
        habit_id=habit_id,
        start_date=start_date,
        end_date=end_date,
        is_completed=is_completed,
        skip=skip,
        limit=limit,
    )
