"""
Эндпоинты глобального стрика.
"""

from fastapi import APIRouter, status

from src.habit_api.core.dependencies import DBSession, OptionalUser, StreakSvc
from src.habit_api.schemas import StreakSchemaRead

router = APIRouter(prefix="/streaks", tags=["Streaks"])


@router.get(
    "/",
    response_model=StreakSchemaRead,
    status_code=status.HTTP_200_OK,
    summary="Глобальный стрик пользователя",
    description=(
        "Проверяет, был ли вчерашний день выполнен полностью, продвигает стрик (не более раза в день) "
        "и возвращает его. Без токена или при недоступном хранилище возвращаются нули."
    ),
)
async def get_streaks(
    db_session: DBSession,
    current_user: OptionalUser,
    streak_service: StreakSvc,
) -> StreakSchemaRead:
    return await streak_service.fetch_streaks(db_session, current_user=current_user)
