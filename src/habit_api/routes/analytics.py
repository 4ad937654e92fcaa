"""
Эндпоинты аналитики.
"""

from fastapi import APIRouter, status

from src.habit_api.core.dependencies import AnalyticsSvc, DBSession, OptionalUser
from src.habit_api.schemas import AnalyticsSummarySchema

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get(
    "/summary",
    response_model=AnalyticsSummarySchema,
    status_code=status.HTTP_200_OK,
    summary="Сводка аналитики",
    description=(
        "Распределение по категориям, самый активный день недели и час, недельный ритм, "
        "процент выполнения, глобальный стрик и мотивирующее сообщение."
    ),
)
async def get_analytics_summary(
    db_session: DBSession,
    current_user: OptionalUser,
    analytics_service: AnalyticsSvc,
) -> AnalyticsSummarySchema:
    return await analytics_service.get_summary(db_session, current_user=current_user)
