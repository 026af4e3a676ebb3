"""
Dashboard statistics for the calling user.
"""

from fastapi import APIRouter, Request

from ...application.use_cases.get_user_stats import GetUserStatsUseCase
from ..deps import CurrentUserDep, RateLimited, SessionRepositoryDep
from ..schemas.common import ApiResponse
from ..schemas.consultation import UserStatsOut
from ..utils.responses import ok

router = APIRouter(prefix="/api/user-stats", tags=["user-stats"], dependencies=[RateLimited])


@router.get("", response_model=ApiResponse[UserStatsOut])
async def get_user_stats(request: Request, owner_id: CurrentUserDep, session_repo: SessionRepositoryDep):
    stats = await GetUserStatsUseCase(session_repo).execute(owner_id)
    return ok(
        request,
        data=UserStatsOut(
            total_consultations=stats.total_consultations,
            last_consultation=stats.last_consultation,
            patient_history_count=stats.patient_history_count,
        ),
    )
