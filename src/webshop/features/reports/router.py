import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import Annotated

from ..auth.models import User as AuthUser
from ..auth.security import get_current_active_admin_user

from .schemas import ReportQuery, ReportData
from . import service as report_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={500: {"description": "Report generation failed"}},
)


@router.get("", response_model=ReportData)
async def get_report(
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
    query: ReportQuery = Depends(),
):
    """
    Period report for the admin dashboard.

    The window ends on `date` (today when omitted) and spans one `period`.
    """
    try:
        return await report_service.generate_report(query.period, query.date)
    except Exception:
        logger.error(
            f"Failed to generate {query.period.value} report for {current_admin.username}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate report",
        )
