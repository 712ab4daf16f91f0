"""Commission reporting."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_super_admin
from libs.auth.models import AuthUser
from libs.common.currency import kobo_to_naira
from libs.db.session import get_async_db
from services.unit_wallet_service.schemas import (
    CommissionReportResponse,
    CommissionResponse,
    CommissionTotalsResponse,
)
from services.unit_wallet_service.services import reports
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/commissions", tags=["commissions"])


@router.get("/report", response_model=CommissionReportResponse)
async def get_commission_report(
    fellowship_id: Optional[int] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: AuthUser = Depends(require_super_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Platform commission with totals, optionally for one fellowship and date range."""
    report = await reports.get_commission_report(
        db,
        actor=current_user,
        fellowship_id=fellowship_id,
        start=start_date,
        end=end_date,
    )
    totals = report.totals
    return CommissionReportResponse(
        commissions=[CommissionResponse.model_validate(c) for c in report.commissions],
        totals=CommissionTotalsResponse(
            total_commission=kobo_to_naira(totals.total_commission_kobo),
            total_vpay_fees=kobo_to_naira(totals.total_vpay_fees_kobo),
            total_processed=kobo_to_naira(totals.total_processed_kobo),
            total_net=kobo_to_naira(totals.total_net_kobo),
            count=totals.count,
        ),
    )
