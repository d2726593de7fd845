"""Admin dashboard router — KPI snapshot."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.api.deps import get_current_active_user, get_db
from rentwise.models.user import User
from rentwise.schemas.dashboard import KPISnapshot
from rentwise.services import kpi_service

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/kpi", response_model=KPISnapshot)
async def get_kpi(
    as_of: date | None = Query(None, description="End of the occupancy window (defaults to today)"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> KPISnapshot:
    """Total bookings, average occupancy and confirmed revenue. Admin only."""
    return await kpi_service.compute_snapshot(db, current_user, as_of=as_of)
