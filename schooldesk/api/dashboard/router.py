from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.dependencies import get_current_principal
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ServiceError
from schooldesk.db.session import get_db

from .schemas import DashboardStats, GenderData, MonthlyData
from . import service

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def stats(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> DashboardStats:
    try:
        return await service.get_stats(db, principal)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/monthly-data", response_model=MonthlyData)
async def monthly_data(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> MonthlyData:
    try:
        return await service.get_monthly_data(db, principal)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/gender-data", response_model=GenderData)
async def gender_data(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> GenderData:
    try:
        return await service.get_gender_data(db, principal)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
