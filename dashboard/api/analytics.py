from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.models import AnalyticsPeriod, Granularity
from dashboard.dependencies import get_analytics_service, resolve_day
from dashboard.schemas import HabitSeriesOut, SummaryOut, YearGoalOut
from services.analytics import AnalyticsService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _period(value: int) -> AnalyticsPeriod:
    try:
        return AnalyticsPeriod(value)
    except ValueError:
        allowed = [p.value for p in AnalyticsPeriod]
        raise HTTPException(status_code=422, detail=f"period должен быть одним из: {allowed}")


@router.get("/{owner}/series", response_model=HabitSeriesOut)
async def get_habit_series(
    owner: str,
    day: Optional[date] = Query(None, alias="date"),
    period: int = Query(30),
    granularity: Granularity = Query(Granularity.WEEKLY),
    habit_id: Optional[str] = Query(None),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Ряд значений привычки за период. Недели и месяцы применяются только к 365d
    """
    series = await service.habit_series(owner, resolve_day(day), _period(period), granularity, habit_id)
    return series.to_dict()


@router.get("/{owner}/goals", response_model=List[YearGoalOut])
async def get_year_goals(
    owner: str,
    day: Optional[date] = Query(None, alias="date"),
    limit: Optional[int] = Query(None, ge=1, le=50),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Лучшие годовые цели за год просматриваемого дня
    """
    goals = await service.year_goals(owner, resolve_day(day), limit)
    return [YearGoalOut(**g.to_dict()) for g in goals]


@router.get("/{owner}/summary", response_model=SummaryOut)
async def get_summary(
    owner: str,
    day: Optional[date] = Query(None, alias="date"),
    period: int = Query(30),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Доля выполненных toggle-привычек и суммы питания за период
    """
    summary = await service.summary(owner, resolve_day(day), _period(period))
    return summary.to_dict()
