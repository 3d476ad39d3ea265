"""
Dashboard data aggregation API endpoints.

Provides the daily dashboard built by the DashboardAggregator: scheduled
outputs with weekly progress, completion stats, skill suggestions and the
weekly skill summary.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.dependencies import get_dashboard_aggregator
from backend.errors import to_http_exception
from backend.schemas import DashboardResponse
from tracker.dashboard.aggregator import DashboardAggregator

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/daily", response_model=DashboardResponse)
async def get_daily_dashboard(
    date: Optional[str] = Query(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    aggregator: DashboardAggregator = Depends(get_dashboard_aggregator),
):
    """
    Get dashboard data for one day (defaults to today).

    Aggregates:
    - Active outputs per outcome, whether each is scheduled that day,
      its log for the day and its weekly progress
    - Completion stats and outputs missed yesterday
    - Skill suggestions per outcome and overall
    - Weekly skill summary per outcome
    """
    try:
        data = aggregator.aggregate(date)
        return DashboardResponse(**data.to_dict())
    except Exception as e:
        raise to_http_exception(e)
