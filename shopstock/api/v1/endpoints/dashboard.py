# shopstock/api/v1/endpoints/dashboard.py
# type: ignore

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shopstock.database import get_db
from shopstock.models.auth import User
from shopstock.schemas.dashboard import DashboardStats
from shopstock.services.dashboard import DashboardAggregator
from shopstock.api.v1.endpoints.auth import get_current_user


router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def read_dashboard_stats(
    range: str = Query("today", description="today | week | month | year (anything else means today)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return DashboardAggregator(db).compute_stats(range)
