"""Stats API endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from perks_keeper.api.deps import get_db
from perks_keeper.config import get_settings
from perks_keeper.schemas.stats import StatsResponse
from perks_keeper.services.stats import get_dashboard_summary

router = APIRouter(prefix="/stats", tags=["stats"])
settings = get_settings()


@router.get("", response_model=StatsResponse)
def get_stats(db: Session = Depends(get_db)):
    """Lifetime cashback plus a summary of active offers."""
    return get_dashboard_summary(db, expiring_within_days=settings.expiring_soon_days)
