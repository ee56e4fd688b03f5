"""Dashboard summary."""
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from perks_keeper.clock import utcnow
from perks_keeper.database import atomic
from perks_keeper.schemas.stats import StatsResponse
from perks_keeper.services.offer_actions import get_or_create_stats
from perks_keeper.services.offer_math import compute_offer_stats
from perks_keeper.services.offer_store import list_offers


def get_dashboard_summary(
    db: Session,
    expiring_within_days: int = 3,
    now: datetime | None = None,
) -> StatsResponse:
    """Lifetime cashback plus earned total and expiring count of active offers."""
    if now is None:
        now = utcnow()

    with atomic(db):
        stats = get_or_create_stats(db, now)
        lifetime = stats.lifetime_cashback_earned
        last_updated_at = stats.last_updated_at

    active = list_offers(db, status="active", now=now)
    horizon = now + timedelta(days=expiring_within_days)
    expiring_soon = [offer for offer in active if now < offer.expire_at <= horizon]

    return StatsResponse(
        lifetime_cashback_earned=lifetime,
        last_updated_at=last_updated_at,
        active_offers=len(active),
        active_earned=round(sum(compute_offer_stats(offer).earned for offer in active), 2),
        expiring_soon_count=len(expiring_soon),
    )
