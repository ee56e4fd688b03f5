"""Stats schemas."""
from pydantic import BaseModel


class StatsResponse(BaseModel):
    """Dashboard summary."""

    lifetime_cashback_earned: float
    last_updated_at: str | None
    active_offers: int
    active_earned: float
    expiring_soon_count: int
