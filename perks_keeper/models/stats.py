"""Lifetime stats model."""
from sqlalchemy import Column, Float, String

from perks_keeper.clock import utcnow_iso
from perks_keeper.database import Base

STATS_KEY = "app"


class AppStats(Base):
    """Singleton row (id ``"app"``) accumulating cashback from archived offers."""

    __tablename__ = "stats"

    id = Column(String(16), primary_key=True, default=STATS_KEY)
    lifetime_cashback_earned = Column(Float, nullable=False, default=0.0)
    last_updated_at = Column(String(26), default=utcnow_iso)
