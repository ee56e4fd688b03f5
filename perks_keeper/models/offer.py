"""Offer model."""
import uuid

from sqlalchemy import Column, Float, Integer, String, Text

from perks_keeper.clock import utcnow_iso
from perks_keeper.database import Base


class Offer(Base):
    """A card-linked reward offer and its stored progress."""

    __tablename__ = "offers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    card_id = Column(String(36), nullable=False, index=True)  # No FK: offers outlive cards
    merchant = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False, index=True)
    note = Column(Text)

    # Reward terms
    reward_type = Column(String(20), index=True)  # percentage, threshold
    rate = Column(Float, nullable=False, default=0.0)  # Fraction, e.g. 0.05
    cashback_cap = Column(Float, nullable=False, default=0.0)
    reward_amount = Column(Float)
    spend_threshold = Column(Float)

    # Progress (derived, stored for fast reads)
    total_spend_tracked = Column(Float, nullable=False, default=0.0)
    cashback_earned = Column(Float, nullable=False, default=0.0, index=True)

    # Lifecycle
    status = Column(String(20), index=True)  # active, expired, maxed, archived
    archived_at = Column(String(26))
    credited_to_lifetime = Column(Integer, default=0)  # SQLite boolean

    # Timestamps
    expire_at = Column(String(26), nullable=False, index=True)  # 23:59:59 in the expiry zone, as UTC
    created_at = Column(String(26), default=utcnow_iso, index=True)
    updated_at = Column(String(26), default=utcnow_iso, index=True)  # Set explicitly by services
