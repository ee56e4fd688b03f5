"""Spend log model."""
import uuid

from sqlalchemy import Column, Float, String, Text

from perks_keeper.clock import utcnow_iso
from perks_keeper.database import Base


class SpendLog(Base):
    """Append-only purchase entry counted toward an offer."""

    __tablename__ = "spend_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    offer_id = Column(String(36), nullable=False, index=True)  # Cleaned up with the offer, not an FK
    amount = Column(Float, nullable=False)
    note = Column(Text)
    created_at = Column(String(26), default=utcnow_iso, index=True)
