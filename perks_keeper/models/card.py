"""Card model."""
import uuid

from sqlalchemy import Column, String

from perks_keeper.clock import utcnow_iso
from perks_keeper.database import Base


class Card(Base):
    """A credit card that offers are linked to.

    Offers keep their ``card_id`` when the card is deleted; there is no
    foreign key so they survive as "card unavailable".
    """

    __tablename__ = "cards"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    issuer = Column(String(20), nullable=False, index=True)  # Chase, Amex, Citi, Other
    name = Column(String(100), nullable=False, index=True)
    created_at = Column(String(26), default=utcnow_iso, index=True)
    updated_at = Column(String(26), default=utcnow_iso, onupdate=utcnow_iso, index=True)
