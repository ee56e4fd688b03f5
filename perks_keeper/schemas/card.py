"""Card schemas."""
from typing import Literal

from pydantic import BaseModel

CardIssuer = Literal["Chase", "Amex", "Citi", "Other"]


class CardCreate(BaseModel):
    """Request to add a card."""

    issuer: CardIssuer = "Chase"
    name: str


class CardResponse(BaseModel):
    """Stored card."""

    id: str
    issuer: str
    name: str
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True
