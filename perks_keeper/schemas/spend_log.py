"""Spend log schemas."""
from pydantic import BaseModel


class SpendLogCreate(BaseModel):
    """Purchase to count toward an offer."""

    amount: float
    note: str | None = None


class SpendLogResponse(BaseModel):
    """Logged purchase."""

    id: str
    offer_id: str
    amount: float
    note: str | None
    created_at: str

    class Config:
        from_attributes = True
