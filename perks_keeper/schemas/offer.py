"""Offer schemas."""
from datetime import date, datetime
import math
from typing import Any, Literal

from pydantic import BaseModel, field_validator, model_validator

OfferCategory = Literal["Dining", "Travel", "Grocery", "Gas", "Online", "Other"]
OfferStatus = Literal["active", "expired", "maxed", "archived"]
RewardType = Literal["percentage", "threshold"]


class OfferSnapshot(BaseModel):
    """In-memory copy of an offer row passed between the math and persistence layers.

    Pre-v3 rows may lack ``reward_type``, ``reward_amount`` and
    ``spend_threshold``; missing values fall back the same way the
    migrations backfill them.
    """

    id: str
    card_id: str
    merchant: str
    category: str
    note: str | None = None

    reward_type: RewardType = "percentage"
    rate: float = 0.0
    cashback_cap: float = 0.0
    reward_amount: float | None = None
    spend_threshold: float | None = None

    total_spend_tracked: float = 0.0
    cashback_earned: float = 0.0

    status: OfferStatus = "active"
    archived_at: datetime | None = None
    credited_to_lifetime: bool = False

    expire_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("reward_type", mode="before")
    @classmethod
    def default_reward_type(cls, v: Any) -> Any:
        return v or "percentage"

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        return v or "active"

    @field_validator("credited_to_lifetime", mode="before")
    @classmethod
    def int_to_bool(cls, v: Any) -> bool:
        if v is None:
            return False
        return bool(v)

    @field_validator("rate", "cashback_cap", "total_spend_tracked", "cashback_earned", mode="before")
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    class Config:
        from_attributes = True


class OfferStats(BaseModel):
    """Display projection of an offer's progress."""

    earned: float
    remain_cashback: float
    remain_spend_to_cap: float
    percent: float  # 0..1


class OfferInput(BaseModel):
    """Create/edit form for an offer.

    Percentage offers take ``rate_percent`` (5 means 5%) and ``cashback_cap``;
    threshold offers take ``spend_threshold`` and ``reward_amount``.
    ``cashback_earned`` is an optional manual override of the accrual.
    """

    merchant: str = ""
    card_id: str = ""
    category: OfferCategory = "Other"
    reward_type: RewardType = "percentage"
    expire_date: date | None = None
    total_spend_tracked: float = 0.0
    cashback_earned: float = 0.0
    rate_percent: float | None = None
    cashback_cap: float | None = None
    spend_threshold: float | None = None
    reward_amount: float | None = None
    note: str | None = None

    @model_validator(mode="after")
    def check_terms(self) -> "OfferInput":
        if not self.merchant.strip():
            raise ValueError("Merchant name is required.")
        if not self.card_id:
            raise ValueError("Select a linked card.")
        if self.expire_date is None:
            raise ValueError("Expiration date is required.")
        if not math.isfinite(self.total_spend_tracked) or self.total_spend_tracked < 0:
            raise ValueError("Tracked spend cannot be negative.")

        if self.reward_type == "threshold":
            if not _is_positive(self.spend_threshold):
                raise ValueError("Spend threshold must be greater than 0.")
            if not _is_positive(self.reward_amount):
                raise ValueError("Reward amount must be greater than 0.")
            return self

        if not _is_positive(self.rate_percent):
            raise ValueError("Cashback rate must be greater than 0.")
        if not _is_positive(self.cashback_cap):
            raise ValueError("Cashback cap must be greater than 0.")
        if not math.isfinite(self.cashback_earned) or self.cashback_earned < 0:
            raise ValueError("Cashback earned cannot be negative.")
        return self


def _is_positive(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


class OfferResponse(BaseModel):
    """Offer with its display stats and card label."""

    id: str
    card_id: str
    card_name: str
    merchant: str
    category: str
    note: str | None
    reward_type: RewardType
    rate: float
    cashback_cap: float
    reward_amount: float | None
    spend_threshold: float | None
    total_spend_tracked: float
    cashback_earned: float
    status: OfferStatus
    archived_at: datetime | None
    credited_to_lifetime: bool
    expire_at: datetime
    days_left: int
    created_at: datetime | None
    updated_at: datetime | None
    stats: OfferStats
