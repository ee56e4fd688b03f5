"""Offer accrual math.

Every function here is total over stored offers, including degenerate
ones (zero rate, zero threshold, hand-edited progress): they never divide
by zero or raise, so corrupted rows still render.
"""
from datetime import datetime
import math

from perks_keeper.clock import utcnow
from perks_keeper.schemas.offer import OfferSnapshot, OfferStats

# Money comparisons treat a gap under one cent as closed.
EPSILON = 1e-2
# Gaps are rounded to this many places first, so 10 - 9.99 reads as a full cent.
GAP_PLACES = 6
DAY_SECONDS = 24 * 60 * 60


def _gap_closed(gap: float) -> bool:
    return round(gap, GAP_PLACES) < EPSILON


def _threshold_terms(offer: OfferSnapshot) -> tuple[float, float]:
    """Return (spend_threshold, reward) for a threshold offer."""
    threshold = offer.spend_threshold or 0.0
    reward = offer.reward_amount if offer.reward_amount is not None else offer.cashback_cap
    return threshold, reward


def recalc_offer_progress(offer: OfferSnapshot) -> OfferSnapshot:
    """Recompute ``cashback_earned`` from tracked spend.

    Percentage offers accrue ``rate`` per dollar up to ``cashback_cap``;
    a non-positive rate cannot accrue and the offer is returned unchanged.
    Threshold offers pay ``reward_amount`` once spend reaches the threshold,
    and never pay when the threshold is not positive.
    """
    if offer.reward_type == "threshold":
        threshold, reward = _threshold_terms(offer)
        if threshold <= 0:
            return offer.model_copy(update={"cashback_earned": 0.0})
        earned = reward if offer.total_spend_tracked >= threshold else 0.0
        return offer.model_copy(update={"cashback_earned": earned})

    if offer.rate <= 0:
        return offer

    spend_cap = offer.cashback_cap / offer.rate
    effective_spend = min(offer.total_spend_tracked, spend_cap)
    cashback_earned = min(effective_spend * offer.rate, offer.cashback_cap)
    return offer.model_copy(update={"cashback_earned": cashback_earned})


def compute_offer_stats(offer: OfferSnapshot) -> OfferStats:
    """Project earned, remaining cashback/spend and progress for display."""
    if offer.reward_type == "threshold":
        threshold, reward = _threshold_terms(offer)
        if threshold <= 0:
            return OfferStats(
                earned=offer.cashback_earned,
                remain_cashback=max(0.0, reward - offer.cashback_earned),
                remain_spend_to_cap=0.0,
                percent=0.0,
            )
        earned = reward if offer.total_spend_tracked >= threshold else 0.0
        return OfferStats(
            earned=earned,
            remain_cashback=max(0.0, reward - earned),
            remain_spend_to_cap=max(0.0, threshold - offer.total_spend_tracked),
            percent=min(max(offer.total_spend_tracked / threshold, 0.0), 1.0),
        )

    if offer.rate <= 0:
        return OfferStats(earned=0.0, remain_cashback=0.0, remain_spend_to_cap=0.0, percent=0.0)

    spend_cap = offer.cashback_cap / offer.rate
    effective_spend = min(offer.total_spend_tracked, spend_cap)
    earned = min(effective_spend * offer.rate, offer.cashback_cap)
    remain_cashback = max(0.0, offer.cashback_cap - earned)
    remain_spend_to_cap = remain_cashback / offer.rate if remain_cashback > 0 else 0.0
    percent = min(max(earned / offer.cashback_cap, 0.0), 1.0) if offer.cashback_cap > 0 else 0.0
    return OfferStats(
        earned=earned,
        remain_cashback=remain_cashback,
        remain_spend_to_cap=remain_spend_to_cap,
        percent=percent,
    )


def is_maxed_out(offer: OfferSnapshot) -> bool:
    """Whether the offer has paid out everything it can.

    Archived offers are never maxed; archived overrides every other state.
    """
    if offer.status == "archived":
        return False
    if offer.reward_type == "threshold":
        threshold, _ = _threshold_terms(offer)
        if threshold <= 0:
            return False
        return _gap_closed(threshold - offer.total_spend_tracked)
    if offer.cashback_cap <= 0 or offer.rate <= 0:
        return False
    return _gap_closed(offer.cashback_cap - offer.cashback_earned)


def get_remaining_spend_to_cap(offer: OfferSnapshot) -> float:
    """Dollars of spend left before the offer stops paying.

    Percentage offers with a non-positive rate can never max out and sort
    last (infinity).
    """
    if offer.reward_type == "threshold":
        threshold, _ = _threshold_terms(offer)
        if threshold <= 0:
            return 0.0
        gap = threshold - offer.total_spend_tracked
        return 0.0 if _gap_closed(gap) else gap
    if offer.rate <= 0:
        return math.inf
    remain_cashback = max(0.0, offer.cashback_cap - offer.cashback_earned)
    if _gap_closed(remain_cashback):
        return 0.0
    return remain_cashback / offer.rate


def get_days_left(expire_at: datetime, now: datetime | None = None) -> int:
    """Whole days until ``expire_at``, rounded up; negative once expired."""
    if now is None:
        now = utcnow()
    return math.ceil((expire_at - now).total_seconds() / DAY_SECONDS)


def offer_sort_key(offer: OfferSnapshot) -> tuple[datetime, float, datetime]:
    """Order by soonest expiry, then least spend left to cap, then oldest."""
    return (
        offer.expire_at,
        get_remaining_spend_to_cap(offer),
        offer.created_at or datetime.min,
    )
