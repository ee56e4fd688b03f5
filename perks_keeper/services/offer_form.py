"""Translate validated offer form input into stored offer fields."""
from typing import Any

from perks_keeper.schemas.offer import OfferInput
from perks_keeper.services.expiry import end_of_day
from perks_keeper.services.offer_math import EPSILON


def build_offer_fields(data: OfferInput, tz_name: str) -> dict[str, Any]:
    """Derive the stored reward terms and progress from form input.

    Money is rounded to cents and rates to six places. For percentage
    offers a manually entered earned amount that disagrees with the
    automatic accrual by more than a cent is treated as authoritative and
    the tracked spend is back-solved from it.
    """
    total_spend_tracked = round(data.total_spend_tracked, 2)
    fields: dict[str, Any] = {
        "merchant": data.merchant.strip(),
        "card_id": data.card_id,
        "category": data.category,
        "note": (data.note or "").strip() or None,
        "expire_at": end_of_day(data.expire_date, tz_name),
    }

    if data.reward_type == "threshold":
        spend_threshold = data.spend_threshold
        reward_amount = data.reward_amount
        manual_earned = min(max(0.0, data.cashback_earned), reward_amount)
        threshold_met = total_spend_tracked >= spend_threshold - EPSILON
        computed_earned = reward_amount if threshold_met else 0.0
        cashback_earned = max(manual_earned, computed_earned)
        fields.update(
            reward_type="threshold",
            rate=round(reward_amount / spend_threshold, 6),
            cashback_cap=round(reward_amount, 2),
            cashback_earned=round(min(cashback_earned, reward_amount), 2),
            total_spend_tracked=total_spend_tracked,
            reward_amount=round(reward_amount, 2),
            spend_threshold=round(spend_threshold, 2),
        )
        return fields

    rate = data.rate_percent / 100
    cashback_cap = data.cashback_cap
    spend_cap = cashback_cap / rate
    clamped_spend = min(max(total_spend_tracked, 0.0), spend_cap)
    auto_earned = min(clamped_spend * rate, cashback_cap)
    manual_earned = min(data.cashback_earned, cashback_cap)
    manual_differs = abs(manual_earned - auto_earned) > EPSILON

    if manual_differs:
        adjusted_spend = min(max(manual_earned / rate, 0.0), spend_cap)
        cashback_earned = manual_earned
    else:
        adjusted_spend = clamped_spend
        cashback_earned = auto_earned

    fields.update(
        reward_type="percentage",
        rate=rate,
        cashback_cap=cashback_cap,
        cashback_earned=round(cashback_earned, 2),
        total_spend_tracked=round(adjusted_spend, 2),
        reward_amount=round(cashback_cap, 2),
        spend_threshold=round(spend_cap, 2),
    )
    return fields
