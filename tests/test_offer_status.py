import os
import sys
from datetime import datetime, timedelta

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from perks_keeper.schemas.offer import OfferSnapshot
from perks_keeper.services.offer_status import compute_status, normalize_offer

NOW = datetime(2026, 3, 1, 12, 0, 0)


def make_offer(**overrides) -> OfferSnapshot:
    fields = {
        "id": "offer-1",
        "card_id": "card-1",
        "merchant": "Fuel Stop",
        "category": "Gas",
        "rate": 0.05,
        "cashback_cap": 50.0,
        "status": "active",
        "expire_at": NOW + timedelta(days=5),
    }
    fields.update(overrides)
    return OfferSnapshot(**fields)


def test_expired_takes_precedence_over_maxed():
    offer = make_offer(
        expire_at=NOW - timedelta(days=1),
        total_spend_tracked=1200.0,
        cashback_earned=50.0,
    )

    assert compute_status(offer, NOW) == "expired"
    assert normalize_offer(offer, NOW).status == "expired"


def test_offer_past_expiry_stored_as_active_normalizes_to_expired():
    offer = make_offer(expire_at=NOW - timedelta(days=1))

    normalized = normalize_offer(offer, NOW)

    assert normalized.status == "expired"
    assert offer.status == "active"


def test_offer_does_not_expire_at_the_expiry_instant():
    offer = make_offer(expire_at=NOW)

    assert compute_status(offer, NOW) == "active"
    assert compute_status(offer, NOW + timedelta(seconds=1)) == "expired"


def test_maxed_offer():
    offer = make_offer(total_spend_tracked=1000.0, cashback_earned=50.0)

    assert compute_status(offer, NOW) == "maxed"


def test_archived_is_sticky():
    offer = make_offer(status="archived", expire_at=NOW - timedelta(days=30))

    assert compute_status(offer, NOW) == "archived"
    assert normalize_offer(offer, NOW) is offer


def test_maxed_offer_reverts_to_active_when_progress_drops():
    offer = make_offer(status="maxed", cashback_earned=10.0)

    assert normalize_offer(offer, NOW).status == "active"


@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"status": "expired"},
        {"expire_at": NOW - timedelta(hours=1)},
        {"cashback_earned": 50.0},
        {"status": "archived"},
        {"rate": 0.0, "status": "maxed"},
        {"reward_type": "threshold", "spend_threshold": 100.0, "reward_amount": 20.0, "total_spend_tracked": 100.0},
    ],
)
def test_normalize_is_idempotent(overrides):
    once = normalize_offer(make_offer(**overrides), NOW)
    twice = normalize_offer(once, NOW)

    assert twice is once
    assert twice == once


def test_normalize_without_change_returns_same_object():
    offer = make_offer()

    assert normalize_offer(offer, NOW) is offer
