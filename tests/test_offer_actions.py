import os
import sys
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from perks_keeper.database import Base, configure_sqlite_engine
from perks_keeper.models.offer import Offer
from perks_keeper.models.spend_log import SpendLog
from perks_keeper.models.stats import AppStats
from perks_keeper.services import offer_actions
from perks_keeper.services.errors import InputValidationError, OfferNotFoundError
from perks_keeper.services.offer_actions import (
    archive_offer,
    delete_offer_permanently,
    get_or_create_stats,
    list_spend_logs,
    log_spend,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)


def _session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite_engine(engine)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


def _add_offer(session, **overrides) -> Offer:
    fields = {
        "card_id": "card-1",
        "merchant": "Grocer",
        "category": "Grocery",
        "reward_type": "percentage",
        "rate": 0.05,
        "cashback_cap": 50.0,
        "reward_amount": 50.0,
        "spend_threshold": 1000.0,
        "total_spend_tracked": 0.0,
        "cashback_earned": 0.0,
        "status": "active",
        "credited_to_lifetime": 0,
        "expire_at": (NOW + timedelta(days=10)).isoformat(),
        "created_at": (NOW - timedelta(days=1)).isoformat(),
        "updated_at": (NOW - timedelta(days=1)).isoformat(),
    }
    fields.update(overrides)
    offer = Offer(**fields)
    session.add(offer)
    session.commit()
    return offer


def test_archive_credits_lifetime_stats_exactly_once():
    session = _session()
    offer = _add_offer(session, total_spend_tracked=400.0, cashback_earned=20.0)

    first = archive_offer(session, offer.id, now=NOW)
    second = archive_offer(session, offer.id, now=NOW + timedelta(days=3))

    stats = session.get(AppStats, "app")
    assert stats.lifetime_cashback_earned == pytest.approx(20.0)
    assert first.status == "archived"
    assert first.credited_to_lifetime is True
    assert second.archived_at == NOW

    stored = session.get(Offer, offer.id)
    assert stored.status == "archived"
    assert stored.credited_to_lifetime == 1
    assert stored.archived_at == NOW.isoformat()
    assert stored.updated_at == (NOW + timedelta(days=3)).isoformat()


def test_archive_recomputes_progress_before_crediting():
    session = _session()
    offer = _add_offer(session, total_spend_tracked=1200.0, cashback_earned=3.0)

    archived = archive_offer(session, offer.id, now=NOW)

    assert archived.cashback_earned == pytest.approx(50.0)
    assert session.get(AppStats, "app").lifetime_cashback_earned == pytest.approx(50.0)


def test_archive_accumulates_across_offers_rounded_to_cents():
    session = _session()
    first = _add_offer(session, total_spend_tracked=33.33, rate=0.1, cashback_cap=100.0)
    second = _add_offer(session, total_spend_tracked=66.67, rate=0.1, cashback_cap=100.0)

    archive_offer(session, first.id, now=NOW)
    archive_offer(session, second.id, now=NOW)

    assert session.get(AppStats, "app").lifetime_cashback_earned == pytest.approx(10.0)


def test_archive_missing_offer_is_a_no_op():
    session = _session()
    get_or_create_stats(session, NOW).lifetime_cashback_earned = 12.5
    session.commit()

    assert archive_offer(session, "does-not-exist", now=NOW) is None
    assert session.get(AppStats, "app").lifetime_cashback_earned == 12.5


def test_archive_failure_rolls_back_stats(monkeypatch):
    session = _session()
    offer = _add_offer(session, total_spend_tracked=400.0, cashback_earned=20.0)

    def fail(row, snapshot):
        raise RuntimeError("disk full")

    monkeypatch.setattr(offer_actions, "apply_snapshot", fail)

    with pytest.raises(RuntimeError, match="disk full"):
        archive_offer(session, offer.id, now=NOW)

    assert session.get(AppStats, "app") is None
    assert session.get(Offer, offer.id).status == "active"


def test_delete_removes_offer_and_its_spend_logs():
    session = _session()
    offer = _add_offer(session)
    other = _add_offer(session, merchant="Other")
    log_spend(session, offer.id, 10.0, now=NOW)
    log_spend(session, offer.id, 15.0, now=NOW)
    log_spend(session, other.id, 5.0, now=NOW)
    offer_id = offer.id

    delete_offer_permanently(session, offer_id)

    assert session.get(Offer, offer_id) is None
    assert session.query(SpendLog).filter(SpendLog.offer_id == offer_id).count() == 0
    assert session.query(SpendLog).filter(SpendLog.offer_id == other.id).count() == 1


def test_delete_missing_offer_does_not_raise():
    session = _session()

    delete_offer_permanently(session, "does-not-exist")


def test_log_spend_updates_running_total_and_progress():
    session = _session()
    offer = _add_offer(session, total_spend_tracked=990.1)

    spend_log = log_spend(session, offer.id, 9.95, note="  weekly shop ", now=NOW)

    stored = session.get(Offer, offer.id)
    assert stored.total_spend_tracked == 1000.05
    assert stored.cashback_earned == pytest.approx(50.0)
    assert stored.status == "maxed"
    assert stored.updated_at == NOW.isoformat()
    assert spend_log.note == "weekly shop"
    assert [log.amount for log in list_spend_logs(session, offer.id)] == [9.95]


def test_log_spend_on_missing_offer_writes_nothing():
    session = _session()

    with pytest.raises(OfferNotFoundError):
        log_spend(session, "does-not-exist", 10.0, now=NOW)

    assert session.query(SpendLog).count() == 0


@pytest.mark.parametrize("amount", [0.0, -5.0, float("nan"), float("inf")])
def test_log_spend_rejects_invalid_amounts(amount):
    session = _session()
    offer = _add_offer(session)

    with pytest.raises(InputValidationError, match="greater than \\$0"):
        log_spend(session, offer.id, amount, now=NOW)

    assert session.query(SpendLog).count() == 0
    assert session.get(Offer, offer.id).total_spend_tracked == 0.0


def test_get_or_create_stats_seeds_singleton():
    session = _session()

    stats = get_or_create_stats(session, NOW)
    session.commit()

    assert stats.id == "app"
    assert stats.lifetime_cashback_earned == 0.0
    assert get_or_create_stats(session, NOW) is stats
    assert session.query(AppStats).count() == 1
