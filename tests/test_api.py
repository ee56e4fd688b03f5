import os
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from perks_keeper.api import deps
from perks_keeper.api.cards import router as cards_router
from perks_keeper.api.offers import router as offers_router
from perks_keeper.api.stats import router as stats_router
from perks_keeper.database import Base
from perks_keeper.models.spend_log import SpendLog


def _build_test_client():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    app = FastAPI()
    app.include_router(cards_router, prefix="/api")
    app.include_router(offers_router, prefix="/api")
    app.include_router(stats_router, prefix="/api")

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    return TestClient(app), TestingSessionLocal


def _create_card(client: TestClient, name: str = "Sapphire Preferred") -> dict:
    response = client.post("/api/cards", json={"issuer": "Chase", "name": name})
    assert response.status_code == 201
    return response.json()


def _create_offer(client: TestClient, card_id: str, **overrides) -> dict:
    payload = {
        "merchant": "Corner Bistro",
        "card_id": card_id,
        "category": "Dining",
        "reward_type": "percentage",
        "expire_date": "2099-12-31",
        "rate_percent": 5,
        "cashback_cap": 50,
    }
    payload.update(overrides)
    response = client.post("/api/offers", json=payload)
    assert response.status_code == 201
    return response.json()


def test_cards_are_listed_by_name():
    client, _ = _build_test_client()
    _create_card(client, "Platinum")
    _create_card(client, "Freedom")

    response = client.get("/api/cards")

    assert response.status_code == 200
    assert [card["name"] for card in response.json()] == ["Freedom", "Platinum"]


def test_blank_card_name_is_rejected():
    client, _ = _build_test_client()

    response = client.post("/api/cards", json={"issuer": "Amex", "name": "   "})

    assert response.status_code == 422
    assert response.json()["detail"] == "Card name is required."


def test_create_offer_returns_progress_and_card_name():
    client, _ = _build_test_client()
    card = _create_card(client)

    offer = _create_offer(client, card["id"], total_spend_tracked=400, cashback_earned=20)

    assert offer["card_name"] == "Sapphire Preferred"
    assert offer["status"] == "active"
    assert offer["cashback_earned"] == 20.0
    assert offer["stats"]["remain_cashback"] == pytest.approx(30.0)
    assert offer["stats"]["remain_spend_to_cap"] == pytest.approx(600.0)
    assert offer["days_left"] > 0

    listed = client.get("/api/offers").json()
    assert [o["id"] for o in listed] == [offer["id"]]


def test_blank_merchant_is_rejected():
    client, _ = _build_test_client()
    card = _create_card(client)

    response = client.post(
        "/api/offers",
        json={
            "merchant": " ",
            "card_id": card["id"],
            "expire_date": "2099-12-31",
            "rate_percent": 5,
            "cashback_cap": 50,
        },
    )

    assert response.status_code == 422
    assert "Merchant name is required." in response.text


def test_missing_offer_returns_404():
    client, _ = _build_test_client()

    assert client.get("/api/offers/does-not-exist").status_code == 404


def test_log_spend_moves_offer_to_maxed():
    client, _ = _build_test_client()
    card = _create_card(client)
    offer = _create_offer(client, card["id"], total_spend_tracked=990, cashback_earned=49.5)

    response = client.post(f"/api/offers/{offer['id']}/spend", json={"amount": 10, "note": "dinner"})

    assert response.status_code == 201
    assert response.json()["amount"] == 10.0
    refreshed = client.get(f"/api/offers/{offer['id']}").json()
    assert refreshed["total_spend_tracked"] == 1000.0
    assert refreshed["status"] == "maxed"
    assert len(client.get(f"/api/offers/{offer['id']}/spend").json()) == 1


def test_log_spend_rejects_invalid_amount_and_missing_offer():
    client, _ = _build_test_client()
    card = _create_card(client)
    offer = _create_offer(client, card["id"])

    invalid = client.post(f"/api/offers/{offer['id']}/spend", json={"amount": 0})
    missing = client.post("/api/offers/does-not-exist/spend", json={"amount": 5})

    assert invalid.status_code == 422
    assert invalid.json()["detail"] == "Enter a valid purchase amount greater than $0."
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Offer no longer exists."


def test_archive_credits_lifetime_stats():
    client, _ = _build_test_client()
    card = _create_card(client)
    offer = _create_offer(client, card["id"], total_spend_tracked=400, cashback_earned=20)
    _create_offer(client, card["id"], merchant="Fuel Stop", total_spend_tracked=100, cashback_earned=5)

    assert client.post(f"/api/offers/{offer['id']}/archive").status_code == 204
    assert client.post(f"/api/offers/{offer['id']}/archive").status_code == 204

    stats = client.get("/api/stats").json()
    assert stats["lifetime_cashback_earned"] == 20.0
    assert stats["active_offers"] == 1
    assert stats["active_earned"] == 5.0
    assert stats["expiring_soon_count"] == 0

    archived = client.get("/api/offers", params={"status": "archived"}).json()
    assert [o["id"] for o in archived] == [offer["id"]]


def test_archive_missing_offer_is_silent():
    client, _ = _build_test_client()

    assert client.post("/api/offers/does-not-exist/archive").status_code == 204


def test_deleting_card_keeps_offer_as_unavailable():
    client, _ = _build_test_client()
    card = _create_card(client)
    offer = _create_offer(client, card["id"])

    assert client.delete(f"/api/cards/{card['id']}").status_code == 204

    refreshed = client.get(f"/api/offers/{offer['id']}").json()
    assert refreshed["card_name"] == "Card unavailable"


def test_delete_offer_removes_spend_history():
    client, SessionLocal = _build_test_client()
    card = _create_card(client)
    offer = _create_offer(client, card["id"])
    client.post(f"/api/offers/{offer['id']}/spend", json={"amount": 25})

    assert client.delete(f"/api/offers/{offer['id']}").status_code == 204

    assert client.get(f"/api/offers/{offer['id']}").status_code == 404
    with SessionLocal() as db:
        assert db.query(SpendLog).count() == 0
