"""Offers API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from perks_keeper.api.deps import get_db
from perks_keeper.clock import utcnow
from perks_keeper.models.card import Card
from perks_keeper.schemas.offer import (
    OfferCategory,
    OfferInput,
    OfferResponse,
    OfferSnapshot,
    OfferStatus,
)
from perks_keeper.schemas.spend_log import SpendLogCreate, SpendLogResponse
from perks_keeper.services.errors import InputValidationError, OfferNotFoundError
from perks_keeper.services.offer_actions import (
    archive_offer,
    delete_offer_permanently,
    list_spend_logs,
    log_spend,
)
from perks_keeper.services.offer_math import compute_offer_stats, get_days_left
from perks_keeper.services.offer_store import create_offer, get_offer, list_offers, update_offer

router = APIRouter(prefix="/offers", tags=["offers"])

CARD_UNAVAILABLE = "Card unavailable"


def _card_names(db: Session) -> dict[str, str]:
    return {card.id: card.name for card in db.query(Card).all()}


def _to_response(offer: OfferSnapshot, card_names: dict[str, str]) -> OfferResponse:
    return OfferResponse(
        **offer.model_dump(),
        card_name=card_names.get(offer.card_id, CARD_UNAVAILABLE),
        days_left=get_days_left(offer.expire_at, utcnow()),
        stats=compute_offer_stats(offer),
    )


def _offer_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Offer no longer exists.",
    )


@router.get("", response_model=list[OfferResponse])
def get_offers(
    status_filter: OfferStatus | None = Query(None, alias="status", description="Filter by status"),
    category: OfferCategory | None = Query(None, description="Filter by category"),
    db: Session = Depends(get_db),
):
    """List offers soonest-expiring first, with statuses refreshed."""
    offers = list_offers(db, status=status_filter, category=category)
    card_names = _card_names(db)
    return [_to_response(offer, card_names) for offer in offers]


@router.post("", response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
def add_offer(offer_data: OfferInput, db: Session = Depends(get_db)):
    """Create an offer."""
    offer = create_offer(db, offer_data)
    return _to_response(offer, _card_names(db))


@router.get("/{offer_id}", response_model=OfferResponse)
def read_offer(offer_id: str, db: Session = Depends(get_db)):
    """Get a single offer."""
    offer = get_offer(db, offer_id)
    if offer is None:
        raise _offer_not_found()
    return _to_response(offer, _card_names(db))


@router.patch("/{offer_id}", response_model=OfferResponse)
def edit_offer(offer_id: str, offer_data: OfferInput, db: Session = Depends(get_db)):
    """Replace an offer's terms and progress."""
    try:
        offer = update_offer(db, offer_id, offer_data)
    except OfferNotFoundError:
        raise _offer_not_found()
    return _to_response(offer, _card_names(db))


@router.post("/{offer_id}/archive", status_code=status.HTTP_204_NO_CONTENT)
def archive(offer_id: str, db: Session = Depends(get_db)):
    """Archive an offer and credit its earnings to lifetime stats."""
    archive_offer(db, offer_id)


@router.delete("/{offer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(offer_id: str, db: Session = Depends(get_db)):
    """Permanently delete an offer and its spend history."""
    delete_offer_permanently(db, offer_id)


@router.post("/{offer_id}/spend", response_model=SpendLogResponse, status_code=status.HTTP_201_CREATED)
def add_spend(offer_id: str, spend_data: SpendLogCreate, db: Session = Depends(get_db)):
    """Log a purchase against an offer."""
    try:
        spend_log = log_spend(db, offer_id, spend_data.amount, spend_data.note)
    except InputValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )
    except OfferNotFoundError:
        raise _offer_not_found()
    return spend_log


@router.get("/{offer_id}/spend", response_model=list[SpendLogResponse])
def get_spend(offer_id: str, db: Session = Depends(get_db)):
    """List purchases logged against an offer, newest first."""
    return list_spend_logs(db, offer_id)
