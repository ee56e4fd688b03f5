"""Cards API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from perks_keeper.api.deps import get_db
from perks_keeper.database import atomic
from perks_keeper.models.card import Card
from perks_keeper.schemas.card import CardCreate, CardResponse

router = APIRouter(prefix="/cards", tags=["cards"])


@router.get("", response_model=list[CardResponse])
def list_cards(db: Session = Depends(get_db)):
    """Get all cards ordered by name."""
    return db.query(Card).order_by(Card.name).all()


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
def create_card(card_data: CardCreate, db: Session = Depends(get_db)):
    """Add a card."""
    name = card_data.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Card name is required.",
        )

    card = Card(issuer=card_data.issuer, name=name)
    with atomic(db):
        db.add(card)
    db.refresh(card)
    return card


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_card(card_id: str, db: Session = Depends(get_db)):
    """Remove a card. Linked offers are kept and show the card as unavailable."""
    card = db.get(Card, card_id)
    if not card:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found",
        )

    with atomic(db):
        db.delete(card)
