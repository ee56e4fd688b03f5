"""Offer reads and writes with status refresh on every load."""
from datetime import datetime
import logging
import uuid

from sqlalchemy.orm import Session

from perks_keeper.clock import utcnow
from perks_keeper.config import get_settings
from perks_keeper.database import atomic
from perks_keeper.models.offer import Offer
from perks_keeper.schemas.offer import OfferInput, OfferSnapshot
from perks_keeper.services.errors import OfferNotFoundError
from perks_keeper.services.offer_form import build_offer_fields
from perks_keeper.services.offer_math import offer_sort_key, recalc_offer_progress
from perks_keeper.services.offer_status import normalize_offer

logger = logging.getLogger(__name__)
settings = get_settings()


def to_snapshot(row: Offer) -> OfferSnapshot:
    """Copy an ORM row into an offer snapshot."""
    return OfferSnapshot.model_validate(row)


def apply_snapshot(row: Offer, snapshot: OfferSnapshot) -> Offer:
    """Write snapshot fields back onto an ORM row in storage form."""
    for name, value in snapshot.model_dump(exclude={"id"}).items():
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, bool):
            value = int(value)
        setattr(row, name, value)
    return row


def refresh_offers(db: Session, rows: list[Offer], now: datetime | None = None) -> list[OfferSnapshot]:
    """Normalize ``rows`` and persist only the statuses that changed, in one transaction."""
    if now is None:
        now = utcnow()
    snapshots = []
    changed = 0
    with atomic(db):
        for row in rows:
            snapshot = to_snapshot(row)
            normalized = normalize_offer(snapshot, now)
            if normalized is not snapshot:
                apply_snapshot(row, normalized)
                changed += 1
            snapshots.append(normalized)
    if changed:
        logger.info(f"Normalized status of {changed} offer(s)")
    return snapshots


def list_offers(
    db: Session,
    status: str | None = None,
    category: str | None = None,
    now: datetime | None = None,
) -> list[OfferSnapshot]:
    """All offers, status-refreshed, ordered by expiry then remaining spend."""
    rows = db.query(Offer).all()
    offers = refresh_offers(db, rows, now)
    if status:
        offers = [o for o in offers if o.status == status]
    if category:
        offers = [o for o in offers if o.category == category]
    return sorted(offers, key=offer_sort_key)


def get_offer(db: Session, offer_id: str, now: datetime | None = None) -> OfferSnapshot | None:
    row = db.get(Offer, offer_id)
    if row is None:
        return None
    return refresh_offers(db, [row], now)[0]


def create_offer(
    db: Session,
    data: OfferInput,
    now: datetime | None = None,
    tz_name: str | None = None,
) -> OfferSnapshot:
    """Insert a new offer with progress and status already derived."""
    if now is None:
        now = utcnow()
    fields = build_offer_fields(data, tz_name or settings.expiry_timezone)
    draft = OfferSnapshot(
        id=str(uuid.uuid4()),
        **fields,
        status="active",
        archived_at=None,
        credited_to_lifetime=False,
        created_at=now,
        updated_at=now,
    )
    offer = normalize_offer(recalc_offer_progress(draft), now)

    with atomic(db):
        db.add(apply_snapshot(Offer(id=offer.id), offer))

    logger.info(f"Created {offer.reward_type} offer {offer.id} for {offer.merchant}")
    return offer


def update_offer(
    db: Session,
    offer_id: str,
    data: OfferInput,
    now: datetime | None = None,
    tz_name: str | None = None,
) -> OfferSnapshot:
    """Replace an offer's terms, keeping identity and lifecycle fields.

    Archived offers keep their archived status.
    """
    if now is None:
        now = utcnow()
    fields = build_offer_fields(data, tz_name or settings.expiry_timezone)

    with atomic(db):
        row = db.get(Offer, offer_id)
        if row is None:
            raise OfferNotFoundError(offer_id)
        existing = to_snapshot(row)
        updated = recalc_offer_progress(existing.model_copy(update={**fields, "updated_at": now}))
        if existing.status != "archived":
            updated = normalize_offer(updated, now)
        apply_snapshot(row, updated)

    return updated
