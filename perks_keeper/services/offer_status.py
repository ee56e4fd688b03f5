"""Offer status normalization."""
from datetime import datetime

from perks_keeper.clock import utcnow
from perks_keeper.schemas.offer import OfferSnapshot, OfferStatus
from perks_keeper.services.offer_math import is_maxed_out


def compute_status(offer: OfferSnapshot, now: datetime | None = None) -> OfferStatus:
    """Derive the canonical status.

    Precedence is archived > expired > maxed > active: an offer that is past
    its expiry and fully maxed reports ``expired``.
    """
    if offer.status == "archived":
        return "archived"
    if now is None:
        now = utcnow()
    if now > offer.expire_at:
        return "expired"
    if is_maxed_out(offer):
        return "maxed"
    return "active"


def normalize_offer(offer: OfferSnapshot, now: datetime | None = None) -> OfferSnapshot:
    """Return ``offer`` with its status reconciled.

    The same object comes back when nothing changes, so callers can persist
    only when ``normalize_offer(o) is not o``.
    """
    status = compute_status(offer, now)
    if status != offer.status and offer.status != "archived":
        return offer.model_copy(update={"status": status})
    return offer
