"""Lifecycle actions: archive, permanent delete and spend logging.

Each action runs in a single transaction; a failure part way through rolls
back every write it made.
"""
from datetime import datetime
import logging
import math

from sqlalchemy.orm import Session

from perks_keeper.clock import utcnow
from perks_keeper.database import atomic
from perks_keeper.models.offer import Offer
from perks_keeper.models.spend_log import SpendLog
from perks_keeper.models.stats import STATS_KEY, AppStats
from perks_keeper.schemas.offer import OfferSnapshot
from perks_keeper.services.errors import InputValidationError, OfferNotFoundError
from perks_keeper.services.offer_math import recalc_offer_progress
from perks_keeper.services.offer_status import normalize_offer
from perks_keeper.services.offer_store import apply_snapshot, to_snapshot

logger = logging.getLogger(__name__)


def get_or_create_stats(db: Session, now: datetime | None = None) -> AppStats:
    """Load the singleton stats row, creating it at zero on first access."""
    stats = db.get(AppStats, STATS_KEY)
    if stats is None:
        stats = AppStats(
            id=STATS_KEY,
            lifetime_cashback_earned=0.0,
            last_updated_at=(now or utcnow()).isoformat(),
        )
        db.add(stats)
        db.flush()
    return stats


def archive_offer(db: Session, offer_id: str, now: datetime | None = None) -> OfferSnapshot | None:
    """Archive an offer and credit its final earnings to lifetime stats once.

    A missing offer is a no-op. Re-archiving keeps the original
    ``archived_at`` and does not credit the earnings again.
    """
    if now is None:
        now = utcnow()

    with atomic(db):
        row = db.get(Offer, offer_id)
        if row is None:
            logger.debug(f"Archive skipped, offer {offer_id} not found")
            return None

        finalized = recalc_offer_progress(to_snapshot(row))
        finalized = finalized.model_copy(update={
            "status": "archived",
            "archived_at": finalized.archived_at or now,
            "updated_at": now,
        })

        if not finalized.credited_to_lifetime:
            stats = get_or_create_stats(db, now)
            stats.lifetime_cashback_earned = round(
                stats.lifetime_cashback_earned + finalized.cashback_earned, 2
            )
            stats.last_updated_at = now.isoformat()
            finalized = finalized.model_copy(update={"credited_to_lifetime": True})
            logger.info(f"Credited {finalized.cashback_earned:.2f} from offer {offer_id} to lifetime stats")

        apply_snapshot(row, finalized)

    logger.info(f"Archived offer {offer_id}")
    return finalized


def delete_offer_permanently(db: Session, offer_id: str) -> None:
    """Delete an offer and every spend log that references it."""
    with atomic(db):
        deleted_logs = (
            db.query(SpendLog)
            .filter(SpendLog.offer_id == offer_id)
            .delete(synchronize_session=False)
        )
        deleted = db.query(Offer).filter(Offer.id == offer_id).delete(synchronize_session=False)

    if deleted:
        logger.info(f"Deleted offer {offer_id} and {deleted_logs} spend log(s)")


def log_spend(
    db: Session,
    offer_id: str,
    amount: float,
    note: str | None = None,
    now: datetime | None = None,
) -> SpendLog:
    """Record a purchase and add it to the offer's running total atomically.

    Progress and status are re-derived from the new total so the stored
    ``cashback_earned`` never lags behind the spend.
    """
    if not math.isfinite(amount) or amount <= 0:
        raise InputValidationError("Enter a valid purchase amount greater than $0.")
    if now is None:
        now = utcnow()

    with atomic(db):
        row = db.get(Offer, offer_id)
        if row is None:
            raise OfferNotFoundError(offer_id)

        spend_log = SpendLog(
            offer_id=offer_id,
            amount=amount,
            note=(note or "").strip() or None,
            created_at=now.isoformat(),
        )
        db.add(spend_log)

        offer = to_snapshot(row)
        offer = offer.model_copy(update={
            "total_spend_tracked": round(offer.total_spend_tracked + amount, 2),
            "updated_at": now,
        })
        offer = normalize_offer(recalc_offer_progress(offer), now)
        apply_snapshot(row, offer)

    logger.info(f"Logged {amount:.2f} against offer {offer_id}")
    return spend_log


def list_spend_logs(db: Session, offer_id: str) -> list[SpendLog]:
    """Spend logs for an offer, newest first."""
    return (
        db.query(SpendLog)
        .filter(SpendLog.offer_id == offer_id)
        .order_by(SpendLog.created_at.desc())
        .all()
    )
