"""SQLAlchemy models package."""
from perks_keeper.models.card import Card
from perks_keeper.models.offer import Offer
from perks_keeper.models.spend_log import SpendLog
from perks_keeper.models.stats import AppStats

__all__ = [
    "Card",
    "Offer",
    "SpendLog",
    "AppStats",
]
