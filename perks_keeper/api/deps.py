"""Shared API dependencies."""
from perks_keeper.database import get_db

__all__ = ["get_db"]
