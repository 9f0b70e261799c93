"""Raffle discovery and fetching for the raffle toolkit."""

from .models import UNKNOWN, CallSpec, RaffleRecord, RaffleState
from .service import RaffleService

__all__ = [
    "RaffleService",
    "RaffleRecord",
    "RaffleState",
    "CallSpec",
    "UNKNOWN",
]
