"""Raffle Toolkit - resilient on-chain raffle data aggregation."""

__version__ = "0.1.0"

from .raffles import RaffleService
from .shared.aggregator import Aggregator

__all__ = ["RaffleService", "Aggregator"]
