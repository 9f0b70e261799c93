"""
RaffleService - entry point for reading raffles from one chain

This service handles:
1. Address discovery through the raffle manager registry
2. Platform profile selection (constrained vs. unconstrained clients)
3. Batched detail fetching with per-call fallback
4. Caching of address lists and assembled collections
5. Search over the fetched collection

Only two conditions make a full fetch raise: the chain has no registry
(ContractsNotAvailableException) or the registry could not be read
(AddressDiscoveryException). Individual raffles that cannot be read are
dropped and reported in `last_summary`.
"""

from typing import Any, Dict, List, Optional

from raffle_toolkit.raffles.discovery import AddressDiscovery
from raffle_toolkit.raffles.fetcher import RaffleDetailFetcher
from raffle_toolkit.raffles.models import RaffleRecord
from raffle_toolkit.raffles.orchestrator import BatchOrchestrator, ProgressCallback
from raffle_toolkit.shared.aggregator import Aggregator
from raffle_toolkit.shared.constants import GlobalConstants
from raffle_toolkit.shared.exceptions import (
    AddressDiscoveryException,
    ContractsNotAvailableException,
)
from raffle_toolkit.shared.logging import get_logger
from raffle_toolkit.shared.profiles import platform_class, select_profile
from raffle_toolkit.shared.results import FetchSummary
from raffle_toolkit.shared.retry import RetryExecutor
from raffle_toolkit.shared.services.web3_service import ReadClient, Web3Service
from raffle_toolkit.utils.cache import collection_key

logger = get_logger(__name__)


class RaffleService:
    """
    Service for fetching raffle data on a single chain.

    Attributes:
        client: Read client for the chain
        aggregator: Holder of the shared cache and metrics sink
        executor: Retry executor used by every remote read
        last_summary: Counts of the most recent full fetch
    """

    def __init__(
        self,
        client: ReadClient,
        chain_id: Optional[int] = None,
        aggregator: Optional[Aggregator] = None,
        executor: Optional[RetryExecutor] = None,
    ):
        self.client = client
        self.chain_id = int(chain_id if chain_id is not None else client.chain_id)
        self.aggregator = aggregator or Aggregator.create()
        self.executor = executor or RetryExecutor()

        self.discovery = AddressDiscovery(client, self.executor, self.cache)
        self.fetcher = RaffleDetailFetcher(client, self.executor, self.metrics)
        self.orchestrator = BatchOrchestrator(self.fetcher)
        self.last_summary: Optional[FetchSummary] = None

    @classmethod
    def for_chain(
        cls, chain_id: int, aggregator: Optional[Aggregator] = None
    ) -> "RaffleService":
        """Build a service backed by the configured RPC endpoint for a chain"""
        return cls(Web3Service.get_instance(chain_id), chain_id, aggregator)

    @property
    def cache(self):
        return self.aggregator.cache

    @property
    def metrics(self):
        return self.aggregator.metrics

    def are_contracts_available(self) -> bool:
        return GlobalConstants.get_raffle_manager(self.chain_id) is not None

    async def get_all_raffle_addresses(self) -> List[str]:
        """All raffle addresses on the chain, newest first (cached)."""
        platform = platform_class(select_profile())
        try:
            with self.metrics.time_operation(
                "getAllRaffleAddresses", platform, chain_id=self.chain_id
            ):
                return await self.discovery.get_all_raffle_addresses(self.chain_id)
        except (ContractsNotAvailableException, AddressDiscoveryException) as e:
            self.metrics.track_error(
                "getAllRaffleAddresses", platform, e, chain_id=self.chain_id
            )
            raise

    async def fetch_raffle_details(
        self, address: str, is_constrained: bool = False
    ) -> Optional[RaffleRecord]:
        """Fetch one raffle; None if its required fields cannot be read."""
        return await self.fetcher.fetch(address, select_profile(is_constrained))

    async def fetch_all_raffles(
        self,
        is_constrained: bool = False,
        use_cache: bool = True,
        max_raffles: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        user_agent: Optional[str] = None,
        viewport_width: Optional[int] = None,
    ) -> List[RaffleRecord]:
        """
        Fetch the most recent raffles on the chain.

        Args:
            is_constrained: Caller hint that the client is constrained (mobile)
            use_cache: Serve a cached collection when one is fresh
            max_raffles: Override of the profile's item ceiling
            on_progress: Called with (records collected so far, total)
            user_agent: Client user agent, used to detect constrained clients
            viewport_width: Client viewport width in pixels

        Returns:
            Records newest first; [] when the registry is empty

        Raises:
            ContractsNotAvailableException: If the chain has no registry
            AddressDiscoveryException: If the registry could not be read
        """
        profile = select_profile(is_constrained, user_agent, viewport_width)
        platform = platform_class(profile)
        max_items = max_raffles or profile.max_items
        cache_key = collection_key(self.chain_id, platform, max_items)

        if use_cache:
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.metrics.record(
                    "fetchAllRaffles", platform, 0.0, "cache_hit", count=len(cached)
                )
                self.last_summary = FetchSummary(
                    chain_id=self.chain_id,
                    platform=platform,
                    requested=len(cached),
                    fetched=len(cached),
                    from_cache=True,
                )
                return list(cached)

        with self.metrics.time_operation(
            "fetchAllRaffles", platform, chain_id=self.chain_id
        ) as extra:
            try:
                addresses = await self.discovery.get_all_raffle_addresses(
                    self.chain_id, profile
                )
            except (ContractsNotAvailableException, AddressDiscoveryException) as e:
                self.metrics.track_error(
                    "fetchAllRaffles", platform, e, chain_id=self.chain_id
                )
                raise

            if not addresses:
                extra["count"] = 0
                self.last_summary = FetchSummary(
                    chain_id=self.chain_id, platform=platform
                )
                return []

            selected = addresses[:max_items]
            logger.info(
                f"Fetching {len(selected)} of {len(addresses)} raffles "
                f"on chain {self.chain_id} ({platform})"
            )
            records = await self.orchestrator.fetch_all(
                selected, profile, on_progress=on_progress
            )
            self.last_summary = self.orchestrator.last_summary
            extra["count"] = len(records)

        self.cache.set(cache_key, list(records))
        return records

    async def search_raffles(self, term: str, **options: Any) -> List[RaffleRecord]:
        """
        Case-insensitive search on raffle name or address.

        Options are passed through to fetch_all_raffles.
        """
        raffles = await self.fetch_all_raffles(**options)
        needle = term.strip().lower()
        if not needle:
            return raffles
        return [
            raffle
            for raffle in raffles
            if needle in (raffle.name or "").lower()
            or needle in raffle.address.lower()
        ]

    def clear_cache(self) -> None:
        """Forget every cached address list and collection."""
        self.cache.clear()
        logger.info("Raffle cache cleared")

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.cache.get_stats()

    def get_performance_metrics(self) -> Dict[str, Dict[str, Any]]:
        return self.metrics.get_performance_metrics()

    def get_error_stats(self) -> Dict[str, Dict[str, Any]]:
        return self.metrics.get_error_stats()
