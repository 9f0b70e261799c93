"""Discovery of raffle addresses through the raffle manager registry."""

from typing import List, Optional

from raffle_toolkit.contracts.reader import ContractReader
from raffle_toolkit.shared.constants import GlobalConstants
from raffle_toolkit.shared.exceptions import (
    AddressDiscoveryException,
    ContractsNotAvailableException,
)
from raffle_toolkit.shared.logging import get_logger
from raffle_toolkit.shared.profiles import PlatformProfile
from raffle_toolkit.shared.retry import RetryExecutor
from raffle_toolkit.shared.services.web3_service import ReadClient
from raffle_toolkit.utils.cache import ResultCache, address_list_key

logger = get_logger(__name__)


class AddressDiscovery:
    """
    Lists every raffle registered with the chain's raffle manager.

    Addresses come back newest first (the registry appends, so its order is
    reversed) and are cached per chain.
    """

    def __init__(
        self,
        client: ReadClient,
        executor: RetryExecutor,
        cache: ResultCache,
        reader: Optional[ContractReader] = None,
    ):
        self.client = client
        self.executor = executor
        self.cache = cache
        self.reader = reader or ContractReader.from_resource("raffle_manager")

    def registry_address(self, chain_id: int) -> str:
        """
        Raises:
            ContractsNotAvailableException: If no registry is deployed
        """
        manager = GlobalConstants.get_raffle_manager(chain_id)
        if manager is None:
            raise ContractsNotAvailableException(chain_id)
        return manager

    async def get_all_raffle_addresses(
        self, chain_id: int, profile: Optional[PlatformProfile] = None
    ) -> List[str]:
        """
        Get all raffle addresses on a chain, newest first.

        Raises:
            ContractsNotAvailableException: If the chain has no registry
            AddressDiscoveryException: If the registry could not be read
        """
        manager = self.registry_address(chain_id)

        cache_key = address_list_key(chain_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Using cached raffle addresses for chain {chain_id}")
            return list(cached)

        data = self.reader.encode_call("getAllPools")

        async def call() -> List[str]:
            raw = await self.client.eth_call(manager, data)
            return self.reader.decode_result("getAllPools", raw)

        try:
            pools = await self.executor.execute(call, "getAllPools", profile)
        except Exception as e:
            raise AddressDiscoveryException(chain_id, str(e)) from e

        addresses = list(reversed(pools))
        self.cache.set(cache_key, addresses)
        logger.info(f"Discovered {len(addresses)} raffles on chain {chain_id}")
        return list(addresses)
