"""
Web3 Service module for reading raffle contracts on EVM chains.

The fetch pipeline only needs two capabilities from a chain connection: a
read-only `eth_call` and the current block number. Both are exposed as
coroutines through the ReadClient protocol so the pipeline can be driven by
any client (a Web3Service, or a fake in tests).
"""

import asyncio
from typing import Dict, Protocol

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from raffle_toolkit.shared.constants import GlobalConstants


class ReadClient(Protocol):
    """Minimal async read interface used by discovery, multicall and fetcher."""

    chain_id: int

    async def eth_call(self, to: str, data: bytes) -> bytes:
        ...

    async def get_block_number(self) -> int:
        ...


class Web3Service:
    """
    A service class for managing Web3 connections.

    Web3 is synchronous; calls are pushed to the default executor so the
    event loop stays free while requests are in flight.
    """

    _instances: Dict[int, "Web3Service"] = {}

    def __init__(
        self,
        chain_id: int,
        rpc_url: str,
    ):
        """
        Initialize the Web3Service.

        Args:
            chain_id (int): The chain ID to use.
            rpc_url (str): The RPC URL to use.
        """
        self.chain_id = chain_id
        self.rpc_url = rpc_url
        self.w3 = self._initialize_web3(rpc_url)

    def _initialize_web3(self, rpc_url: str) -> Web3:
        """Initialize Web3 instance with middleware if needed"""
        w3 = Web3(Web3.HTTPProvider(rpc_url))

        # Add POA middleware for non-mainnet chains
        if self.chain_id != 1:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        return w3

    @classmethod
    def get_instance(cls, chain_id: int) -> "Web3Service":
        """Get or create a Web3Service instance for a specific chain"""
        if chain_id not in cls._instances:
            rpc_url = GlobalConstants.get_rpc_url(chain_id)
            cls._instances[chain_id] = cls(chain_id, rpc_url)

        return cls._instances[chain_id]

    async def eth_call(self, to: str, data: bytes) -> bytes:
        """Read-only call against the latest block"""
        tx = {
            "to": Web3.to_checksum_address(to.lower()),
            "data": "0x" + data.hex(),
        }
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self.w3.eth.call, tx)
        return bytes(result)

    async def get_block_number(self) -> int:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, lambda: self.w3.eth.block_number
        )
