"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests,
including an in-memory read client that answers raffle getters, the raffle
manager registry and multicall aggregate calls with ABI-encoded data.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import patch

import pytest
from eth_utils import to_checksum_address

from raffle_toolkit.contracts.reader import ContractReader
from raffle_toolkit.raffles.multicall import MULTICALL_ADDRESSES
from raffle_toolkit.shared.aggregator import Aggregator
from raffle_toolkit.shared.constants import GlobalConstants
from raffle_toolkit.shared.retry import RetryExecutor

# Base Sepolia: registry deployed, multicall available
BATCH_CHAIN_ID = 84532
# OP Sepolia: registry deployed, no multicall helper
SEQUENTIAL_CHAIN_ID = 11155420

CREATOR = to_checksum_address("0x52f541764e6e90eebc5c21ff570de0e2d63766b6")
PRIZE_COLLECTION = to_checksum_address("0x7e1444ba99dcdffe8fbdb42c02fb0da4aaace4d5")

# Unpatched reference so the fake client still yields under fast_sleep
_yield_control = asyncio.sleep


class Reverted(Exception):
    """Stand-in for a node reporting `execution reverted`."""

    def __init__(self, message: str = "execution reverted"):
        super().__init__(message)


def raffle_address(index: int) -> str:
    return to_checksum_address(f"0x{0xA000 + index:040x}")


def make_raffle_values(index: int = 0, **overrides: Any) -> Dict[str, Any]:
    """Getter values of a healthy active raffle."""
    values = {
        "name": f"Raffle {index}",
        "creator": CREATOR,
        "startTime": 1_764_806_400 + index,
        "duration": 86_400,
        "slotFee": 10**16,
        "slotLimit": 100,
        "winnersCount": 1,
        "maxSlotsPerAddress": 5,
        "state": 1,
        "isPrized": True,
        "prizeCollection": PRIZE_COLLECTION,
        "prizeTokenId": 7,
        "erc20PrizeToken": "0x0000000000000000000000000000000000000000",
        "erc20PrizeAmount": 0,
        "nativePrizeAmount": 0,
        "standard": 0,
        "isEscrowedPrize": True,
        "isCollabPool": False,
        "usesCustomFee": False,
        "revenueRecipient": CREATOR,
        "isExternalCollection": False,
        "isRefundable": True,
        "getActualPoolDuration": 3_600,
    }
    values.update(overrides)
    return values


class FakeReadClient:
    """
    In-memory ReadClient.

    Raffle getters are served from `raffles[address][method]`. A missing
    method reverts, and an Exception value is raised as is. Multicall
    aggregate reverts as a whole if any inner call fails, like the real
    helper does.
    """

    def __init__(
        self,
        chain_id: int = BATCH_CHAIN_ID,
        raffles: Optional[Dict[str, Dict[str, Any]]] = None,
        pools: Any = None,
    ):
        self.chain_id = chain_id
        self.raffles = raffles if raffles is not None else {}
        # Registry order: oldest first
        self.pools = pools if pools is not None else list(self.raffles)
        self.calls: List[Tuple[str, str]] = []
        self.block_number = 21_000_000
        self.multicall_error: Optional[Exception] = None

        self.pool = ContractReader.from_resource("pool")
        self.registry = ContractReader.from_resource("raffle_manager")
        self.multicall = ContractReader.from_resource("multicall")

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def calls_to(self, method: str) -> int:
        return sum(1 for _, m in self.calls if m == method)

    async def get_block_number(self) -> int:
        return self.block_number

    async def eth_call(self, to: str, data: bytes) -> bytes:
        await _yield_control(0)
        to = to_checksum_address(to)

        manager = GlobalConstants.get_raffle_manager(self.chain_id)
        if manager and to == to_checksum_address(manager):
            self.calls.append((to, "getAllPools"))
            if isinstance(self.pools, Exception):
                raise self.pools
            return self.registry.encode_result("getAllPools", [self.pools])

        multicall_address = MULTICALL_ADDRESSES.get(self.chain_id)
        if multicall_address and to == to_checksum_address(multicall_address):
            self.calls.append((to, "aggregate"))
            if self.multicall_error is not None:
                raise self.multicall_error
            _, (batch,) = self.multicall.decode_input(data)
            return_data = [
                self._answer(to_checksum_address(target), bytes(call_data))
                for target, call_data in batch
            ]
            return self.multicall.encode_result(
                "aggregate", [self.block_number, return_data]
            )

        method = self.pool.method_for_selector(data) or "unknown"
        self.calls.append((to, method))
        return self._answer(to, bytes(data))

    def _answer(self, to: str, data: bytes) -> bytes:
        method = self.pool.method_for_selector(data)
        values = self.raffles.get(to)
        if method is None or values is None or method not in values:
            raise Reverted()
        value = values[method]
        if isinstance(value, Exception):
            raise value
        return self.pool.encode_result(method, [value])


@pytest.fixture
def fast_sleep():
    """Patch asyncio.sleep so backoff and pauses do not wait; records delays."""
    delays: List[float] = []
    original_sleep = asyncio.sleep

    async def mock_sleep(delay, *args, **kwargs):
        delays.append(delay)
        await original_sleep(0)

    with patch("asyncio.sleep", mock_sleep):
        yield delays


@pytest.fixture
def aggregator() -> Aggregator:
    return Aggregator.create(ttl=300)


@pytest.fixture
def executor() -> RetryExecutor:
    return RetryExecutor()


@pytest.fixture
def make_client():
    """Factory for FakeReadClient(chain_id, raffles, pools)."""
    return FakeReadClient


@pytest.fixture
def raffle_values():
    """Factory for getter values of one raffle."""
    return make_raffle_values


@pytest.fixture
def address_of():
    """Deterministic raffle address for an index."""
    return raffle_address


@pytest.fixture
def healthy_raffles() -> Dict[str, Dict[str, Any]]:
    """Five healthy raffles keyed by address, registry order."""
    return {raffle_address(i): make_raffle_values(i) for i in range(5)}


@pytest.fixture
def fake_client(healthy_raffles) -> FakeReadClient:
    return FakeReadClient(BATCH_CHAIN_ID, healthy_raffles)


@pytest.fixture
def sequential_client(healthy_raffles) -> FakeReadClient:
    return FakeReadClient(SEQUENTIAL_CHAIN_ID, healthy_raffles)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line("markers", "slow: mark test as slow-running")
