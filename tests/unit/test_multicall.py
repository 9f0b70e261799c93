"""
Unit tests for multicall batching and the fallback table.
"""

import pytest

from raffle_toolkit.contracts.reader import ContractReader
from raffle_toolkit.raffles.models import UNKNOWN, CallSpec
from raffle_toolkit.raffles.multicall import (
    MULTICALL_ADDRESSES,
    batch_contract_calls,
    create_batch_calls,
    decode_batch_results,
    execute_batch_calls,
    fallback_for,
    has_fallback,
)
from raffle_toolkit.shared.constants import ZERO_ADDRESS

PRIZE_CALLS = [
    CallSpec("isPrized"),
    CallSpec("prizeCollection"),
    CallSpec("prizeTokenId"),
    CallSpec("erc20PrizeToken"),
    CallSpec("erc20PrizeAmount"),
    CallSpec("nativePrizeAmount"),
    CallSpec("standard"),
    CallSpec("isEscrowedPrize"),
]


@pytest.fixture
def pool() -> ContractReader:
    return ContractReader.from_resource("pool")


class TestFallbackTable:
    @pytest.mark.parametrize(
        "method",
        ["isPrized", "isCollabPool", "usesCustomFee", "isExternalCollection", "isRefundable"],
    )
    def test_boolean_fallbacks(self, method):
        assert fallback_for(method) is False

    @pytest.mark.parametrize("method", ["isEscrowedPrize", "standard"])
    def test_unknown_fallbacks(self, method):
        value = fallback_for(method)
        assert value is UNKNOWN
        assert value is not None and value is not False
        assert not value

    @pytest.mark.parametrize(
        "method", ["revenueRecipient", "prizeCollection", "erc20PrizeToken"]
    )
    def test_address_fallbacks(self, method):
        assert fallback_for(method) == ZERO_ADDRESS

    @pytest.mark.parametrize(
        "method",
        [
            "prizeTokenId",
            "erc20PrizeAmount",
            "nativePrizeAmount",
            "maxSlotsPerAddress",
            "slotLimit",
            "winnersCount",
        ],
    )
    def test_zero_fallbacks(self, method):
        assert fallback_for(method) == 0

    @pytest.mark.parametrize("method", ["name", "creator", "startTime", "state"])
    def test_required_getters_have_no_fallback(self, method):
        assert fallback_for(method) is None
        assert not has_fallback(method)


class TestCreateBatchCalls:
    def test_encodes_in_order(self, pool, address_of):
        address = address_of(0)
        batch, valid = create_batch_calls(pool, address, PRIZE_CALLS)

        assert len(batch) == len(PRIZE_CALLS)
        assert [index for _, index in valid] == list(range(len(PRIZE_CALLS)))
        assert all(target == address for target, _ in batch)
        assert batch[0][1] == pool.encode_call("isPrized")

    def test_unencodable_calls_are_skipped(self, pool, address_of):
        calls = [CallSpec("name"), CallSpec("notAMethod"), CallSpec("state")]
        batch, valid = create_batch_calls(pool, address_of(0), calls)

        assert len(batch) == 2
        assert valid == [("name", 0), ("state", 2)]


class TestDecodeBatchResults:
    def test_length_invariant_with_missing_data(self, pool):
        """Output length equals input length whatever comes back."""
        valid = [(c.method, i) for i, c in enumerate(PRIZE_CALLS)]
        for returned in range(len(PRIZE_CALLS) + 1):
            return_data = [pool.encode_result("isPrized", [True])] * returned
            results = decode_batch_results(pool, PRIZE_CALLS, return_data, valid)
            assert len(results) == len(PRIZE_CALLS)

    def test_length_invariant_with_dropped_encodes(self, pool):
        results = decode_batch_results(pool, PRIZE_CALLS, [], [])
        assert len(results) == len(PRIZE_CALLS)
        assert results == [fallback_for(c.method) for c in PRIZE_CALLS]

    def test_empty_return_uses_fallback(self, pool):
        calls = [CallSpec("isEscrowedPrize"), CallSpec("standard")]
        valid = [("isEscrowedPrize", 0), ("standard", 1)]

        results = decode_batch_results(pool, calls, [b"", b""], valid)

        assert results[0] is UNKNOWN
        assert results[1] is UNKNOWN

    def test_undecodable_data_uses_fallback(self, pool):
        calls = [CallSpec("prizeCollection"), CallSpec("isPrized")]
        valid = [("prizeCollection", 0), ("isPrized", 1)]

        results = decode_batch_results(pool, calls, [b"\x01\x02", b"\x03"], valid)

        assert results == [ZERO_ADDRESS, False]

    def test_decoded_values_land_on_original_index(self, pool):
        calls = [CallSpec("name"), CallSpec("notAMethod"), CallSpec("state")]
        valid = [("name", 0), ("state", 2)]
        return_data = [
            pool.encode_result("name", ["Genesis"]),
            pool.encode_result("state", [3]),
        ]

        results = decode_batch_results(pool, calls, return_data, valid)

        assert results == ["Genesis", None, 3]

    def test_escrow_false_is_kept(self, pool):
        """A real False from the contract is not confused with unknown."""
        calls = [CallSpec("isEscrowedPrize")]
        results = decode_batch_results(
            pool,
            calls,
            [pool.encode_result("isEscrowedPrize", [False])],
            [("isEscrowedPrize", 0)],
        )
        assert results[0] is False


class TestExecuteBatchCalls:
    @pytest.mark.asyncio
    async def test_empty_input(self, fake_client):
        assert await execute_batch_calls(fake_client, [], 84532) == []
        assert fake_client.call_count == 0

    @pytest.mark.asyncio
    async def test_unsupported_chain(self, pool, sequential_client, address_of):
        assert 11155420 not in MULTICALL_ADDRESSES
        batch, _ = create_batch_calls(pool, address_of(0), PRIZE_CALLS)

        assert await execute_batch_calls(sequential_client, batch, 11155420) is None
        assert sequential_client.call_count == 0

    @pytest.mark.asyncio
    async def test_remote_failure_is_unavailable(self, pool, fake_client, address_of):
        fake_client.multicall_error = ConnectionError("refused")
        batch, _ = create_batch_calls(pool, address_of(0), PRIZE_CALLS)

        assert await execute_batch_calls(fake_client, batch, 84532) is None

    @pytest.mark.asyncio
    async def test_single_round_trip(self, pool, fake_client, address_of):
        batch, _ = create_batch_calls(pool, address_of(0), PRIZE_CALLS)

        return_data = await execute_batch_calls(fake_client, batch, 84532)

        assert len(return_data) == len(PRIZE_CALLS)
        assert fake_client.calls_to("aggregate") == 1
        assert fake_client.call_count == 1


class TestBatchContractCalls:
    @pytest.mark.asyncio
    async def test_decodes_group(self, pool, fake_client, address_of):
        results = await batch_contract_calls(
            fake_client, pool, address_of(0), PRIZE_CALLS, 84532
        )

        assert results[0] is True
        assert results[6] == 0
        assert results[7] is True

    @pytest.mark.asyncio
    async def test_reverting_getter_makes_batch_unavailable(
        self, pool, fake_client, address_of
    ):
        """One reverting call reverts the whole aggregate."""
        del fake_client.raffles[address_of(0)]["isEscrowedPrize"]

        results = await batch_contract_calls(
            fake_client, pool, address_of(0), PRIZE_CALLS, 84532
        )

        assert results is None

    @pytest.mark.asyncio
    async def test_no_encodable_calls_returns_fallbacks(
        self, pool, fake_client, address_of
    ):
        calls = [CallSpec("notAMethod"), CallSpec("alsoMissing")]

        results = await batch_contract_calls(
            fake_client, pool, address_of(0), calls, 84532
        )

        assert results == [None, None]
        assert fake_client.call_count == 0
