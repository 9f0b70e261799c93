"""
Batch contract calls through the multicall helper contract.

N getter calls against one raffle are packed into a single `aggregate` call.
The helper reverts the whole batch if any call reverts; that case is reported
as None ("batching unavailable") and the caller falls back to per-call reads.

Decoded batch results are always index-aligned with the requested calls.
Slots that could not be encoded, returned nothing or failed to decode are
filled from FALLBACKS.
"""

import asyncio
from typing import Any, List, Optional, Sequence, Tuple

from raffle_toolkit.contracts.reader import ContractReader
from raffle_toolkit.raffles.models import UNKNOWN, CallSpec
from raffle_toolkit.shared.constants import ZERO_ADDRESS
from raffle_toolkit.shared.logging import get_logger
from raffle_toolkit.shared.services.web3_service import ReadClient

logger = get_logger(__name__)

MULTICALL_V1 = "0xeefBa1e63905eF1D7ACbA5a8513c70307C1cE441"
MULTICALL_V3 = "0xcA11bde05977b3631167028862bE2a173976CA11"

MULTICALL_ADDRESSES = {
    1: MULTICALL_V1,  # Ethereum Mainnet
    3: MULTICALL_V1,  # Ropsten
    4: MULTICALL_V1,  # Rinkeby
    5: MULTICALL_V1,  # Goerli
    11155111: MULTICALL_V1,  # Sepolia
    137: MULTICALL_V3,  # Polygon
    80001: MULTICALL_V3,  # Mumbai
    56: MULTICALL_V1,  # BSC
    97: MULTICALL_V1,  # BSC Testnet
    42161: MULTICALL_V3,  # Arbitrum
    421613: MULTICALL_V3,  # Arbitrum Goerli
    10: MULTICALL_V3,  # Optimism
    69: MULTICALL_V3,  # Optimism Kovan
    43114: MULTICALL_V3,  # Avalanche
    43113: MULTICALL_V3,  # Avalanche Fuji
    421614: MULTICALL_V1,  # Arbitrum Sepolia
    8453: MULTICALL_V3,  # Base
    84532: MULTICALL_V3,  # Base Sepolia
    2020: MULTICALL_V3,  # Ronin
    7700: MULTICALL_V3,  # Canto
    1946: MULTICALL_V3,  # Soneium Minato
    16379: MULTICALL_V3,
}

FALLBACKS = {
    "isPrized": False,
    "isCollabPool": False,
    "usesCustomFee": False,
    "isExternalCollection": False,
    "isRefundable": False,
    "isEscrowedPrize": UNKNOWN,
    "standard": UNKNOWN,
    "revenueRecipient": ZERO_ADDRESS,
    "prizeCollection": ZERO_ADDRESS,
    "erc20PrizeToken": ZERO_ADDRESS,
    "prizeTokenId": 0,
    "erc20PrizeAmount": 0,
    "nativePrizeAmount": 0,
    "maxSlotsPerAddress": 0,
    "slotLimit": 0,
    "winnersCount": 0,
}

# (target, calldata) pairs as sent to aggregate
BatchCall = Tuple[str, bytes]
# (method, original index) for every call that was encoded
ValidCall = Tuple[str, int]


def fallback_for(method: str) -> Any:
    """Value substituted for a method whose result is unavailable"""
    return FALLBACKS.get(method)


def has_fallback(method: str) -> bool:
    return method in FALLBACKS


def create_batch_calls(
    reader: ContractReader, address: str, calls: Sequence[CallSpec]
) -> Tuple[List[BatchCall], List[ValidCall]]:
    """
    Encode calls for aggregate.

    Calls that fail to encode are left out; valid_calls remembers the
    original index of every call that made it in.
    """
    batch_calls: List[BatchCall] = []
    valid_calls: List[ValidCall] = []

    for index, call in enumerate(calls):
        try:
            data = reader.encode_call(call.method, call.params)
        except Exception as e:
            logger.debug(f"Skipping {call.method} in batch: {e}")
            continue
        batch_calls.append((address, data))
        valid_calls.append((call.method, index))

    return batch_calls, valid_calls


async def execute_batch_calls(
    client: ReadClient,
    batch_calls: List[BatchCall],
    chain_id: int,
    timeout: Optional[float] = None,
) -> Optional[List[bytes]]:
    """
    Send encoded calls through the chain's multicall helper.

    Returns:
        Raw return data per call, [] for no calls, or None when batching is
        unavailable (no helper on the chain, or the batch call failed)
    """
    if not batch_calls:
        return []

    multicall_address = MULTICALL_ADDRESSES.get(chain_id)
    if not multicall_address:
        logger.warning(
            f"Multicall not supported on chain {chain_id}, "
            "falling back to individual calls"
        )
        return None

    multicall = ContractReader.from_resource("multicall")
    try:
        data = multicall.encode_call("aggregate", [batch_calls])
        request = client.eth_call(multicall_address, data)
        if timeout is not None:
            raw = await asyncio.wait_for(request, timeout)
        else:
            raw = await request
        _, return_data = multicall.decode_result("aggregate", raw)
    except Exception as e:
        logger.warning(f"Multicall failed on chain {chain_id}: {e!r}")
        return None

    return list(return_data)


def decode_batch_results(
    reader: ContractReader,
    calls: Sequence[CallSpec],
    return_data: Sequence[bytes],
    valid_calls: Sequence[ValidCall],
) -> List[Any]:
    """
    Decode aggregate output back onto the original call positions.

    Never raises. The result has exactly one entry per call.
    """
    results: List[Any] = [None] * len(calls)
    resolved = [False] * len(calls)

    for valid_index, (method, original_index) in enumerate(valid_calls):
        try:
            if valid_index >= len(return_data) or not return_data[valid_index]:
                raise ValueError("No return data for call")
            results[original_index] = reader.decode_result(
                method, return_data[valid_index]
            )
            resolved[original_index] = True
        except Exception as e:
            logger.debug(f"Failed to decode {method}: {e}")

    for index, call in enumerate(calls):
        if not resolved[index]:
            logger.debug(f"Method {call.method} unavailable, using fallback")
            results[index] = fallback_for(call.method)

    return results


async def batch_contract_calls(
    client: ReadClient,
    reader: ContractReader,
    address: str,
    calls: Sequence[CallSpec],
    chain_id: int,
    timeout: Optional[float] = None,
) -> Optional[List[Any]]:
    """
    Encode, execute and decode a group of calls against one contract.

    Returns None when batching is unavailable so the caller can fall back
    to individual calls.
    """
    batch_calls, valid_calls = create_batch_calls(reader, address, calls)

    if not batch_calls:
        return decode_batch_results(reader, calls, [], valid_calls)

    return_data = await execute_batch_calls(
        client, batch_calls, chain_id, timeout=timeout
    )
    if return_data is None:
        return None

    return decode_batch_results(reader, calls, return_data, valid_calls)
