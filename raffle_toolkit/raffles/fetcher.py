"""
Raffle detail fetcher.

Reads every getter of one raffle contract in three groups (core, prize,
config) and assembles a RaffleRecord. Core getters are required: if any of
them cannot be read the raffle is dropped. Prize and config getters are
optional and fall back to the multicall fallback table.
"""

from typing import Any, List, Optional, Sequence

from eth_utils import to_checksum_address

from raffle_toolkit.contracts.reader import ContractReader
from raffle_toolkit.raffles.models import (
    TERMINAL_STATE_CODES,
    UNKNOWN,
    CallSpec,
    RaffleRecord,
    map_state,
)
from raffle_toolkit.raffles.multicall import batch_contract_calls, fallback_for
from raffle_toolkit.shared.exceptions import RaffleFetchException
from raffle_toolkit.shared.logging import get_logger
from raffle_toolkit.shared.metrics import MetricsSink
from raffle_toolkit.shared.profiles import PlatformProfile, platform_class
from raffle_toolkit.shared.retry import RetryExecutor
from raffle_toolkit.shared.services.web3_service import ReadClient

logger = get_logger(__name__)

CORE_CALLS = (
    CallSpec("name"),
    CallSpec("creator"),
    CallSpec("startTime"),
    CallSpec("duration"),
    CallSpec("slotFee"),
    CallSpec("slotLimit"),
    CallSpec("winnersCount"),
    CallSpec("maxSlotsPerAddress"),
    CallSpec("state"),
)

PRIZE_CALLS = (
    CallSpec("isPrized"),
    CallSpec("prizeCollection"),
    CallSpec("prizeTokenId"),
    CallSpec("erc20PrizeToken"),
    CallSpec("erc20PrizeAmount"),
    CallSpec("nativePrizeAmount"),
    CallSpec("standard"),
    CallSpec("isEscrowedPrize"),
)

CONFIG_CALLS = (
    CallSpec("isCollabPool"),
    CallSpec("usesCustomFee"),
    CallSpec("revenueRecipient"),
    CallSpec("isExternalCollection"),
    CallSpec("isRefundable"),
)


def _optional(value: Any) -> Any:
    return None if value is UNKNOWN else value


class RaffleDetailFetcher:
    """
    Fetches and assembles the full state of single raffles.

    Args:
        client: Read client for the active chain
        executor: Retry executor guarding every individual read
        metrics: Sink that receives timings and dropped-raffle errors
        reader: Pool contract reader (defaults to the packaged pool ABI)
    """

    def __init__(
        self,
        client: ReadClient,
        executor: RetryExecutor,
        metrics: MetricsSink,
        reader: Optional[ContractReader] = None,
    ):
        self.client = client
        self.executor = executor
        self.metrics = metrics
        self.reader = reader or ContractReader.from_resource("pool")

    @property
    def chain_id(self) -> int:
        return self.client.chain_id

    async def fetch(
        self, address: str, profile: PlatformProfile
    ) -> Optional[RaffleRecord]:
        """
        Fetch one raffle.

        Returns None (after logging and tracking the error) when a required
        field could not be read. Never raises for read failures.
        """
        platform = platform_class(profile)
        try:
            with self.metrics.time_operation(
                "fetchRaffleDetails", platform, address=address
            ):
                return await self._fetch(address, profile)
        except Exception as e:
            logger.error(f"Error fetching raffle {address}: {e}")
            self.metrics.track_error(
                "fetchRaffleDetails", platform, e, address=address
            )
            return None

    async def _fetch(self, address: str, profile: PlatformProfile) -> RaffleRecord:
        core = await self._resolve_group(address, CORE_CALLS, profile, optional=False)
        prize = await self._resolve_group(address, PRIZE_CALLS, profile, optional=True)
        config = await self._resolve_group(
            address, CONFIG_CALLS, profile, optional=True
        )

        # A batch decode fills unreadable required getters with None
        for call, value in zip(CORE_CALLS, core):
            if value is None:
                raise RaffleFetchException(address, call.method, "no value returned")

        (
            name,
            creator,
            start_time,
            duration,
            slot_fee,
            slot_limit,
            winners_count,
            max_slots_per_address,
            state_code,
        ) = core
        (
            is_prized,
            prize_collection,
            prize_token_id,
            erc20_prize_token,
            erc20_prize_amount,
            native_prize_amount,
            standard,
            is_escrowed_prize,
        ) = prize
        (
            is_collab_pool,
            uses_custom_fee,
            revenue_recipient,
            is_external_collection,
            is_refundable,
        ) = config

        state_code = int(state_code)
        actual_duration = None
        if state_code in TERMINAL_STATE_CODES:
            actual_duration = await self._fetch_actual_duration(address, profile)

        standard = _optional(standard)
        is_escrowed_prize = _optional(is_escrowed_prize)

        return RaffleRecord(
            address=to_checksum_address(address),
            chain_id=self.chain_id,
            name=str(name),
            creator=to_checksum_address(creator),
            start_time=int(start_time),
            duration=int(duration),
            slot_fee=int(slot_fee),
            slot_limit=int(slot_limit),
            winners_count=int(winners_count),
            max_slots_per_address=int(max_slots_per_address),
            state_code=state_code,
            state=map_state(state_code),
            is_prized=bool(is_prized),
            prize_collection=to_checksum_address(prize_collection),
            prize_token_id=int(prize_token_id),
            erc20_prize_token=to_checksum_address(erc20_prize_token),
            erc20_prize_amount=int(erc20_prize_amount),
            native_prize_amount=int(native_prize_amount),
            standard=int(standard) if standard is not None else None,
            is_escrowed_prize=(
                bool(is_escrowed_prize) if is_escrowed_prize is not None else None
            ),
            is_collab_pool=bool(is_collab_pool),
            uses_custom_fee=bool(uses_custom_fee),
            revenue_recipient=to_checksum_address(revenue_recipient),
            is_external_collection=bool(is_external_collection),
            is_refundable=bool(is_refundable),
            actual_duration=actual_duration,
        )

    async def _resolve_group(
        self,
        address: str,
        calls: Sequence[CallSpec],
        profile: PlatformProfile,
        optional: bool,
    ) -> List[Any]:
        """Batch a group when the profile allows it, else read call by call"""
        if not profile.progressive_loading:
            results = await batch_contract_calls(
                self.client,
                self.reader,
                address,
                calls,
                self.chain_id,
                timeout=profile.timeout,
            )
            if results is not None:
                return results
            logger.debug(
                f"Batching unavailable for {address}, using individual calls"
            )

        return await self._sequential_calls(address, calls, profile, optional)

    async def _sequential_calls(
        self,
        address: str,
        calls: Sequence[CallSpec],
        profile: PlatformProfile,
        optional: bool,
    ) -> List[Any]:
        results: List[Any] = []
        for call in calls:
            try:
                data = self.reader.encode_call(call.method, call.params)
            except Exception as e:
                if not optional:
                    raise RaffleFetchException(address, call.method, str(e)) from e
                logger.debug(f"Cannot encode {call.method}, using fallback")
                results.append(fallback_for(call.method))
                continue

            try:
                results.append(
                    await self._read(address, call.method, data, profile, optional)
                )
            except Exception as e:
                if not optional:
                    raise
                logger.debug(
                    f"Optional {call.method} failed for {address}, "
                    f"using fallback: {e}"
                )
                results.append(fallback_for(call.method))
        return results

    async def _read(
        self,
        address: str,
        method: str,
        data: bytes,
        profile: PlatformProfile,
        optional: bool,
    ) -> Any:
        async def call() -> Any:
            raw = await self.client.eth_call(address, data)
            return self.reader.decode_result(method, raw)

        return await self.executor.execute(
            call,
            f"{method}@{address}",
            profile,
            max_retries=1 if optional else None,
        )

    async def _fetch_actual_duration(
        self, address: str, profile: PlatformProfile
    ) -> Optional[int]:
        """Best-effort read of how long a finished raffle actually ran"""
        try:
            data = self.reader.encode_call("getActualPoolDuration")
            value = int(
                await self._read(
                    address, "getActualPoolDuration", data, profile, optional=True
                )
            )
        except Exception as e:
            logger.debug(f"getActualPoolDuration unavailable for {address}: {e}")
            return None
        return value or None
