"""
Batch orchestrator: fetches many raffles under a platform profile.

Addresses are processed in chunks of `profile.concurrency`. Progressive
profiles fetch one address at a time and report progress after each success;
others fetch a whole chunk concurrently and report after the chunk.
A failing raffle is dropped and recorded in the FetchSummary, never raised.
"""

import asyncio
from typing import Callable, List, Optional, Sequence

from raffle_toolkit.raffles.fetcher import RaffleDetailFetcher
from raffle_toolkit.raffles.models import RaffleRecord
from raffle_toolkit.shared.logging import get_logger
from raffle_toolkit.shared.profiles import PlatformProfile, platform_class
from raffle_toolkit.shared.results import FetchSummary

logger = get_logger(__name__)

# Pause between addresses in progressive mode, seconds
PROGRESSIVE_PAUSE = 0.05

ProgressCallback = Callable[[int, int], None]


def chunked(items: Sequence[str], size: int) -> List[List[str]]:
    size = max(1, size)
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchOrchestrator:
    def __init__(self, fetcher: RaffleDetailFetcher):
        self.fetcher = fetcher
        self.last_summary: Optional[FetchSummary] = None

    async def fetch_all(
        self,
        addresses: Sequence[str],
        profile: PlatformProfile,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[RaffleRecord]:
        """
        Fetch every address, keeping only successful records.

        Args:
            addresses: Raffle addresses, in the order results should follow
            profile: Active platform profile
            on_progress: Called with (records collected so far, total)

        Returns:
            Records for the raffles that could be read
        """
        total = len(addresses)
        summary = FetchSummary(
            chain_id=self.fetcher.chain_id,
            platform=platform_class(profile),
            requested=total,
        )
        self.last_summary = summary
        records: List[RaffleRecord] = []

        chunks = chunked(addresses, profile.concurrency)
        for chunk_index, chunk in enumerate(chunks):
            if profile.progressive_loading:
                for address in chunk:
                    record = await self._fetch_one(address, profile, summary)
                    if record is not None:
                        records.append(record)
                        self._notify(on_progress, len(records), total)
                    await asyncio.sleep(PROGRESSIVE_PAUSE)
            else:
                results = await asyncio.gather(
                    *(self.fetcher.fetch(address, profile) for address in chunk),
                    return_exceptions=True,
                )
                for address, result in zip(chunk, results):
                    if isinstance(result, BaseException):
                        summary.add_dropped(address, str(result), result)
                    elif result is None:
                        summary.add_dropped(address, "raffle could not be read")
                    else:
                        records.append(result)
                self._notify(on_progress, len(records), total)

            if chunk_index < len(chunks) - 1:
                await asyncio.sleep(profile.batch_delay)

        summary.fetched = len(records)
        logger.info(
            f"Fetched {summary.fetched}/{total} raffles on chain "
            f"{summary.chain_id} ({summary.platform})"
        )
        return records

    async def _fetch_one(
        self, address: str, profile: PlatformProfile, summary: FetchSummary
    ) -> Optional[RaffleRecord]:
        try:
            record = await self.fetcher.fetch(address, profile)
        except Exception as e:
            summary.add_dropped(address, str(e), e)
            return None
        if record is None:
            summary.add_dropped(address, "raffle could not be read")
        return record

    @staticmethod
    def _notify(
        on_progress: Optional[ProgressCallback], completed: int, total: int
    ) -> None:
        if on_progress is None:
            return
        try:
            on_progress(completed, total)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e!r}")
