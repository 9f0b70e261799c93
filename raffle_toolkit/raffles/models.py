"""Data models for raffle fetching."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class _Unknown:
    """
    Marker for "the contract did not say".

    Distinct from None (a field that must be present but could not be read)
    and from False (the contract answered no).
    """

    _instance: Optional["_Unknown"] = None

    def __new__(cls) -> "_Unknown":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __copy__(self) -> "_Unknown":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_Unknown":
        return self


UNKNOWN = _Unknown()


class RaffleState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    DRAWING = "drawing"
    COMPLETED = "completed"
    ENDED = "ended"


STATE_CODES: Dict[int, RaffleState] = {
    0: RaffleState.PENDING,
    1: RaffleState.ACTIVE,
    2: RaffleState.DRAWING,
    3: RaffleState.COMPLETED,
    4: RaffleState.COMPLETED,
    5: RaffleState.ENDED,
}

# States for which the contract can report how long the raffle actually ran
TERMINAL_STATE_CODES = frozenset(range(2, 9))


def map_state(code: int) -> RaffleState:
    """Map a contract state code to a RaffleState; unknown codes are ended."""
    return STATE_CODES.get(code, RaffleState.ENDED)


@dataclass(frozen=True)
class CallSpec:
    """One getter call against a raffle contract."""

    method: str
    params: Tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RaffleRecord:
    """
    Full state of one raffle at fetch time.

    `standard` and `is_escrowed_prize` are None when the contract does not
    expose them. `actual_duration` is only set for terminal states.
    """

    address: str
    chain_id: int
    name: str
    creator: str
    start_time: int
    duration: int
    slot_fee: int
    slot_limit: int
    winners_count: int
    max_slots_per_address: int
    state_code: int
    state: RaffleState
    is_prized: bool
    prize_collection: str
    prize_token_id: int
    erc20_prize_token: str
    erc20_prize_amount: int
    native_prize_amount: int
    standard: Optional[int]
    is_escrowed_prize: Optional[bool]
    is_collab_pool: bool
    uses_custom_fee: bool
    revenue_recipient: str
    is_external_collection: bool
    is_refundable: bool
    actual_duration: Optional[int] = None

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["state"] = self.state.value
        # wei amounts exceed JS safe integers; keep them exact as strings
        for key in ("slot_fee", "erc20_prize_amount", "native_prize_amount"):
            data[key] = str(data[key])
        return data
