"""
Error classification for remote read failures.

Every failure coming out of the read client is bucketed into one of:

- USER_REJECTED: the user cancelled in their wallet (code 4001 or message)
- BUSINESS_RULE: the contract reverted with a known custom error
- NETWORK: transport, timeout or connectivity problem
- UNKNOWN: anything else

The classification only drives retry policy. It never rewrites the error;
turning errors into user-facing text lives in error_messages.
"""

import asyncio
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import Timeout as RequestsTimeout

USER_REJECTED_CODE = 4001

# 4-byte selectors of the raffle and collection contracts' custom errors
ERROR_SELECTORS = {
    # Pool purchase errors
    "0xd92e233d": "ZeroAddress",
    "0xf4f5b733": "ZeroQuantity",
    "0xd2100d73": "ZeroSlotFee",
    "0xfd2a413d": "PoolDurationElapsed",
    "0x7145fa7b": "ExceedsMaxSlots",
    "0x569e8c11": "IncorrectPayment",
    "0x176f75b8": "ExceedsSlotLimit",
    "0x1889eae0": "ContractsCannotPurchase",
    "0xbe54005a": "ProtocolAdminNotAllowed",
    "0x194d5060": "CreatorNotAllowed",
    "0x93a7d4e8": "InvalidNonPrizedPurchase",
    "0x43361aaf": "SocialEngagementNotConfigured",
    "0xbaf3f0f7": "InvalidState",
    "0x27e1f1e5": "OnlyOperator",
    # Pool prize claiming errors
    "0xb19a9f82": "NotAWinner",
    "0xccaf35d0": "NoPrizesToClaim",
    "0x327ee3e0": "InvalidPrizeAmount",
    "0x880a1491": "PrizeTransferFailed",
    "0x424ca239": "InvalidPrizeCollection",
    "0x1a1889b7": "InvalidPoolState",
    "0x5c427cd9": "UnauthorizedCaller",
    "0x170554d5": "ExceedsWinnersCount",
    "0xfd34e505": "MintingNotSupported",
    # ERC721A / ERC1155 collection errors
    "0x955c501b": "UnauthorizedMinter",
    "0xc30436e9": "ExceedsMaxSupply",
    "0x0fee82b1": "SupplyNotSet",
}

BUSINESS_RULE_ERRORS = (
    "ExceedsMaxSlots",
    "ExceedsSlotLimit",
    "IncorrectPayment",
    "ContractsCannotPurchase",
    "CreatorNotAllowed",
    "InvalidNonPrizedPurchase",
    "NotAWinner",
    "NoPrizesToClaim",
    "UnauthorizedMinter",
    "ExceedsMaxSupply",
    "ZeroAddress",
    "ZeroQuantity",
    "ZeroSlotFee",
    "PoolDurationElapsed",
    "ProtocolAdminNotAllowed",
    "SocialEngagementNotConfigured",
    "InvalidState",
    "OnlyOperator",
    "InvalidPrizeAmount",
    "PrizeTransferFailed",
    "InvalidPrizeCollection",
    "InvalidPoolState",
    "UnauthorizedCaller",
    "ExceedsWinnersCount",
    "MintingNotSupported",
    "SupplyNotSet",
)

USER_REJECTED_MARKERS = ("user rejected", "User denied", "user cancelled")

NETWORK_MARKERS = (
    "Network Error",
    "CONNECTION ERROR",
    "timeout",
    "timed out",
)

NETWORK_EXCEPTIONS = (
    asyncio.TimeoutError,
    TimeoutError,
    ConnectionError,
    RequestsConnectionError,
    RequestsTimeout,
)

_REVERTED_WITH_NAME = re.compile(r"execution reverted:?\s*([A-Z][a-zA-Z0-9]*)")
_CUSTOM_ERROR_NAME = re.compile(r"custom error '([A-Z][a-zA-Z0-9]*)\(")


class ErrorKind(Enum):
    """Coarse failure buckets used by the retry executor."""

    USER_REJECTED = "user_rejected"
    BUSINESS_RULE = "business_rule"
    NETWORK = "network"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorClass:
    """Classification verdict; `name` is set for business rule errors."""

    kind: ErrorKind
    name: Optional[str] = None

    @property
    def is_retryable(self) -> bool:
        return self.kind in (ErrorKind.NETWORK, ErrorKind.UNKNOWN)

    def __str__(self) -> str:
        if self.name:
            return f"{self.kind.value}({self.name})"
        return self.kind.value


def _nested_payloads(error: BaseException) -> Iterable[Any]:
    """Yield the error itself plus dict/str payloads carried in its args."""
    yield error
    for arg in getattr(error, "args", ()):
        yield arg
        if isinstance(arg, dict):
            for key in ("data", "error"):
                if key in arg:
                    yield arg[key]
                    inner = arg[key]
                    if isinstance(inner, dict) and "data" in inner:
                        yield inner["data"]
    inner_error = getattr(error, "error", None)
    if inner_error is not None:
        yield inner_error


def _get(payload: Any, key: str) -> Any:
    if isinstance(payload, dict):
        return payload.get(key)
    return getattr(payload, key, None)


def extract_error_code(error: BaseException) -> Any:
    """Return the first `code` found on the error or its payloads."""
    for payload in _nested_payloads(error):
        code = _get(payload, "code")
        if code is not None:
            return code
    return None


def extract_error_message(error: BaseException) -> str:
    """Best human-readable message carried by the error."""
    reason = getattr(error, "reason", None)
    if isinstance(reason, str) and reason:
        return reason
    for payload in _nested_payloads(error):
        if payload is error:
            continue
        message = _get(payload, "message")
        if isinstance(message, str) and message:
            return message
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__


def extract_error_selector(error: BaseException) -> Optional[str]:
    """Return a 4-byte custom error selector found in the error data.

    Known selectors win over any other hex payload the error carries.
    """
    found = []
    for payload in _nested_payloads(error):
        for candidate in (payload, _get(payload, "data")):
            if isinstance(candidate, (bytes, bytearray)):
                candidate = "0x" + bytes(candidate).hex()
            if (
                isinstance(candidate, str)
                and candidate.startswith("0x")
                and len(candidate) >= 10
            ):
                found.append(candidate[:10].lower())
    for selector in found:
        if selector in ERROR_SELECTORS:
            return selector
    return found[0] if found else None


def extract_custom_error_name(error: BaseException) -> Optional[str]:
    """Name of the known custom error the failure carries, if any."""
    selector = extract_error_selector(error)
    if selector and selector in ERROR_SELECTORS:
        return ERROR_SELECTORS[selector]

    message = extract_error_message(error)
    for pattern in (_REVERTED_WITH_NAME, _CUSTOM_ERROR_NAME):
        match = pattern.search(message)
        if match and match.group(1) in BUSINESS_RULE_ERRORS:
            return match.group(1)

    text = f"{message} {error}"
    for name in BUSINESS_RULE_ERRORS:
        if name in text:
            return name
    return None


def is_user_rejection(error: BaseException) -> bool:
    if extract_error_code(error) == USER_REJECTED_CODE:
        return True
    text = f"{extract_error_message(error)} {error}"
    return any(marker in text for marker in USER_REJECTED_MARKERS)


def is_network_error(error: BaseException) -> bool:
    if isinstance(error, NETWORK_EXCEPTIONS):
        return True
    if extract_error_code(error) == "NETWORK_ERROR":
        return True
    text = f"{extract_error_message(error)} {error}"
    return any(marker in text for marker in NETWORK_MARKERS)


def classify_error(error: BaseException) -> ErrorClass:
    """
    Bucket a remote read failure.

    Rules are applied in priority order: user cancellation, known business
    rule error, network failure, unknown.
    """
    if is_user_rejection(error):
        return ErrorClass(ErrorKind.USER_REJECTED)

    name = extract_custom_error_name(error)
    if name:
        return ErrorClass(ErrorKind.BUSINESS_RULE, name)

    if is_network_error(error):
        return ErrorClass(ErrorKind.NETWORK)

    return ErrorClass(ErrorKind.UNKNOWN)
