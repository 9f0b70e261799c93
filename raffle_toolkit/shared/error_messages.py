"""
User-facing descriptions of contract and RPC errors.

Consumed by the presentation layer; nothing in the fetch pipeline makes
decisions based on these strings.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from raffle_toolkit.shared.error_classifier import (
    BUSINESS_RULE_ERRORS,
    extract_custom_error_name,
    extract_error_message,
    is_user_rejection,
)

CUSTOM_ERROR_MESSAGES = {
    # Prize claiming
    "NotAWinner": "You are not a winner of this raffle. Only winners can claim prizes.",
    "NoPrizesToClaim": "You have already claimed all your prizes. No prizes remaining to claim.",
    "InvalidPrizeAmount": "Invalid prize amount calculated. Please contact support for assistance.",
    "PrizeTransferFailed": "Prize transfer failed. Please ensure your wallet can receive the prize and try again.",
    "InvalidPrizeCollection": "Invalid prize collection address. Please contact the raffle creator.",
    "InvalidPoolState": "Raffle is not in the correct state for this action. Please wait for winner selection to complete.",
    "UnauthorizedCaller": "You are not authorized to perform this action. Only the creator, operators, or prize contract owner can mint prizes.",
    "ExceedsWinnersCount": "Cannot mint more prizes than the total number of winners.",
    "MintingNotSupported": "Minting is not supported for this prize type. This prize may be escrowed.",
    # Collection minting
    "UnauthorizedMinter": "You are not authorized to mint NFTs from this collection. Only the designated minter can mint.",
    "ZeroQuantity": "Mint quantity must be greater than 0. Please specify a valid quantity.",
    "ExceedsMaxSupply": "Minting would exceed the maximum supply for this collection. No more NFTs can be minted.",
    "SupplyNotSet": "Maximum supply has not been set for this token ID. Please contact the collection owner.",
    # Purchase
    "ZeroAddress": "Invalid address provided. Address cannot be zero.",
    "ZeroSlotFee": "Slot fee cannot be zero.",
    "PoolDurationElapsed": "Raffle duration has elapsed. No more tickets can be purchased.",
    "ExceedsMaxSlots": "Purchase exceeds the maximum number of available slots.",
    "IncorrectPayment": "Incorrect payment amount. Please ensure you send the exact amount required.",
    "ExceedsSlotLimit": "Purchase exceeds your personal slot limit for this raffle.",
    "ContractsCannotPurchase": "Smart contracts cannot purchase raffle tickets. Please use a regular wallet.",
    "ProtocolAdminNotAllowed": "Protocol administrators cannot participate in raffles.",
    "CreatorNotAllowed": "Raffle creators cannot purchase tickets in their own raffles.",
    "InvalidNonPrizedPurchase": "Cannot purchase tickets in a non-prized raffle.",
    "SocialEngagementNotConfigured": "Social engagement is required but not properly configured. Please contact support.",
    "InvalidState": "Raffle is not in a valid state for this action.",
    "OnlyOperator": "Only protocol operators can perform this action.",
}

# Checked in order against the raw message
GENERIC_ERROR_MESSAGES = (
    (("insufficient funds",), "Insufficient funds in your wallet to complete this transaction."),
    (
        ("gas required exceeds allowance", "out of gas"),
        "Transaction requires more gas than available. Please try again with a higher gas limit.",
    ),
    (
        ("nonce too low",),
        "Transaction nonce is too low. Please reset your wallet or wait for pending transactions to complete.",
    ),
    (
        ("replacement transaction underpriced",),
        "Replacement transaction has too low gas price. Please increase the gas price.",
    ),
    (
        ("network changed", "wrong network"),
        "Wrong network selected. Please switch to the correct network in your wallet.",
    ),
    (
        ("execution reverted",),
        "Transaction failed during execution. Please check the transaction details and try again.",
    ),
)

SUGGESTED_ACTIONS = {
    "NotAWinner": "Check the winners list to see if you won.",
    "NoPrizesToClaim": "You have already claimed your prizes. Check your wallet for the received prizes.",
    "InvalidPoolState": "Wait for the raffle to complete winner selection, then try again.",
    "UnauthorizedCaller": "Contact the raffle creator or a protocol operator to mint your prize.",
    "insufficient funds": "Add more funds to your wallet and try again.",
    "wrong network": "Switch to the correct network in your wallet settings.",
    "ExceedsMaxSupply": "This collection has reached its maximum supply. No more NFTs can be minted.",
    "PoolDurationElapsed": "This raffle has ended. You can no longer purchase tickets.",
    "ExceedsSlotLimit": "You have reached your maximum ticket limit for this raffle.",
}

WARNING_ERRORS = (
    "NoPrizesToClaim",
    "NotAWinner",
    "ExceedsSlotLimit",
    "PoolDurationElapsed",
)


@dataclass(frozen=True)
class ErrorDescription:
    """Everything the presentation layer needs to show a failure."""

    message: str
    severity: str  # "info", "warning" or "error"
    suggested_action: Optional[str]
    is_custom_error: bool
    original_error: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "severity": self.severity,
            "suggested_action": self.suggested_action,
            "is_custom_error": self.is_custom_error,
            "original_error": self.original_error,
        }


def parse_contract_error(
    error: BaseException, context: str = "complete transaction"
) -> str:
    """Turn a failure into a message a raffle participant can act on."""
    name = extract_custom_error_name(error)
    if name in CUSTOM_ERROR_MESSAGES:
        return CUSTOM_ERROR_MESSAGES[name]

    if is_user_rejection(error):
        return "Transaction was cancelled. You rejected the transaction in your wallet."

    message = extract_error_message(error)
    for markers, text in GENERIC_ERROR_MESSAGES:
        if any(marker in message for marker in markers):
            return text

    return f"Failed to {context}. Please try again or contact support if the issue persists."


def is_custom_contract_error(error: BaseException) -> bool:
    text = f"{extract_error_message(error)} {error}"
    return any(name in text for name in BUSINESS_RULE_ERRORS) or (
        extract_custom_error_name(error) is not None
    )


def get_error_severity(error: BaseException) -> str:
    if is_user_rejection(error):
        return "info"
    if extract_custom_error_name(error) in WARNING_ERRORS:
        return "warning"
    return "error"


def get_suggested_action(error: BaseException) -> Optional[str]:
    name = extract_custom_error_name(error)
    if name in SUGGESTED_ACTIONS:
        return SUGGESTED_ACTIONS[name]
    message = extract_error_message(error)
    for marker in ("insufficient funds", "wrong network"):
        if marker in message:
            return SUGGESTED_ACTIONS[marker]
    return None


def describe_error(
    error: BaseException, context: str = "complete transaction"
) -> ErrorDescription:
    """Format an error for display with all details."""
    return ErrorDescription(
        message=parse_contract_error(error, context),
        severity=get_error_severity(error),
        suggested_action=get_suggested_action(error),
        is_custom_error=is_custom_contract_error(error),
        original_error=extract_error_message(error),
    )
