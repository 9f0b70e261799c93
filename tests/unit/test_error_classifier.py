"""
Unit tests for remote read error classification.
"""

import asyncio

import pytest
from requests.exceptions import ConnectTimeout
from requests.exceptions import ConnectionError as RequestsConnectionError

from raffle_toolkit.shared.error_classifier import (
    ErrorClass,
    ErrorKind,
    classify_error,
    extract_custom_error_name,
    extract_error_message,
)


class RpcError(Exception):
    """Error shaped like the ones JSON-RPC providers raise."""

    def __init__(self, message: str, code=None, data=None):
        super().__init__(message)
        self.code = code
        self.data = data


class TestUserRejection:
    def test_code_4001(self):
        assert classify_error(RpcError("nope", code=4001)).kind == ErrorKind.USER_REJECTED

    def test_nested_code_4001(self):
        error = Exception({"code": 4001, "message": "User rejected the request."})
        assert classify_error(error).kind == ErrorKind.USER_REJECTED

    @pytest.mark.parametrize(
        "message",
        [
            "user rejected transaction",
            "MetaMask Tx Signature: User denied transaction signature.",
            "user cancelled the request",
        ],
    )
    def test_rejection_messages(self, message):
        assert classify_error(Exception(message)).kind == ErrorKind.USER_REJECTED

    def test_rejection_wins_over_business_rule(self):
        error = RpcError("execution reverted: NotAWinner", code=4001)
        assert classify_error(error).kind == ErrorKind.USER_REJECTED


class TestBusinessRule:
    def test_selector_in_data(self):
        error = RpcError("execution reverted", data="0xb19a9f82")
        assert classify_error(error) == ErrorClass(ErrorKind.BUSINESS_RULE, "NotAWinner")

    def test_selector_in_nested_dict(self):
        error = Exception(
            {"message": "execution reverted", "data": {"data": "0x7145fa7b" + "00" * 32}}
        )
        assert classify_error(error).name == "ExceedsMaxSlots"

    def test_selector_as_bytes(self):
        error = RpcError("execution reverted", data=bytes.fromhex("176f75b8"))
        assert classify_error(error).name == "ExceedsSlotLimit"

    def test_reverted_with_name(self):
        error = Exception("execution reverted: IncorrectPayment")
        assert classify_error(error).name == "IncorrectPayment"

    def test_custom_error_message(self):
        error = Exception("reverted with custom error 'CreatorNotAllowed()'")
        assert classify_error(error).name == "CreatorNotAllowed"

    def test_unknown_selector_is_not_business_rule(self):
        error = RpcError("execution reverted", data="0xdeadbeef")
        assert classify_error(error).kind == ErrorKind.UNKNOWN

    def test_is_not_retryable(self):
        verdict = classify_error(Exception("execution reverted: InvalidState"))
        assert not verdict.is_retryable
        assert str(verdict) == "business_rule(InvalidState)"


class TestNetwork:
    @pytest.mark.parametrize(
        "error",
        [
            asyncio.TimeoutError(),
            TimeoutError("read timed out"),
            ConnectionError("refused"),
            RequestsConnectionError("Max retries exceeded"),
            ConnectTimeout("connect"),
            RpcError("could not detect network", code="NETWORK_ERROR"),
            Exception("Network Error"),
            Exception("CONNECTION ERROR: Couldn't connect to node"),
            Exception("request timeout after 12000ms"),
        ],
    )
    def test_network_errors(self, error):
        verdict = classify_error(error)
        assert verdict.kind == ErrorKind.NETWORK
        assert verdict.is_retryable


class TestUnknown:
    def test_plain_revert_is_unknown(self):
        assert classify_error(Exception("execution reverted")).kind == ErrorKind.UNKNOWN

    def test_value_error_is_unknown(self):
        verdict = classify_error(ValueError("bad things"))
        assert verdict == ErrorClass(ErrorKind.UNKNOWN)
        assert verdict.is_retryable


class TestExtraction:
    def test_reason_preferred(self):
        error = Exception("outer")
        error.reason = "execution reverted: NotAWinner"
        assert extract_error_message(error) == "execution reverted: NotAWinner"

    def test_nested_message(self):
        error = Exception({"code": -32000, "message": "header not found"})
        assert extract_error_message(error) == "header not found"

    def test_falls_back_to_class_name(self):
        assert extract_error_message(asyncio.TimeoutError()) == "TimeoutError"

    def test_custom_error_name_none(self):
        assert extract_custom_error_name(Exception("boom")) is None

    def test_classifier_does_not_mutate(self):
        error = RpcError("execution reverted", data="0xb19a9f82")
        classify_error(error)
        assert str(error) == "execution reverted"
        assert error.data == "0xb19a9f82"
