"""Unit tests for tool declarations, argument models and argument decoding."""

import json
from decimal import Decimal

import pytest

from voicebank.core.exceptions import InvalidAmountError, ProtocolError
from voicebank.models.card import CardStatus
from voicebank.realtime import events
from voicebank.realtime.dispatcher import TOOL_HANDLERS, parse_arguments, validate_arguments
from voicebank.realtime.tools import TOOL_DEFINITIONS
from voicebank.schemas.tools import (
    SetCardStatusArgs,
    TransactionHistoryArgs,
    TransferFundsArgs,
    WithdrawFundsArgs,
)


class TestToolDefinitions:
    """Test the function declarations sent in session.update."""

    def test_declares_exactly_five_tools(self):
        assert {tool["name"] for tool in TOOL_DEFINITIONS} == {
            "get_balance",
            "transfer_funds",
            "withdraw_funds",
            "get_transaction_history",
            "set_card_status",
        }
        assert len(TOOL_DEFINITIONS) == 5

    def test_every_declared_tool_has_a_handler(self):
        assert set(TOOL_HANDLERS) == {tool["name"] for tool in TOOL_DEFINITIONS}

    def test_required_fields(self):
        by_name = {tool["name"]: tool["parameters"] for tool in TOOL_DEFINITIONS}

        assert by_name["transfer_funds"]["required"] == ["amount", "fromAccount", "toAccount"]
        assert by_name["withdraw_funds"]["required"] == ["amount", "accountType"]
        assert by_name["get_transaction_history"]["required"] == ["accountType"]
        assert by_name["set_card_status"]["properties"]["status"]["enum"] == ["Active", "Inactive"]

    def test_session_update_event(self):
        """Test session.update carries instructions, modalities and tools."""
        event = events.session_update("Be brief.")

        assert event["type"] == "session.update"
        assert event["session"]["instructions"] == "Be brief."
        assert event["session"]["modalities"] == ["audio", "text"]
        assert [t["name"] for t in event["session"]["tools"]] == [
            t["name"] for t in TOOL_DEFINITIONS
        ]

    def test_function_call_output_serializes_result(self):
        """Test the tool result travels as a JSON string."""
        event = events.function_call_output("call_1", {"success": True, "balance": "10.00"})

        assert event["type"] == "conversation.item.create"
        assert event["item"]["type"] == "function_call_output"
        assert event["item"]["call_id"] == "call_1"
        assert json.loads(event["item"]["output"]) == {"success": True, "balance": "10.00"}


class TestParseArguments:
    """Test decoding of the raw arguments payload."""

    def test_json_object(self):
        assert parse_arguments('{"accountType": "Checking"}') == {"accountType": "Checking"}

    def test_empty_payload(self):
        assert parse_arguments(None) == {}
        assert parse_arguments("") == {}

    def test_already_decoded(self):
        assert parse_arguments({"limit": 2}) == {"limit": 2}

    @pytest.mark.parametrize("payload", ["{not json", "[1, 2]", '"Checking"', "42"])
    def test_malformed_payload(self, payload):
        with pytest.raises(ProtocolError) as exc_info:
            parse_arguments(payload)

        assert exc_info.value.error_code == "PROTO_001"


class TestValidateArguments:
    """Test argument models and how their failures map to error codes."""

    def test_transfer_arguments(self):
        args = validate_arguments(
            TransferFundsArgs, {"amount": 100, "fromAccount": "Checking", "toAccount": "Savings"}
        )

        assert args.amount == Decimal("100")
        assert args.fromAccount == "Checking"

    @pytest.mark.parametrize("amount", [-5, 0, "abc", 1.234, None])
    def test_bad_amount_is_invalid_amount(self, amount):
        with pytest.raises(InvalidAmountError):
            validate_arguments(WithdrawFundsArgs, {"amount": amount, "accountType": "Checking"})

    def test_missing_amount_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            validate_arguments(WithdrawFundsArgs, {"accountType": "Checking"})

    def test_missing_account_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            validate_arguments(WithdrawFundsArgs, {"amount": 50})

    def test_unknown_fields_are_ignored(self):
        args = validate_arguments(
            WithdrawFundsArgs, {"amount": 50, "accountType": "Checking", "note": "rent"}
        )

        assert not hasattr(args, "note")

    @pytest.mark.parametrize(
        "limit,expected",
        [(None, 3), (0, 3), (-2, 3), (1, 1), ("5", 5), (50, 50), (500, 50)],
    )
    def test_history_limit_is_clamped(self, limit, expected):
        args = validate_arguments(TransactionHistoryArgs, {"accountType": "Checking", "limit": limit})

        assert args.limit == expected

    def test_history_limit_must_be_a_number(self):
        with pytest.raises(ProtocolError):
            validate_arguments(TransactionHistoryArgs, {"accountType": "Checking", "limit": "lots"})

    def test_card_status_is_case_insensitive(self):
        args = validate_arguments(SetCardStatusArgs, {"cardLast4": "4242", "status": "Inactive"})

        assert args.status is CardStatus.INACTIVE
        assert args.card_selector == "4242"

    def test_card_type_selector(self):
        args = validate_arguments(SetCardStatusArgs, {"cardType": "Visa", "status": "active"})

        assert args.card_selector == "Visa"

    def test_card_status_needs_a_selector(self):
        with pytest.raises(ProtocolError):
            validate_arguments(SetCardStatusArgs, {"status": "Active"})

    def test_card_status_rejects_unknown_status(self):
        with pytest.raises(ProtocolError):
            validate_arguments(SetCardStatusArgs, {"cardLast4": "4242", "status": "frozen"})
