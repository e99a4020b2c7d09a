"""Tests for request normalization."""

from __future__ import annotations

import time

import pytest

from sentinel.core.config import Settings
from sentinel.core.errors import InvalidRequestError
from sentinel.core.types import CallKind, SimulationRequest
from sentinel.simulation.client import NodeClient
from sentinel.simulation.normalizer import (
    PLACEHOLDER_PUBLIC_KEY,
    PLACEHOLDER_SIGNATURE,
    SIMULATE_PARAMS,
    AccountInfo,
    RequestNormalizer,
    function_id,
    normalize_address,
    stringify_args,
)

RPC = "https://testnet.node.test/v1"
MODULE_PATH = "/accounts/0xabc/module/coin_flip"


def _abi(**flags) -> dict:
    return {"abi": {"exposed_functions": [{"name": "flip", **flags}]}}


class TestHelpers:
    @pytest.mark.parametrize(
        "raw, expected",
        [("0x1", "0x1"), ("abc", "0xabc"), ("  0xdef ", "0xdef")],
    )
    def test_normalize_address(self, raw: str, expected: str):
        assert normalize_address(raw) == expected

    def test_stringify_args(self):
        assert stringify_args([5, 1.5, True, "7", ["a"], None]) == ["5", "1.5", True, "7", ["a"], None]

    def test_function_id(self, transfer_request: SimulationRequest):
        assert function_id(transfer_request) == "0xabc::coin_flip::flip"


class TestPrepare:
    """Endpoint selection and identity resolution."""

    @pytest.mark.asyncio
    async def test_view_flag_skips_lookups(
        self, node_client: NodeClient, fake_node, settings: Settings, transfer_request: SimulationRequest,
    ):
        request = transfer_request.model_copy(update={"is_view": True, "type_args": ["0x1::aptos_coin::AptosCoin"]})
        call = await RequestNormalizer(node_client, settings).prepare(RPC, request)

        assert call.kind == CallKind.VIEW
        assert call.path == "/view"
        assert call.params == {}
        assert call.body == {
            "function": "0xabc::coin_flip::flip",
            "type_arguments": ["0x1::aptos_coin::AptosCoin"],
            "arguments": ["0xb0b", "1000", "7", True],
        }
        assert fake_node.requests == []

    @pytest.mark.asyncio
    async def test_abi_view_function(
        self, node_client: NodeClient, fake_node, settings: Settings, transfer_request: SimulationRequest,
    ):
        fake_node.json("GET", MODULE_PATH, _abi(is_view=True, is_entry=False))
        call = await RequestNormalizer(node_client, settings).prepare(RPC, transfer_request)
        assert call.kind == CallKind.VIEW

    @pytest.mark.asyncio
    async def test_abi_non_entry_function_is_view(
        self, node_client: NodeClient, fake_node, settings: Settings, transfer_request: SimulationRequest,
    ):
        fake_node.json("GET", MODULE_PATH, _abi(is_view=False, is_entry=False))
        call = await RequestNormalizer(node_client, settings).prepare(RPC, transfer_request)
        assert call.kind == CallKind.VIEW

    @pytest.mark.asyncio
    async def test_entry_function_uses_account(
        self, node_client: NodeClient, fake_node, settings: Settings, transfer_request: SimulationRequest,
    ):
        fake_node.json("GET", MODULE_PATH, _abi(is_view=False, is_entry=True))
        fake_node.json("GET", "/accounts/0xa11ce", {"sequence_number": "7", "authentication_key": "0xfeed"})
        request = transfer_request.model_copy(update={"max_gas": 5000})

        before = int(time.time())
        call = await RequestNormalizer(node_client, settings).prepare(RPC, request)

        assert call.kind == CallKind.ENTRY
        assert call.path == "/transactions/simulate"
        assert call.params == SIMULATE_PARAMS
        body = call.body
        assert body["sender"] == "0xa11ce"
        assert body["sequence_number"] == "7"
        assert body["max_gas_amount"] == "5000"
        assert body["gas_unit_price"] == "100"
        expiration = int(body["expiration_timestamp_secs"])
        assert before + 600 <= expiration <= int(time.time()) + 600
        assert body["payload"] == {
            "type": "entry_function_payload",
            "function": "0xabc::coin_flip::flip",
            "type_arguments": [],
            "arguments": ["0xb0b", "1000", "7", True],
        }
        assert body["signature"] == {
            "type": "ed25519_signature",
            "public_key": "0xfeed",
            "signature": PLACEHOLDER_SIGNATURE,
        }

    @pytest.mark.asyncio
    async def test_lookups_fail_soft(
        self, node_client: NodeClient, fake_node, settings: Settings, transfer_request: SimulationRequest,
    ):
        # No routes: module and account both 404
        call = await RequestNormalizer(node_client, settings).prepare(RPC, transfer_request)

        assert call.kind == CallKind.ENTRY
        assert call.body["sequence_number"] == "0"
        assert call.body["signature"]["public_key"] == PLACEHOLDER_PUBLIC_KEY

    @pytest.mark.asyncio
    async def test_unknown_function_in_abi_is_entry(
        self, node_client: NodeClient, fake_node, settings: Settings, transfer_request: SimulationRequest,
    ):
        fake_node.json("GET", MODULE_PATH, {"abi": {"exposed_functions": [{"name": "other", "is_view": True}]}})
        call = await RequestNormalizer(node_client, settings).prepare(RPC, transfer_request)
        assert call.kind == CallKind.ENTRY

    @pytest.mark.asyncio
    async def test_sender_normalized(
        self, node_client: NodeClient, fake_node, settings: Settings, transfer_request: SimulationRequest,
    ):
        request = transfer_request.model_copy(update={"sender": "a11ce"})
        call = await RequestNormalizer(node_client, settings).prepare(RPC, request)
        assert call.body["sender"] == "0xa11ce"
        assert fake_node.requests[-1].url.path == "/v1/accounts/0xa11ce"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["module_name", "function_name"])
    async def test_empty_names_rejected(
        self, node_client: NodeClient, settings: Settings, transfer_request: SimulationRequest, field: str,
    ):
        request = transfer_request.model_copy(update={field: "  "})
        with pytest.raises(InvalidRequestError):
            await RequestNormalizer(node_client, settings).prepare(RPC, request)


class TestFetchAccount:
    @pytest.mark.asyncio
    async def test_malformed_account_defaults(self, node_client: NodeClient, fake_node, settings: Settings):
        fake_node.json("GET", "/accounts/0x1", {"sequence_number": 3, "authentication_key": ""})
        account = await RequestNormalizer(node_client, settings).fetch_account(RPC, "0x1")
        assert account == AccountInfo()

    @pytest.mark.asyncio
    async def test_unusable_address_defaults(self, node_client: NodeClient, fake_node, settings: Settings):
        account = await RequestNormalizer(node_client, settings).fetch_account(RPC, "0xab\x01cd")
        assert account == AccountInfo()


class TestIsViewFunction:
    @pytest.mark.asyncio
    async def test_unusable_module_name_is_entry(
        self, node_client: NodeClient, settings: Settings, transfer_request: SimulationRequest,
    ):
        request = transfer_request.model_copy(update={"module_name": "coin\x01flip"})
        normalizer = RequestNormalizer(node_client, settings)

        assert await normalizer.is_view_function(RPC, request) is False
        call = await normalizer.prepare(RPC, request)
        assert call.kind == CallKind.ENTRY
