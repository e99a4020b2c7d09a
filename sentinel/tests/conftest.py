"""Shared fixtures for the Sentinel engine test suite."""

from __future__ import annotations

import json
from typing import Any, AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from sentinel.core.config import Settings
from sentinel.core.types import (
    ChangeType,
    SimEvent,
    SimulationRequest,
    SimulationResult,
    StateChange,
)
from sentinel.simulation.client import NodeClient

TESTNET_URL = "https://testnet.node.test/v1"
MAINNET_URL = "https://mainnet.node.test/v1"

COIN_STORE = "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>"


# ── Fake ledger node ─────────────────────────────────────────────────────────


class FakeNode:
    """In-process stand-in for a ledger RPC node.

    Routes are keyed by ``(method, path)`` where the path excludes the
    ``/v1`` prefix. Unrouted requests answer 404 like a real node would for
    an unknown account or module.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, response: Any) -> None:
        self.routes[(method, path)] = response

    def json(self, method: str, path: str, payload: Any, status: int = 200) -> None:
        self.on(method, path, lambda request: httpx.Response(status, json=payload))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": "not found", "error_code": "not_found"})
        if callable(route):
            return route(request)
        return route

    def bodies(self, path: str) -> list[Any]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path.removeprefix("/v1") == path
        ]


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        rpc_testnet=TESTNET_URL,
        rpc_mainnet=MAINNET_URL,
        node_api_key="",
    )


@pytest.fixture
def fake_node() -> FakeNode:
    return FakeNode()


@pytest_asyncio.fixture
async def node_client(settings: Settings, fake_node: FakeNode) -> AsyncGenerator[NodeClient, None]:
    client = NodeClient(settings, transport=httpx.MockTransport(fake_node.handler))
    yield client
    await client.close()


# ── Requests & results ───────────────────────────────────────────────────────


@pytest.fixture
def transfer_request() -> SimulationRequest:
    return SimulationRequest(
        network="testnet",
        sender="0xa11ce",
        module_address="0xabc",
        module_name="coin_flip",
        function_name="flip",
        args=["0xb0b", "1000", 7, True],
    )


@pytest.fixture
def transfer_result() -> SimulationResult:
    """10 000 gas, two resource writes and one event."""
    return SimulationResult(
        success=True,
        gas_used=10_000,
        gas_unit_price=100,
        vm_status="Executed successfully",
        state_changes=[
            StateChange(
                address="0xa11ce",
                resource=COIN_STORE,
                change_type=ChangeType.WRITE,
                after={"coin": {"value": "9000"}},
            ),
            StateChange(
                address="0xb0b",
                resource=COIN_STORE,
                change_type=ChangeType.WRITE,
                after={"coin": {"value": "1000"}},
            ),
        ],
        events=[
            SimEvent(type="0x1::coin::DepositEvent", data={"amount": "1000"}, sequence_number=3),
        ],
    )


@pytest.fixture
def simulate_payload() -> list[dict[str, Any]]:
    """Raw ``/transactions/simulate`` body as a node returns it."""
    return [
        {
            "success": True,
            "vm_status": "Executed successfully",
            "gas_used": "1234",
            "gas_unit_price": "100",
            "changes": [
                {
                    "type": "write_resource",
                    "address": "0xa11ce",
                    "data": {"type": COIN_STORE, "data": {"coin": {"value": "10"}}},
                },
                {
                    "type": "delete_resource",
                    "address": "0xa11ce",
                    "resource": "0xabc::coin_flip::Pending",
                },
                {"type": "write_table_item", "address": "0xa11ce", "handle": "0x99"},
            ],
            "events": [
                {
                    "type": "0x1::coin::DepositEvent",
                    "data": {"amount": "10"},
                    "sequence_number": "3",
                },
            ],
        },
    ]
