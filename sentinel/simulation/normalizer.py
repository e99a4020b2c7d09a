"""Turn a user call description into an RPC-ready, unsigned node call.

Identity lookups (sequence number, authentication key) and the ABI lookup are
best effort: a simulation is still useful with default identity fields, so
lookup failures are logged and replaced by safe defaults. Only malformed user
input is reported back as an error.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from sentinel.core.config import Settings, get_settings
from sentinel.core.errors import InvalidRequestError, SentinelError
from sentinel.core.types import CallKind, PreparedCall, SimulationRequest
from sentinel.simulation.client import NodeClient

logger = logging.getLogger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

DEFAULT_SEQUENCE_NUMBER = "0"

# Ed25519 base point: always a valid curve point, so the node accepts its
# format. With skip_auth_key_validation the key itself is never checked.
PLACEHOLDER_PUBLIC_KEY = "0x3b6a27bcceb6a42d62a3a8d02a6f0d73653215771de243a63ac048a18b59da29"
PLACEHOLDER_SIGNATURE = "0x" + "00" * 64

SIMULATE_PATH = "/transactions/simulate"
VIEW_PATH = "/view"
SIMULATE_PARAMS = {
    "estimate_gas_unit_price": "true",
    "estimate_prioritized_gas_unit_price": "false",
    "skip_auth_key_validation": "true",
}


@dataclass
class AccountInfo:
    """Identity fields for the simulated sender."""

    sequence_number: str = DEFAULT_SEQUENCE_NUMBER
    authentication_key: str | None = None


# ── Pure helpers ─────────────────────────────────────────────────────────────


def normalize_address(address: str) -> str:
    """Prefix ``0x`` if absent."""
    address = address.strip()
    if address.startswith("0x"):
        return address
    return f"0x{address}"


def stringify_args(args: list[Any]) -> list[Any]:
    """Encode JSON numbers as strings; the node schema wants string integers."""
    out: list[Any] = []
    for arg in args:
        if isinstance(arg, (int, float)) and not isinstance(arg, bool):
            out.append(str(arg))
        else:
            out.append(arg)
    return out


def function_id(request: SimulationRequest) -> str:
    """``address::module::function``."""
    return (
        f"{normalize_address(request.module_address)}"
        f"::{request.module_name}::{request.function_name}"
    )


def validate_request(request: SimulationRequest) -> None:
    if not request.module_name.strip():
        raise InvalidRequestError("module_name must not be empty")
    if not request.function_name.strip():
        raise InvalidRequestError("function_name must not be empty")


# ── Normalizer ───────────────────────────────────────────────────────────────


class RequestNormalizer:
    """Build the canonical node call for a ``SimulationRequest``."""

    def __init__(self, client: NodeClient, settings: Settings | None = None) -> None:
        self._client = client
        self.settings = settings or get_settings()

    async def fetch_account(self, rpc_url: str, address: str) -> AccountInfo:
        """Best-effort account lookup. Never raises."""
        try:
            account = await self._client.get_account(rpc_url, address)
        except SentinelError as exc:
            logger.info("Account lookup for %s failed, using defaults: %s", address, exc)
            return AccountInfo()

        if not isinstance(account, dict):
            return AccountInfo()

        sequence = account.get("sequence_number")
        auth_key = account.get("authentication_key")
        return AccountInfo(
            sequence_number=sequence if isinstance(sequence, str) and sequence else DEFAULT_SEQUENCE_NUMBER,
            authentication_key=auth_key if isinstance(auth_key, str) and auth_key else None,
        )

    async def is_view_function(self, rpc_url: str, request: SimulationRequest) -> bool:
        """Check the module ABI. Unknown or unreachable → treated as entry."""
        try:
            module = await self._client.get_module(
                rpc_url, normalize_address(request.module_address), request.module_name,
            )
        except SentinelError as exc:
            logger.info("ABI lookup for %s failed: %s", function_id(request), exc)
            return False

        abi = module.get("abi") if isinstance(module, dict) else None
        functions = abi.get("exposed_functions") if isinstance(abi, dict) else None
        if not isinstance(functions, list):
            return False

        for func in functions:
            if isinstance(func, dict) and func.get("name") == request.function_name:
                return func.get("is_view") is True or func.get("is_entry") is not True
        return False

    async def prepare(self, rpc_url: str, request: SimulationRequest) -> PreparedCall:
        """Resolve identity and endpoint, and build the unsigned call.

        Raises:
            InvalidRequestError: if module or function name is empty
        """
        validate_request(request)

        is_view = request.is_view or await self.is_view_function(rpc_url, request)
        if is_view:
            return self.build_view_call(request)

        sender = normalize_address(request.sender)
        account = await self.fetch_account(rpc_url, sender)
        return self.build_entry_call(request, account)

    def build_view_call(self, request: SimulationRequest) -> PreparedCall:
        return PreparedCall(
            kind=CallKind.VIEW,
            path=VIEW_PATH,
            body={
                "function": function_id(request),
                "type_arguments": list(request.type_args),
                "arguments": stringify_args(request.args),
            },
        )

    def build_entry_call(self, request: SimulationRequest, account: AccountInfo) -> PreparedCall:
        """Entry call with a structurally valid, cryptographically empty signature."""
        expiration = int(time.time()) + self.settings.expiration_window_seconds
        body = {
            "sender": normalize_address(request.sender),
            "sequence_number": account.sequence_number,
            "max_gas_amount": str(request.max_gas),
            "gas_unit_price": str(self.settings.gas_unit_price),
            "expiration_timestamp_secs": str(expiration),
            "payload": {
                "type": "entry_function_payload",
                "function": function_id(request),
                "type_arguments": list(request.type_args),
                "arguments": stringify_args(request.args),
            },
            "signature": {
                "type": "ed25519_signature",
                "public_key": account.authentication_key or PLACEHOLDER_PUBLIC_KEY,
                "signature": PLACEHOLDER_SIGNATURE,
            },
        }
        return PreparedCall(
            kind=CallKind.ENTRY,
            path=SIMULATE_PATH,
            params=dict(SIMULATE_PARAMS),
            body=body,
        )
