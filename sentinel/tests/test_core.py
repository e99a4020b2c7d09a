"""Tests for core helpers: type naming, errors and logging."""

from __future__ import annotations

import json
import logging

import pytest

from sentinel.core.errors import (
    ErrorCode,
    InvalidRequestError,
    SentinelError,
    ShapeError,
    SimulationFailedError,
    TransportError,
)
from sentinel.core.logging import DevFormatter, JSONFormatter, setup_logging
from sentinel.core.naming import module_of_type, short_resource_name


# ── Naming ───────────────────────────────────────────────────────────────────


class TestShortResourceName:
    @pytest.mark.parametrize(
        "full, short",
        [
            ("0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>", "CoinStore<AptosCoin>"),
            ("0x1::account::Account", "Account"),
            ("Plain", "Plain"),
            (
                "0x1::table::Table<address, 0x1::string::String>",
                "Table<address, String>",
            ),
            (
                "0xabc::pool::Pool<0x1::coin::Coin<0x1::aptos_coin::AptosCoin>, 0xabc::lp::LP>",
                "Pool<Coin<AptosCoin>, LP>",
            ),
        ],
    )
    def test_short_names(self, full: str, short: str):
        assert short_resource_name(full) == short


class TestModuleOfType:
    def test_module_segment(self):
        assert module_of_type("0x1::coin::DepositEvent") == "coin"

    def test_no_module(self):
        assert module_of_type("DepositEvent") is None


# ── Errors ───────────────────────────────────────────────────────────────────


class TestErrors:
    @pytest.mark.parametrize(
        "cls, code, status",
        [
            (InvalidRequestError, ErrorCode.BAD_REQUEST, 400),
            (TransportError, ErrorCode.RPC_ERROR, 502),
            (ShapeError, ErrorCode.EMPTY_RESPONSE, 502),
            (SimulationFailedError, ErrorCode.SIMULATION_FAILED, 400),
        ],
    )
    def test_codes_and_status(self, cls: type[SentinelError], code: ErrorCode, status: int):
        err = cls("boom")
        assert isinstance(err, SentinelError)
        assert err.code == code
        assert err.status_code == status
        assert str(err) == "boom"

    def test_envelope(self):
        err = ShapeError("Empty response from simulation")
        assert err.to_dict() == {
            "error": {"code": "EMPTY_RESPONSE", "message": "Empty response from simulation"},
        }

    def test_transport_error_carries_node_details(self):
        err = TransportError("Simulation failed: nope", response_text="nope", node_status=400)
        assert err.response_text == "nope"
        assert err.node_status == 400


# ── Logging ──────────────────────────────────────────────────────────────────


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("sentinel.test", logging.INFO, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogging:
    def test_json_formatter_includes_context(self):
        out = json.loads(JSONFormatter().format(_record(network="mainnet", gas_used=42)))
        assert out["message"] == "hello"
        assert out["level"] == "INFO"
        assert out["logger"] == "sentinel.test"
        assert out["network"] == "mainnet"
        assert out["gas_used"] == 42
        assert "scenario" not in out

    def test_dev_formatter_prefixes_network(self):
        out = DevFormatter().format(_record(network="testnet"))
        assert "[testnet] hello" in out

    def test_setup_logging_production_uses_json(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            setup_logging("production", "debug")
            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[-1].formatter, JSONFormatter)
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:], root.level = saved[0], saved[1]

    def test_setup_logging_development_uses_dev(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            setup_logging("development", "not-a-level")
            assert root.level == logging.INFO
            assert isinstance(root.handlers[-1].formatter, DevFormatter)
        finally:
            root.handlers[:], root.level = saved[0], saved[1]
