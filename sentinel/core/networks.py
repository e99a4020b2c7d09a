"""Supported ledger network configurations."""

from __future__ import annotations

from dataclasses import dataclass

from sentinel.core.config import Settings, get_settings


@dataclass(frozen=True)
class NetworkConfig:
    """Configuration for a ledger network the engine can simulate against."""

    name: str
    display_name: str
    rpc_url: str
    is_testnet: bool = False


DEFAULT_NETWORK = "testnet"


def _registry(settings: Settings) -> dict[str, NetworkConfig]:
    return {
        "mainnet": NetworkConfig(
            name="mainnet",
            display_name="Movement Mainnet",
            rpc_url=settings.rpc_mainnet.rstrip("/"),
        ),
        "testnet": NetworkConfig(
            name="testnet",
            display_name="Movement Testnet",
            rpc_url=settings.rpc_testnet.rstrip("/"),
            is_testnet=True,
        ),
    }


def get_network_config(network: str, settings: Settings | None = None) -> NetworkConfig:
    """Get network configuration by name.

    Anything other than ``mainnet`` resolves to the testnet node.
    """
    networks = _registry(settings or get_settings())
    return networks.get(network.strip().lower(), networks[DEFAULT_NETWORK])


def get_all_networks(settings: Settings | None = None) -> list[NetworkConfig]:
    """Return all supported networks."""
    return list(_registry(settings or get_settings()).values())
