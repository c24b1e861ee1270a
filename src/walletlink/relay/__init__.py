"""Relay transports linking the provider to a wallet.

- LocalRelay: in-memory keys, HTTP access to JSON-RPC nodes
- DryRunRelay: simulated wallet, no keys, no network
"""

from walletlink.relay.base import RelayResponse, RelayTransport, RelayType
from walletlink.relay.factory import create_relay

__all__ = [
    "RelayResponse",
    "RelayTransport",
    "RelayType",
    "create_relay",
]
