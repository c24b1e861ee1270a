"""Closed set of methods the provider answers itself.

Any method name outside RpcMethod is forwarded to the JSON-RPC node through
the relay.
"""

from enum import Enum
from typing import Optional


class RpcMethod(str, Enum):
    """Locally handled JSON-RPC methods."""

    # Answered from session state, never suspend
    ETH_ACCOUNTS = "eth_accounts"
    ETH_COINBASE = "eth_coinbase"
    NET_VERSION = "net_version"
    ETH_CHAIN_ID = "eth_chainId"

    # Accounts
    ETH_REQUEST_ACCOUNTS = "eth_requestAccounts"

    # Message signing and recovery
    ETH_SIGN = "eth_sign"
    ETH_EC_RECOVER = "eth_ecRecover"
    PERSONAL_SIGN = "personal_sign"
    PERSONAL_EC_RECOVER = "personal_ecRecover"

    # Transactions
    ETH_SIGN_TRANSACTION = "eth_signTransaction"
    ETH_SEND_RAW_TRANSACTION = "eth_sendRawTransaction"
    ETH_SEND_TRANSACTION = "eth_sendTransaction"

    # Typed data
    ETH_SIGN_TYPED_DATA_V1 = "eth_signTypedData_v1"
    ETH_SIGN_TYPED_DATA_V2 = "eth_signTypedData_v2"
    ETH_SIGN_TYPED_DATA_V3 = "eth_signTypedData_v3"
    ETH_SIGN_TYPED_DATA_V4 = "eth_signTypedData_v4"
    ETH_SIGN_TYPED_DATA = "eth_signTypedData"

    # Wallet management
    WALLET_ADD_ETHEREUM_CHAIN = "wallet_addEthereumChain"
    WALLET_SWITCH_ETHEREUM_CHAIN = "wallet_switchEthereumChain"
    WALLET_WATCH_ASSET = "wallet_watchAsset"

    @classmethod
    def lookup(cls, name: str) -> Optional["RpcMethod"]:
        """Enum member for a method name, or None for pass-through methods."""
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def is_synchronous(self) -> bool:
        return self in SYNCHRONOUS_METHODS


SYNCHRONOUS_METHODS = frozenset({
    RpcMethod.ETH_ACCOUNTS,
    RpcMethod.ETH_COINBASE,
    RpcMethod.NET_VERSION,
    RpcMethod.ETH_CHAIN_ID,
})
