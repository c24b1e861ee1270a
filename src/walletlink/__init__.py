"""walletlink: request-dispatch core of an injected Ethereum wallet provider."""

from walletlink.adapter import RelayAdapter
from walletlink.errors import EthereumRpcError, ProviderError
from walletlink.session.state import Chain, SessionListener

__all__ = [
    "Chain",
    "EthereumRpcError",
    "ProviderError",
    "RelayAdapter",
    "SessionListener",
]

__version__ = "0.1.0"
