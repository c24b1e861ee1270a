"""Chain and asset management requests."""

from walletlink.chains.models import (
    AddEthereumChainParams,
    ChainApproval,
    NativeCurrency,
    SwitchEthereumChainParams,
    WatchAssetParams,
)
from walletlink.chains.protocol import ChainMutationProtocol

__all__ = [
    "AddEthereumChainParams",
    "ChainApproval",
    "ChainMutationProtocol",
    "NativeCurrency",
    "SwitchEthereumChainParams",
    "WatchAssetParams",
]
