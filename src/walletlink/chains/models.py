"""Parameter contracts for chain and asset requests."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class NativeCurrency(BaseModel):
    """Native currency of a proposed chain."""

    name: str = Field(..., description="Currency name")
    symbol: str = Field(..., description="Ticker symbol")
    decimals: int = Field(..., description="Decimals of the smallest unit")


class AddEthereumChainParams(BaseModel):
    """wallet_addEthereumChain proposal (EIP-3085)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    chain_id: str = Field(..., alias="chainId", description="Hex chain id, e.g. 0x89")
    rpc_urls: Optional[list[str]] = Field(None, alias="rpcUrls")
    block_explorer_urls: Optional[list[str]] = Field(None, alias="blockExplorerUrls")
    chain_name: Optional[str] = Field(None, alias="chainName")
    icon_urls: Optional[list[str]] = Field(None, alias="iconUrls")
    native_currency: Optional[NativeCurrency] = Field(None, alias="nativeCurrency")


class SwitchEthereumChainParams(BaseModel):
    """wallet_switchEthereumChain request (EIP-3326)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    chain_id: str = Field(..., alias="chainId", description="Hex chain id")


class ChainApproval(BaseModel):
    """Wallet answer to a chain proposal or switch.

    Only a literal ``True`` counts as approval.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    is_approved: Any = Field(default=None, alias="isApproved")
    rpc_url: Any = Field(default="", alias="rpcUrl")

    @property
    def approved(self) -> bool:
        return self.is_approved is True

    @property
    def has_rpc_url(self) -> bool:
        return isinstance(self.rpc_url, str) and len(self.rpc_url) > 0


class WatchAssetOptions(BaseModel):
    address: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    image: Optional[str] = None


class WatchAssetParams(BaseModel):
    """wallet_watchAsset request (EIP-747)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: Optional[str] = None
    options: Optional[WatchAssetOptions] = None
