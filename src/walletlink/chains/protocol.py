"""Chain mutation flows: add chain, switch chain, watch asset.

State changes only after the wallet explicitly approves, and always go
through SessionState.update_provider_info so chain-changed notifications
stay consistent.
"""

import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from walletlink.chains.models import (
    AddEthereumChainParams,
    ChainApproval,
    SwitchEthereumChainParams,
    WatchAssetParams,
)
from walletlink.errors import (
    ADD_CHAIN_ERROR_CODE,
    EthereumRpcError,
    InvalidParamsError,
    ProviderError,
    RpcErrorCode,
    UnsupportedChainError,
)
from walletlink.relay.base import RelayTransport
from walletlink.rpc.models import JSONRPCResponse
from walletlink.session.guard import AuthorizationGuard
from walletlink.session.state import SessionState
from walletlink.utils.encoding import param_at

logger = logging.getLogger(__name__)

SUPPORTED_ASSET_TYPES = ("ERC20",)


def _parse_hex_chain_id(value: str) -> int:
    try:
        chain_id = int(value, 16)
    except (TypeError, ValueError):
        raise InvalidParamsError(f"Invalid chainId: {value}") from None
    if chain_id <= 0:
        raise InvalidParamsError(f"Invalid chainId: {value}")
    return chain_id


def _object_param(params: Any) -> dict:
    raw = params if isinstance(params, dict) else param_at(params, 0)
    if not isinstance(raw, dict):
        raise InvalidParamsError("Expected a single object parameter")
    return raw


def _validate(raw: dict, model):
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise InvalidParamsError(f"Invalid parameters: {e.errors()[0]['msg']}") from e


def _relay_error(code: int, message: Optional[str]) -> EthereumRpcError:
    if 1000 <= code <= 4999:
        return ProviderError(code, message)
    return EthereumRpcError(code, message)


class ChainMutationProtocol:
    """Implements wallet_addEthereumChain, wallet_switchEthereumChain and wallet_watchAsset."""

    def __init__(
        self,
        session: SessionState,
        guard: AuthorizationGuard,
        ensure_relay: Callable[[], RelayTransport],
    ):
        self._session = session
        self._guard = guard
        self._ensure_relay = ensure_relay

    async def add_ethereum_chain(self, params: Any) -> JSONRPCResponse:
        """Handle wallet_addEthereumChain.

        An explicitly empty rpcUrls list and a refused proposal are reported
        as error envelopes; other invalid input raises InvalidParamsError.
        """
        raw = _object_param(params)

        if isinstance(raw.get("rpcUrls"), list) and len(raw["rpcUrls"]) == 0:
            return JSONRPCResponse.failure(
                ADD_CHAIN_ERROR_CODE, "please pass in at least 1 rpcUrl"
            )

        request = _validate(raw, AddEthereumChainParams)

        if not request.chain_name or request.chain_name.strip() == "":
            raise InvalidParamsError("chainName is a required field")

        if request.native_currency is None:
            raise InvalidParamsError("nativeCurrency is a required field")

        chain_id = _parse_hex_chain_id(request.chain_id)
        approved = await self.propose_chain(
            chain_id=chain_id,
            rpc_urls=request.rpc_urls or [],
            block_explorer_urls=request.block_explorer_urls or [],
            chain_name=request.chain_name,
            icon_urls=request.icon_urls or [],
            native_currency=request.native_currency.model_dump(),
        )
        if approved:
            return JSONRPCResponse.success(None)
        return JSONRPCResponse.failure(ADD_CHAIN_ERROR_CODE, "unable to add ethereum chain")

    async def propose_chain(
        self,
        chain_id: int,
        rpc_urls: list[str],
        block_explorer_urls: list[str],
        chain_name: str,
        icon_urls: list[str],
        native_currency: dict,
    ) -> bool:
        """Propose a chain to the wallet.

        Returns:
            True only when the wallet explicitly approved the chain
        """
        if chain_id == self._session.chain_id:
            logger.debug(f"Chain {chain_id} is already active, not proposing it")
            return False

        relay = self._ensure_relay()

        if not self._guard.is_authorized():
            await relay.request_ethereum_accounts()

        response = await relay.add_ethereum_chain(
            str(chain_id), rpc_urls, icon_urls, block_explorer_urls, chain_name, native_currency
        )
        if response.is_error:
            logger.warning(f"Wallet refused chain {chain_id}: {response.error_message}")
            return False

        approval = (
            ChainApproval.model_validate(response.result)
            if isinstance(response.result, dict)
            else ChainApproval()
        )
        if approval.approved:
            rpc_url = rpc_urls[0] if rpc_urls else (approval.rpc_url or "")
            self._session.update_provider_info(rpc_url, chain_id)
        return approval.approved

    async def switch_ethereum_chain(self, params: Any) -> JSONRPCResponse:
        """Handle wallet_switchEthereumChain.

        Older wallets signal "unsupported" with an error lacking a code; that
        case resolves quietly without changing state.

        Raises:
            UnsupportedChainError: The wallet does not know the chain
            ProviderError: Any other coded wallet error
        """
        request = _validate(_object_param(params), SwitchEthereumChainParams)
        chain_id = _parse_hex_chain_id(request.chain_id)

        relay = self._ensure_relay()
        response = await relay.switch_ethereum_chain(
            str(chain_id), self._session.selected_address or None
        )

        if response.is_error:
            if not response.error_code:
                logger.info(f"Wallet ignored switch to chain {chain_id}")
                return JSONRPCResponse.success(None)
            if response.error_code == RpcErrorCode.UNSUPPORTED_CHAIN:
                raise UnsupportedChainError()
            raise _relay_error(response.error_code, response.error_message)

        approval = (
            ChainApproval.model_validate(response.result)
            if isinstance(response.result, dict)
            else ChainApproval()
        )
        if approval.approved and approval.has_rpc_url:
            self._session.update_provider_info(approval.rpc_url, chain_id)
        return JSONRPCResponse.success(None)

    async def watch_asset(self, params: Any) -> JSONRPCResponse:
        """Handle wallet_watchAsset (ERC20 only)."""
        raw = param_at(params, 0) if isinstance(params, (list, tuple)) else params
        if not isinstance(raw, dict):
            raise InvalidParamsError("Type is required")
        request = _validate(raw, WatchAssetParams)

        if not request.type:
            raise InvalidParamsError("Type is required")
        if request.type not in SUPPORTED_ASSET_TYPES:
            raise InvalidParamsError(f"Asset of type '{request.type}' is not supported")
        if request.options is None:
            raise InvalidParamsError("Options are required")
        if not request.options.address:
            raise InvalidParamsError("Address is required")

        options = request.options
        relay = self._ensure_relay()
        response = await relay.watch_asset(
            request.type,
            options.address,
            options.symbol,
            options.decimals,
            options.image,
            str(self._session.chain_id),
        )
        if response.is_error:
            return JSONRPCResponse.success(False)
        return JSONRPCResponse.success(bool(response.result))
