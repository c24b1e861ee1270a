"""Method routing.

Every request is classified in a fixed order:

1. Synchronous-local (eth_accounts, eth_coinbase, net_version, eth_chainId):
   answered from session state without suspending
2. Asynchronous-local: a registered handler for an RpcMethod
3. Pass-through: anything else goes to the JSON-RPC node via the relay

Synchronous classification always runs first so those methods never wait
on the network.
"""

import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from walletlink.errors import InternalError
from walletlink.relay.base import RelayTransport
from walletlink.rpc.handlers import WalletMethodHandlers
from walletlink.rpc.methods import RpcMethod
from walletlink.rpc.models import JSONRPCRequest, JSONRPCResponse
from walletlink.session.state import SessionState

logger = logging.getLogger(__name__)

# Returned by handle_synchronous for methods without a synchronous handler.
# None cannot be used: eth_coinbase legitimately answers None.
UNHANDLED = object()

AsyncHandler = Callable[[Any], Awaitable[JSONRPCResponse]]


class MethodRouter:
    """Dispatches requests to local handlers or the relay."""

    def __init__(
        self,
        handlers: WalletMethodHandlers,
        session: SessionState,
        ensure_relay: Callable[[], RelayTransport],
    ):
        self._session = session
        self._ensure_relay = ensure_relay

        self._synchronous: dict[RpcMethod, Callable[[], Any]] = {
            RpcMethod.ETH_ACCOUNTS: handlers.eth_accounts,
            RpcMethod.ETH_COINBASE: handlers.eth_coinbase,
            RpcMethod.NET_VERSION: handlers.net_version,
            RpcMethod.ETH_CHAIN_ID: handlers.eth_chain_id,
        }
        self._asynchronous: dict[RpcMethod, AsyncHandler] = {
            RpcMethod.ETH_REQUEST_ACCOUNTS: handlers.eth_request_accounts,
            RpcMethod.ETH_SIGN: handlers.eth_sign,
            RpcMethod.ETH_EC_RECOVER: handlers.eth_ec_recover,
            RpcMethod.PERSONAL_SIGN: handlers.personal_sign,
            RpcMethod.PERSONAL_EC_RECOVER: handlers.personal_ec_recover,
            RpcMethod.ETH_SIGN_TRANSACTION: handlers.eth_sign_transaction,
            RpcMethod.ETH_SEND_RAW_TRANSACTION: handlers.eth_send_raw_transaction,
            RpcMethod.ETH_SEND_TRANSACTION: handlers.eth_send_transaction,
            RpcMethod.ETH_SIGN_TYPED_DATA_V1: handlers.eth_sign_typed_data_v1,
            RpcMethod.ETH_SIGN_TYPED_DATA_V2: handlers.eth_sign_typed_data_v2,
            RpcMethod.ETH_SIGN_TYPED_DATA_V3: handlers.eth_sign_typed_data_v3,
            RpcMethod.ETH_SIGN_TYPED_DATA_V4: handlers.eth_sign_typed_data_v4,
            RpcMethod.ETH_SIGN_TYPED_DATA: handlers.eth_sign_typed_data_v4,
            RpcMethod.WALLET_ADD_ETHEREUM_CHAIN: handlers.wallet_add_ethereum_chain,
            RpcMethod.WALLET_SWITCH_ETHEREUM_CHAIN: handlers.wallet_switch_ethereum_chain,
            RpcMethod.WALLET_WATCH_ASSET: handlers.wallet_watch_asset,
        }

    def handle_synchronous(self, request: JSONRPCRequest) -> Any:
        """Answer a synchronous-local method.

        Returns:
            The result, or UNHANDLED when the method needs async dispatch
        """
        method = RpcMethod.lookup(request.method)
        handler = self._synchronous.get(method) if method is not None else None
        if handler is None:
            return UNHANDLED
        return handler()

    async def dispatch(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """Serve one request; the response echoes the request id."""
        result = self.handle_synchronous(request)
        if result is not UNHANDLED:
            return JSONRPCResponse.success(result, id=request.id)

        method = RpcMethod.lookup(request.method)
        handler = self._asynchronous.get(method) if method is not None else None
        if handler is not None:
            logger.debug(f"Dispatching {request.method} (id={request.id})")
            response = await handler(request.params)
            return response.with_id(request.id)

        return await self._pass_through(request)

    async def _pass_through(self, request: JSONRPCRequest) -> JSONRPCResponse:
        relay = self._ensure_relay()
        rpc_url = self._session.rpc_url
        logger.debug(f"Forwarding {request.method} to {rpc_url or '(no rpc url)'}")
        payload = await relay.make_ethereum_jsonrpc_request(request.to_dict(), rpc_url)
        try:
            response = JSONRPCResponse.from_dict(payload)
        except ValidationError as e:
            logger.warning(f"Malformed response to {request.method}: {payload!r}")
            raise InternalError(
                f"Malformed JSON-RPC response for {request.method}", data=payload
            ) from e
        return response.with_id(request.id)
