"""Handlers for locally answered methods.

Synchronous handlers return plain values read from session state.
Asynchronous handlers validate and default their parameters, talk to the
relay when needed, and return a JSONRPCResponse (id filled in by the router).
"""

import logging
from typing import Any, Callable, Optional

from walletlink.chains.protocol import ChainMutationProtocol
from walletlink.errors import (
    USER_DENIED_ACCOUNT_AUTHORIZATION,
    USER_DENIED_TRANSACTION_SIGNATURE,
    InternalError,
    remap_rejection,
)
from walletlink.relay.base import RelayTransport
from walletlink.rpc.models import JSONRPCResponse
from walletlink.session.guard import AuthorizationGuard
from walletlink.session.state import SessionState
from walletlink.signing.messages import MessageSigner
from walletlink.transaction import TransactionParamsBuilder
from walletlink.typed_data.signer import TypedDataSigner, TypedDataVersion
from walletlink.utils.encoding import (
    ensure_address_string,
    ensure_bytes,
    hex_string_from_int,
    param_at,
)

logger = logging.getLogger(__name__)


class WalletMethodHandlers:
    """Implementations of every RpcMethod."""

    def __init__(
        self,
        session: SessionState,
        guard: AuthorizationGuard,
        ensure_relay: Callable[[], RelayTransport],
        transactions: TransactionParamsBuilder,
        message_signer: MessageSigner,
        typed_data_signer: TypedDataSigner,
        chains: ChainMutationProtocol,
    ):
        self._session = session
        self._guard = guard
        self._ensure_relay = ensure_relay
        self._transactions = transactions
        self._message_signer = message_signer
        self._typed_data = typed_data_signer
        self._chains = chains

    # ------------------------------------------------------------------
    # Synchronous
    # ------------------------------------------------------------------

    def eth_accounts(self) -> list[str]:
        return list(self._session.addresses)

    def eth_coinbase(self) -> Optional[str]:
        return self._session.selected_address

    def net_version(self) -> str:
        return str(self._session.chain_id)

    def eth_chain_id(self) -> str:
        return hex_string_from_int(self._session.chain_id)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def eth_request_accounts(self, params: Any) -> JSONRPCResponse:
        if self._guard.is_authorized():
            return JSONRPCResponse.success(list(self._session.addresses))

        with remap_rejection(USER_DENIED_ACCOUNT_AUTHORIZATION):
            relay = self._ensure_relay()
            accounts = (await relay.request_ethereum_accounts()).unwrap()

        if not accounts:
            raise InternalError("accounts received is empty")

        self._session.set_addresses(accounts)
        return JSONRPCResponse.success(list(self._session.addresses))

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def eth_sign(self, params: Any) -> JSONRPCResponse:
        self._guard.require_authorization()
        address = ensure_address_string(param_at(params, 0))
        message = ensure_bytes(param_at(params, 1))
        return JSONRPCResponse.success(await self._message_signer.sign(message, address, False))

    async def personal_sign(self, params: Any) -> JSONRPCResponse:
        self._guard.require_authorization()
        message = ensure_bytes(param_at(params, 0))
        address = ensure_address_string(param_at(params, 1))
        return JSONRPCResponse.success(await self._message_signer.sign(message, address, True))

    async def eth_ec_recover(self, params: Any) -> JSONRPCResponse:
        message = ensure_bytes(param_at(params, 0))
        signature = ensure_bytes(param_at(params, 1))
        return JSONRPCResponse.success(
            await self._message_signer.recover_address(message, signature, False)
        )

    async def personal_ec_recover(self, params: Any) -> JSONRPCResponse:
        message = ensure_bytes(param_at(params, 0))
        signature = ensure_bytes(param_at(params, 1))
        return JSONRPCResponse.success(
            await self._message_signer.recover_address(message, signature, True)
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def eth_sign_transaction(self, params: Any) -> JSONRPCResponse:
        tx = self._transactions.build(param_at(params, 0) or {})

        with remap_rejection(USER_DENIED_TRANSACTION_SIGNATURE):
            relay = self._ensure_relay()
            signed = (await relay.sign_ethereum_transaction(tx)).unwrap()
        return JSONRPCResponse.success(signed)

    async def eth_send_raw_transaction(self, params: Any) -> JSONRPCResponse:
        signed_transaction = ensure_bytes(param_at(params, 0))
        relay = self._ensure_relay()
        response = await relay.submit_ethereum_transaction(
            signed_transaction, self._session.chain_id
        )
        return JSONRPCResponse.success(response.unwrap())

    async def eth_send_transaction(self, params: Any) -> JSONRPCResponse:
        tx = self._transactions.build(param_at(params, 0) or {})

        with remap_rejection(USER_DENIED_TRANSACTION_SIGNATURE):
            relay = self._ensure_relay()
            tx_hash = (await relay.sign_and_submit_ethereum_transaction(tx)).unwrap()
        logger.info(f"Transaction submitted from {tx.from_address}: {tx_hash}")
        return JSONRPCResponse.success(tx_hash)

    # ------------------------------------------------------------------
    # Typed data
    # ------------------------------------------------------------------

    async def eth_sign_typed_data_v1(self, params: Any) -> JSONRPCResponse:
        return JSONRPCResponse.success(await self._typed_data.sign(TypedDataVersion.V1, params))

    async def eth_sign_typed_data_v2(self, params: Any) -> JSONRPCResponse:
        return JSONRPCResponse.success(await self._typed_data.sign_v2(params))

    async def eth_sign_typed_data_v3(self, params: Any) -> JSONRPCResponse:
        return JSONRPCResponse.success(await self._typed_data.sign(TypedDataVersion.V3, params))

    async def eth_sign_typed_data_v4(self, params: Any) -> JSONRPCResponse:
        return JSONRPCResponse.success(await self._typed_data.sign(TypedDataVersion.V4, params))

    # ------------------------------------------------------------------
    # Wallet management
    # ------------------------------------------------------------------

    async def wallet_add_ethereum_chain(self, params: Any) -> JSONRPCResponse:
        return await self._chains.add_ethereum_chain(params)

    async def wallet_switch_ethereum_chain(self, params: Any) -> JSONRPCResponse:
        return await self._chains.switch_ethereum_chain(params)

    async def wallet_watch_asset(self, params: Any) -> JSONRPCResponse:
        return await self._chains.watch_asset(params)
