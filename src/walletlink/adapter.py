"""Relay adapter: the provider object handed to the calling application.

Owns the session state, the lazily created relay and the request pipeline:

    RequestNormalizer -> MethodRouter -> handlers -> relay

Every public entry point converts escaping failures with serialize_error,
so callers only ever see EthereumRpcError with ``{code, message, data}``.

Usage:
    adapter = RelayAdapter(app_name="My DApp", storage=JsonFileStorage("session.json"))
    accounts = await adapter.request({"method": "eth_requestAccounts"})
    chain_id = adapter.send({"jsonrpc": "2.0", "id": 1, "method": "eth_chainId"})
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from walletlink.chains.protocol import ChainMutationProtocol
from walletlink.config import Settings, get_settings
from walletlink.errors import InvalidRequestError, serialize_error
from walletlink.relay.base import RelayTransport
from walletlink.relay.factory import create_relay
from walletlink.rpc.handlers import WalletMethodHandlers
from walletlink.rpc.normalizer import (
    MISSING,
    BatchCall,
    CallbackCall,
    MethodCall,
    RequestNormalizer,
)
from walletlink.rpc.router import MethodRouter
from walletlink.session.guard import AuthorizationGuard
from walletlink.session.state import SessionListener, SessionState
from walletlink.signing.messages import MessageSigner
from walletlink.storage.base import KeyValueStorage
from walletlink.storage.memory import MemoryStorage
from walletlink.storage.scoped import ScopedStorage
from walletlink.transaction import TransactionParamsBuilder
from walletlink.typed_data.signer import TypedDataHasher, TypedDataSigner, TypedDataVersion

logger = logging.getLogger(__name__)


class RelayAdapter:
    """Injected-provider core backed by a wallet relay."""

    def __init__(
        self,
        app_name: Optional[str] = None,
        app_logo_url: Optional[str] = None,
        storage: Optional[KeyValueStorage] = None,
        listener: Optional[SessionListener] = None,
        json_rpc_url: Optional[str] = None,
        relay_factory: Optional[Callable[[], RelayTransport]] = None,
        typed_data_hashers: Optional[dict[TypedDataVersion, TypedDataHasher]] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the adapter.

        Args:
            app_name: Name shown in the wallet (defaults to settings)
            app_logo_url: Logo shown in the wallet (defaults to settings)
            storage: Persistence for session state (scoped in-memory store if omitted)
            listener: Receives accounts/chain change notifications
            json_rpc_url: Node URL used until the wallet reports one
            relay_factory: Builds the relay on first use (settings-driven if omitted)
            typed_data_hashers: Override EIP-712 hashing procedures
            settings: Settings instance (cached environment settings if omitted)
        """
        self.settings = settings or get_settings()
        self.app_name = app_name or self.settings.app_name
        self.app_logo_url = app_logo_url if app_logo_url is not None else self.settings.app_logo_url

        if storage is None:
            storage = ScopedStorage(self.settings.storage_scope, MemoryStorage())
        self.storage = storage

        self._relay_factory = relay_factory or (lambda: create_relay(self.settings))
        self._relay: Optional[RelayTransport] = None
        self._pending: set[asyncio.Task] = set()

        default_rpc_url = (
            json_rpc_url if json_rpc_url is not None else self.settings.default_json_rpc_url
        )
        self.session = SessionState(storage, listener, default_rpc_url)
        self.guard = AuthorizationGuard(self.session)
        self.transactions = TransactionParamsBuilder(self.session, self.guard)
        self.message_signer = MessageSigner(self.guard, self.ensure_relay)
        self.typed_data = TypedDataSigner(self.guard, self.message_signer, typed_data_hashers)
        self.chains = ChainMutationProtocol(self.session, self.guard, self.ensure_relay)

        handlers = WalletMethodHandlers(
            session=self.session,
            guard=self.guard,
            ensure_relay=self.ensure_relay,
            transactions=self.transactions,
            message_signer=self.message_signer,
            typed_data_signer=self.typed_data,
            chains=self.chains,
        )
        self.router = MethodRouter(handlers, self.session, self.ensure_relay)
        self.normalizer = RequestNormalizer(self.router)

    # ------------------------------------------------------------------
    # Relay lifecycle
    # ------------------------------------------------------------------

    def ensure_relay(self) -> RelayTransport:
        """Create the relay on first use and wire its push callbacks.

        Construction is synchronous, so concurrent first use on one event
        loop always sees a single instance.
        """
        if self._relay is None:
            relay = self._relay_factory()
            relay.set_app_info(self.app_name, self.app_logo_url)
            relay.set_accounts_callback(self._on_relay_accounts)
            relay.set_chain_callback(self._on_relay_chain)
            self._relay = relay
            logger.info(f"Relay ready: {relay!r}")
        return self._relay

    def _on_relay_accounts(self, accounts: list[str], is_disconnect: bool = False) -> None:
        self.session.set_addresses(accounts, is_disconnect)

    def _on_relay_chain(self, chain_id: str, rpc_url: str) -> None:
        self.session.update_provider_info(rpc_url, int(chain_id, 10))

    def get_qr_code_url(self) -> str:
        return self.ensure_relay().get_qr_code_url()

    async def close(self) -> None:
        """Reset the relay session (the wallet forgets this pairing)."""
        self.ensure_relay().reset_and_reload()

    @property
    def selected_address(self) -> Optional[str]:
        """Deprecated: use ``request({"method": "eth_accounts"})``."""
        return self.session.selected_address

    @property
    def is_connected(self) -> bool:
        return self.guard.is_authorized()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def request(self, args: Any = MISSING) -> Any:
        """EIP-1193 request: ``await adapter.request({"method": ..., "params": [...]})``."""
        try:
            return await self.normalizer.request(args)
        except Exception as e:
            method = args.get("method") if isinstance(args, Mapping) else None
            raise serialize_error(e, method) from e

    def send(self, request_or_method: Any, callback_or_params: Any = MISSING) -> Any:
        """Legacy send, dispatched on the shape of its arguments.

        - ``send(request)`` -> response dict (synchronous methods only)
        - ``send([requests])`` -> list of response dicts (synchronous methods only)
        - ``send(request_or_batch, callback)`` -> asyncio.Task; callback gets (error, response)
        - ``send("method", params)`` -> awaitable result
        """
        try:
            call = self.normalizer.resolve_send(request_or_method, callback_or_params)
            if isinstance(call, MethodCall):
                return self._serialized(self.normalizer.send_method_call(call), request_or_method)
            if isinstance(call, CallbackCall):
                return self._schedule(call)
            if isinstance(call, BatchCall):
                return self.normalizer.send_batch(call)
            return self.normalizer.send_single(call)
        except Exception as e:
            raise serialize_error(e, request_or_method) from e

    async def send_async(self, request: Any, callback: Any) -> None:
        """Legacy sendAsync: serve a request or batch, report through the callback."""
        try:
            if not callable(callback):
                raise ValueError("callback is required")
            call = self.normalizer.resolve_send(request, callback)
            if not isinstance(call, CallbackCall):
                raise InvalidRequestError("sendAsync expects a request object or a batch")
            await self.normalizer.send_with_callback(call)
        except Exception as e:
            raise serialize_error(e, request) from e

    async def _serialized(self, awaitable, request_or_method: Any) -> Any:
        try:
            return await awaitable
        except Exception as e:
            raise serialize_error(e, request_or_method) from e

    def _schedule(self, call: CallbackCall) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.normalizer.send_with_callback(call))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def __repr__(self) -> str:
        return f"RelayAdapter(app_name={self.app_name!r}, session={self.session!r})"
