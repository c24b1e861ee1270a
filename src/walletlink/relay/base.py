"""Base interface for the relay transport.

The relay links this provider to a wallet and performs everything that
needs the user's keys or consent:

1. Account authorization
2. Message and transaction signing
3. Chain proposals and switches
4. Transaction broadcast and generic JSON-RPC passthrough

Each operation returns a RelayResponse envelope (result or error) instead of
raising, except make_ethereum_jsonrpc_request which answers with a complete
JSON-RPC response.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from walletlink.errors import RelayError
from walletlink.transaction import TransactionDescriptor

logger = logging.getLogger(__name__)

AccountsCallback = Callable[[list[str], bool], None]
ChainCallback = Callable[[str, str], None]


class RelayType(str, Enum):
    """Type of relay backend."""
    LOCAL = "local"       # In-memory keys, HTTP passthrough
    DRY_RUN = "dry_run"   # Simulated wallet, no keys, no network


@dataclass
class RelayResponse:
    """Result-or-error envelope of a relay operation.

    Attributes:
        method: Relay operation that produced this response
        result: Operation result when successful
        error_message: Error message when the wallet reported a failure
        error_code: Optional numeric error code (older wallets omit it)
    """
    method: str
    result: Any = None
    error_message: Optional[str] = None
    error_code: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.error_message is not None or self.error_code is not None

    def unwrap(self) -> Any:
        """Return the result, or raise RelayError for an error envelope."""
        if self.is_error:
            logger.warning(f"Relay {self.method} failed: {self.error_message} ({self.error_code})")
            raise RelayError(self.error_message or "", self.error_code, self.method)
        return self.result

    @classmethod
    def ok(cls, method: str, result: Any) -> "RelayResponse":
        return cls(method=method, result=result)

    @classmethod
    def error(
        cls, method: str, message: str, code: Optional[int] = None
    ) -> "RelayResponse":
        return cls(method=method, error_message=message, error_code=code)


class RelayTransport(ABC):
    """Abstract relay between the provider and a wallet.

    Implementations must never raise for wallet-side failures; they report
    them through RelayResponse.error so the adapter can classify them.
    """

    def __init__(self, relay_type: RelayType):
        self.relay_type = relay_type
        self.app_name: str = ""
        self.app_logo_url: Optional[str] = None
        self._accounts_callback: Optional[AccountsCallback] = None
        self._chain_callback: Optional[ChainCallback] = None

    def set_app_info(self, app_name: str, app_logo_url: Optional[str]) -> None:
        self.app_name = app_name
        self.app_logo_url = app_logo_url

    def set_accounts_callback(self, callback: AccountsCallback) -> None:
        """Register the listener for wallet-pushed account changes."""
        self._accounts_callback = callback

    def set_chain_callback(self, callback: ChainCallback) -> None:
        """Register the listener for wallet-pushed chain changes."""
        self._chain_callback = callback

    def emit_accounts(self, accounts: list[str], is_disconnect: bool = False) -> None:
        if self._accounts_callback is not None:
            self._accounts_callback(accounts, is_disconnect)

    def emit_chain(self, chain_id: int, rpc_url: str) -> None:
        if self._chain_callback is not None:
            self._chain_callback(str(chain_id), rpc_url)

    @abstractmethod
    def get_qr_code_url(self) -> str:
        """URL the wallet scans to pair with this session."""
        pass

    @abstractmethod
    def reset_and_reload(self) -> None:
        """Drop the pairing and all wallet-side session data."""
        pass

    @abstractmethod
    async def request_ethereum_accounts(self) -> RelayResponse:
        """Ask the user to authorize accounts. Result: list of addresses."""
        pass

    @abstractmethod
    async def sign_ethereum_message(
        self,
        message: bytes,
        address: str,
        add_prefix: bool,
        typed_data_json: Optional[str] = None,
    ) -> RelayResponse:
        """Sign a message or digest. Result: 0x signature.

        Args:
            message: Raw message, or a 32-byte digest when add_prefix is False
            address: Signing account
            add_prefix: Apply the personal-message prefix before hashing
            typed_data_json: Pretty-printed typed data shown to the user
        """
        pass

    @abstractmethod
    async def ethereum_address_from_signed_message(
        self, message: bytes, signature: bytes, add_prefix: bool
    ) -> RelayResponse:
        """Recover the signer. Result: address."""
        pass

    @abstractmethod
    async def sign_ethereum_transaction(self, tx: TransactionDescriptor) -> RelayResponse:
        """Sign without broadcasting. Result: 0x raw transaction."""
        pass

    @abstractmethod
    async def submit_ethereum_transaction(
        self, signed_transaction: bytes, chain_id: int
    ) -> RelayResponse:
        """Broadcast a signed transaction. Result: transaction hash."""
        pass

    @abstractmethod
    async def sign_and_submit_ethereum_transaction(
        self, tx: TransactionDescriptor
    ) -> RelayResponse:
        """Sign and broadcast. Result: transaction hash."""
        pass

    @abstractmethod
    async def add_ethereum_chain(
        self,
        chain_id: str,
        rpc_urls: list[str],
        icon_urls: list[str],
        block_explorer_urls: list[str],
        chain_name: str,
        native_currency: dict,
    ) -> RelayResponse:
        """Propose a chain. Result: ``{"isApproved": bool, "rpcUrl": str}``."""
        pass

    @abstractmethod
    async def switch_ethereum_chain(
        self, chain_id: str, address: Optional[str] = None
    ) -> RelayResponse:
        """Switch the wallet's chain. Result: ``{"isApproved": bool, "rpcUrl": str}``."""
        pass

    @abstractmethod
    async def watch_asset(
        self,
        asset_type: str,
        address: str,
        symbol: Optional[str] = None,
        decimals: Optional[int] = None,
        image: Optional[str] = None,
        chain_id: Optional[str] = None,
    ) -> RelayResponse:
        """Ask the wallet to track a token. Result: bool."""
        pass

    @abstractmethod
    async def make_ethereum_jsonrpc_request(self, request: dict, json_rpc_url: str) -> dict:
        """Forward a read-only JSON-RPC request to a node.

        Returns:
            The node's JSON-RPC response

        Raises:
            Exception: If the node cannot be reached or answers with an error
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.relay_type.value})"
