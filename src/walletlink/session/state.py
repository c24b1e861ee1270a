"""Authorized accounts, active chain and JSON-RPC URL of one provider session.

State is persisted to injected storage on every effective change and read
back on construction. Only two entry points mutate it:

- set_addresses(): the account list granted by the wallet
- update_provider_info(): the active chain and its JSON-RPC URL

Both notify a SessionListener. Account changes are compared by value first,
so repeated identical updates produce no notification and no storage write.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from walletlink.storage.base import KeyValueStorage
from walletlink.utils.encoding import ensure_address_string, ensure_int_number

logger = logging.getLogger(__name__)

ADDRESSES_KEY = "Addresses"
DEFAULT_CHAIN_ID_KEY = "DefaultChainId"
DEFAULT_JSON_RPC_URL_KEY = "DefaultJsonRpcUrl"

DEFAULT_CHAIN_ID = 1  # Ethereum mainnet


@dataclass(frozen=True)
class Chain:
    """Payload of a chain-changed notification."""
    id: int
    rpc_url: str


class SessionListener:
    """Receives session change notifications. Override what you need."""

    def on_accounts_changed(self, addresses: list[str]) -> None:
        pass

    def on_chain_changed(self, chain: Chain) -> None:
        pass


class SessionState:
    """Session state owned by one adapter."""

    def __init__(
        self,
        storage: KeyValueStorage,
        listener: Optional[SessionListener] = None,
        default_rpc_url: str = "",
    ):
        """Load persisted state.

        Args:
            storage: Backend holding the persisted keys
            listener: Change listener (no-op if omitted)
            default_rpc_url: JSON-RPC URL used until one is persisted
        """
        self._storage = storage
        self._listener = listener or SessionListener()
        self._default_rpc_url = default_rpc_url
        self._addresses: tuple[str, ...] = ()
        self.has_emitted_initial_chain_change = False

        cached = storage.get_item(ADDRESSES_KEY)
        if cached:
            addresses = cached.split(" ")
            if addresses[0] != "":
                self._addresses = tuple(ensure_address_string(a) for a in addresses)
                logger.info(f"Restored {len(self._addresses)} authorized address(es)")
                self._listener.on_accounts_changed(list(self._addresses))

    @property
    def addresses(self) -> tuple[str, ...]:
        return self._addresses

    @property
    def selected_address(self) -> Optional[str]:
        """Default account, or None when not connected."""
        return self._addresses[0] if self._addresses else None

    @property
    def is_connected(self) -> bool:
        return len(self._addresses) > 0

    @property
    def chain_id(self) -> int:
        raw = self._storage.get_item(DEFAULT_CHAIN_ID_KEY)
        if not raw:
            return DEFAULT_CHAIN_ID
        return ensure_int_number(int(raw, 10))

    @property
    def rpc_url(self) -> str:
        return self._storage.get_item(DEFAULT_JSON_RPC_URL_KEY) or self._default_rpc_url

    def set_addresses(self, addresses: Iterable[str], is_disconnect: bool = False) -> None:
        """Replace the authorized account list.

        Args:
            addresses: New accounts, selected account first
            is_disconnect: True when the wallet ended the session
        """
        if not isinstance(addresses, (list, tuple)):
            raise ValueError("addresses is not an array")

        new_addresses = tuple(ensure_address_string(a) for a in addresses)
        if new_addresses == self._addresses:
            return

        self._addresses = new_addresses
        if is_disconnect:
            logger.info("Wallet disconnected, accounts cleared")
        else:
            logger.info(f"Authorized accounts changed: {len(new_addresses)} address(es)")
        self._listener.on_accounts_changed(list(new_addresses))
        self._storage.set_item(ADDRESSES_KEY, " ".join(new_addresses))

    def update_provider_info(self, rpc_url: str, chain_id: int) -> None:
        """Persist the active chain and emit chain-changed when needed.

        The notification fires when the chain id differs from the persisted
        one, and always on the first call for this instance.
        """
        self._storage.set_item(DEFAULT_JSON_RPC_URL_KEY, rpc_url)

        original_chain_id = self.chain_id
        chain_id = ensure_int_number(chain_id)
        self._storage.set_item(DEFAULT_CHAIN_ID_KEY, str(chain_id))

        chain_changed = chain_id != original_chain_id
        if chain_changed or not self.has_emitted_initial_chain_change:
            logger.info(f"Active chain: {chain_id} ({rpc_url or 'no rpc url'})")
            self._listener.on_chain_changed(Chain(id=chain_id, rpc_url=rpc_url))
            self.has_emitted_initial_chain_change = True

    def __repr__(self) -> str:
        return (
            f"SessionState(addresses={len(self._addresses)}, chain_id={self.chain_id}, "
            f"rpc_url={self.rpc_url!r})"
        )
