"""Dry-run relay for testing and demos.

Simulates a cooperative (or uncooperative) wallet without keys or network.
Signatures and transaction hashes are deterministic placeholders derived
from the request, so they are stable across runs but NOT valid on chain.
"""

import logging
from typing import Optional

from eth_utils import keccak

from walletlink.relay.base import RelayResponse, RelayTransport, RelayType
from walletlink.transaction import TransactionDescriptor

logger = logging.getLogger(__name__)

DEFAULT_SIMULATED_ACCOUNT = "0x" + keccak(text="walletlink-dry-run")[-20:].hex()


class DryRunRelay(RelayTransport):
    """Simulated wallet.

    Example:
        relay = DryRunRelay(accounts=["0xabc..."], chains={1: "https://..."})
        response = await relay.request_ethereum_accounts()
        # RelayResponse(result=["0xabc..."])
    """

    def __init__(
        self,
        accounts: Optional[list[str]] = None,
        chains: Optional[dict[int, str]] = None,
        reject_all: bool = False,
        link_api_url: str = "https://www.walletlink.org",
    ):
        """Initialize dry-run relay.

        Args:
            accounts: Accounts the simulated user grants
            chains: chain id -> JSON-RPC URL the simulated wallet supports
            reject_all: Simulate a user who denies every prompt
            link_api_url: Bridge URL used in the pairing URL
        """
        super().__init__(RelayType.DRY_RUN)
        self.accounts = [a.lower() for a in (accounts or [DEFAULT_SIMULATED_ACCOUNT])]
        self.chains = dict(chains or {1: ""})
        self.reject_all = reject_all
        self.link_api_url = link_api_url
        self.calls: list[str] = []

    def _record(self, method: str) -> Optional[RelayResponse]:
        self.calls.append(method)
        logger.debug(f"[DRY RUN] {method}")
        if self.reject_all:
            return RelayResponse.error(method, "User rejected the request (dry run)")
        return None

    def get_qr_code_url(self) -> str:
        return f"{self.link_api_url}/#/link?session-id=dry-run&v=1"

    def reset_and_reload(self) -> None:
        self.calls.append("resetAndReload")
        self.emit_accounts([], True)

    async def request_ethereum_accounts(self) -> RelayResponse:
        return self._record("requestEthereumAccounts") or RelayResponse.ok(
            "requestEthereumAccounts", list(self.accounts)
        )

    async def sign_ethereum_message(
        self,
        message: bytes,
        address: str,
        add_prefix: bool,
        typed_data_json: Optional[str] = None,
    ) -> RelayResponse:
        rejected = self._record("signEthereumMessage")
        if rejected:
            return rejected
        digest = keccak(message + bytes.fromhex(address[2:]))
        return RelayResponse.ok("signEthereumMessage", "0x" + (digest + digest + b"\x1b").hex())

    async def ethereum_address_from_signed_message(
        self, message: bytes, signature: bytes, add_prefix: bool
    ) -> RelayResponse:
        rejected = self._record("ethereumAddressFromSignedMessage")
        if rejected:
            return rejected
        for account in self.accounts:
            digest = keccak(message + bytes.fromhex(account[2:]))
            if signature == digest + digest + b"\x1b":
                return RelayResponse.ok("ethereumAddressFromSignedMessage", account)
        return RelayResponse.error("ethereumAddressFromSignedMessage", "Unknown signature")

    async def sign_ethereum_transaction(self, tx: TransactionDescriptor) -> RelayResponse:
        rejected = self._record("signEthereumTransaction")
        if rejected:
            return rejected
        return RelayResponse.ok("signEthereumTransaction", "0x" + keccak(text=repr(tx)).hex())

    async def submit_ethereum_transaction(
        self, signed_transaction: bytes, chain_id: int
    ) -> RelayResponse:
        rejected = self._record("submitEthereumTransaction")
        if rejected:
            return rejected
        return RelayResponse.ok("submitEthereumTransaction", "0x" + keccak(signed_transaction).hex())

    async def sign_and_submit_ethereum_transaction(
        self, tx: TransactionDescriptor
    ) -> RelayResponse:
        rejected = self._record("signAndSubmitEthereumTransaction")
        if rejected:
            return rejected
        tx_hash = keccak(keccak(text=repr(tx)))
        return RelayResponse.ok("signAndSubmitEthereumTransaction", "0x" + tx_hash.hex())

    async def add_ethereum_chain(
        self,
        chain_id: str,
        rpc_urls: list[str],
        icon_urls: list[str],
        block_explorer_urls: list[str],
        chain_name: str,
        native_currency: dict,
    ) -> RelayResponse:
        rejected = self._record("addEthereumChain")
        if rejected:
            return rejected
        self.chains[int(chain_id)] = rpc_urls[0] if rpc_urls else ""
        return RelayResponse.ok(
            "addEthereumChain", {"isApproved": True, "rpcUrl": self.chains[int(chain_id)]}
        )

    async def switch_ethereum_chain(
        self, chain_id: str, address: Optional[str] = None
    ) -> RelayResponse:
        rejected = self._record("switchEthereumChain")
        if rejected:
            return rejected
        if int(chain_id) not in self.chains:
            return RelayResponse.error("switchEthereumChain", "Unrecognized chain ID.", 4902)
        return RelayResponse.ok(
            "switchEthereumChain", {"isApproved": True, "rpcUrl": self.chains[int(chain_id)]}
        )

    async def watch_asset(
        self,
        asset_type: str,
        address: str,
        symbol: Optional[str] = None,
        decimals: Optional[int] = None,
        image: Optional[str] = None,
        chain_id: Optional[str] = None,
    ) -> RelayResponse:
        return self._record("watchAsset") or RelayResponse.ok("watchAsset", True)

    async def make_ethereum_jsonrpc_request(self, request: dict, json_rpc_url: str) -> dict:
        self.calls.append("makeEthereumJSONRPCRequest")
        return {"jsonrpc": "2.0", "id": request.get("id"), "result": None}
