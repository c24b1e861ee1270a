"""Local relay backend.

Plays the wallet side in-process using private keys held in memory, and
talks to JSON-RPC nodes over HTTP for nonces, gas and broadcast. Suitable
for:
- Development and integration tests
- Headless automation where no human approves requests

WARNING: Private keys are stored in memory.
"""

import logging
import secrets
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys import keys
from eth_utils import to_checksum_address

from walletlink.errors import EthereumRpcError, RpcErrorCode
from walletlink.relay.base import RelayResponse, RelayTransport, RelayType
from walletlink.transaction import TransactionDescriptor

logger = logging.getLogger(__name__)

# Public RPC endpoints for chains the local wallet knows out of the box
KNOWN_CHAINS = {
    1: "https://eth.llamarpc.com",
    10: "https://mainnet.optimism.io",
    56: "https://bsc-dataseed.binance.org/",
    137: "https://polygon-rpc.com/",
    42161: "https://arb1.arbitrum.io/rpc",
    43114: "https://api.avax.network/ext/bc/C/rpc",
}


class LocalRelay(RelayTransport):
    """Relay that signs with in-memory keys and auto-approves requests."""

    def __init__(
        self,
        private_keys: Optional[list[str]] = None,
        link_api_url: str = "https://www.walletlink.org",
        auto_approve_chains: bool = True,
        http_timeout: float = 30.0,
        known_chains: Optional[dict[int, str]] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the local relay.

        Args:
            private_keys: Hex private keys; the first one is the default account
            link_api_url: Bridge URL embedded in pairing URLs
            auto_approve_chains: Approve wallet_addEthereumChain proposals
            http_timeout: Timeout for node requests in seconds
            known_chains: chain id -> JSON-RPC URL (defaults to KNOWN_CHAINS)
            http_transport: Custom httpx transport (tests)
        """
        super().__init__(RelayType.LOCAL)
        self.link_api_url = link_api_url
        self.auto_approve_chains = auto_approve_chains
        self.http_timeout = http_timeout
        self.known_chains = dict(KNOWN_CHAINS if known_chains is None else known_chains)
        self.watched_assets: list[dict] = []
        self._http_transport = http_transport
        self._keys: dict[str, bytes] = {}
        self._authorized: list[str] = []
        self._session_id = secrets.token_hex(16)
        self._secret = secrets.token_hex(32)

        for key in private_keys or []:
            key_bytes = bytes.fromhex(key[2:] if key.startswith("0x") else key)
            address = Account.from_key(key_bytes).address.lower()
            self._keys[address] = key_bytes
        if self._keys:
            logger.info(f"Local relay loaded {len(self._keys)} signing key(s)")

    @property
    def accounts(self) -> list[str]:
        return list(self._keys)

    def get_qr_code_url(self) -> str:
        query = urlencode({
            "session-id": self._session_id,
            "secret": self._secret,
            "server": self.link_api_url,
            "v": "1",
        })
        return f"{self.link_api_url}/#/link?{query}"

    def reset_and_reload(self) -> None:
        self._authorized = []
        self._session_id = secrets.token_hex(16)
        self._secret = secrets.token_hex(32)
        logger.info("Local relay session reset")
        self.emit_accounts([], True)

    def _key_for(self, address: str) -> bytes:
        key = self._keys.get(address.lower())
        if key is None:
            raise KeyError(f"No signing key for {address}")
        return key

    def _rpc_url_for(self, chain_id: int) -> str:
        url = self.known_chains.get(chain_id)
        if not url:
            raise ValueError(f"No JSON-RPC URL known for chain {chain_id}")
        return url

    async def _post(self, url: str, payload: dict) -> dict:
        async with httpx.AsyncClient(
            timeout=self.http_timeout, transport=self._http_transport
        ) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            return response.json()

    async def _rpc_call(self, chain_id: int, method: str, params: list) -> Any:
        data = await self._post(
            self._rpc_url_for(chain_id),
            {"jsonrpc": "2.0", "method": method, "params": params, "id": 1},
        )
        if data.get("error"):
            error = data["error"]
            raise EthereumRpcError(
                error.get("code", RpcErrorCode.INTERNAL), error.get("message"), error.get("data")
            )
        return data.get("result")

    async def request_ethereum_accounts(self) -> RelayResponse:
        if not self._keys:
            return RelayResponse.error("requestEthereumAccounts", "User denied account authorization")
        self._authorized = list(self._keys)
        return RelayResponse.ok("requestEthereumAccounts", list(self._authorized))

    async def sign_ethereum_message(
        self,
        message: bytes,
        address: str,
        add_prefix: bool,
        typed_data_json: Optional[str] = None,
    ) -> RelayResponse:
        method = "signEthereumMessage"
        try:
            private_key = self._key_for(address)
            if add_prefix:
                signed = Account.sign_message(encode_defunct(primitive=message), private_key)
                signature = bytes(signed.signature)
            else:
                if len(message) != 32:
                    return RelayResponse.error(method, "Expected a 32-byte digest")
                raw = keys.PrivateKey(private_key).sign_msg_hash(message).to_bytes()
                signature = raw[:64] + bytes([raw[64] + 27])
            if typed_data_json:
                logger.debug(f"Signed typed data for {address}")
            return RelayResponse.ok(method, "0x" + signature.hex())
        except Exception as e:
            logger.error(f"Local message signing failed: {e}")
            return RelayResponse.error(method, str(e))

    async def ethereum_address_from_signed_message(
        self, message: bytes, signature: bytes, add_prefix: bool
    ) -> RelayResponse:
        method = "ethereumAddressFromSignedMessage"
        try:
            if len(signature) != 65:
                return RelayResponse.error(method, "Signature must be 65 bytes")
            v = signature[64] - 27 if signature[64] >= 27 else signature[64]
            normalized = signature[:64] + bytes([v])
            if add_prefix:
                address = Account.recover_message(
                    encode_defunct(primitive=message), signature=signature[:64] + bytes([v + 27])
                )
            else:
                public_key = keys.Signature(signature_bytes=normalized).recover_public_key_from_msg_hash(
                    message
                )
                address = public_key.to_checksum_address()
            return RelayResponse.ok(method, address.lower())
        except Exception as e:
            logger.error(f"Signature recovery failed: {e}")
            return RelayResponse.error(method, str(e))

    async def _build_transaction_fields(self, tx: TransactionDescriptor) -> dict:
        fields: dict[str, Any] = {
            "value": tx.wei_value,
            "data": tx.data,
            "chainId": tx.chain_id,
        }
        if tx.to_address:
            fields["to"] = to_checksum_address(tx.to_address)

        if tx.nonce is not None:
            fields["nonce"] = tx.nonce
        else:
            count = await self._rpc_call(
                tx.chain_id, "eth_getTransactionCount", [tx.from_address, "pending"]
            )
            fields["nonce"] = int(count, 16)

        if tx.is_eip1559:
            if tx.max_fee_per_gas is not None:
                max_fee = tx.max_fee_per_gas
            else:
                max_fee = int(await self._rpc_call(tx.chain_id, "eth_gasPrice", []), 16) * 2
            priority = tx.max_priority_fee_per_gas
            if priority is None:
                priority = min(10**9, max_fee)
            fields["maxFeePerGas"] = max_fee
            fields["maxPriorityFeePerGas"] = priority
        elif tx.gas_price_wei is not None:
            fields["gasPrice"] = tx.gas_price_wei
        else:
            fields["gasPrice"] = int(await self._rpc_call(tx.chain_id, "eth_gasPrice", []), 16)

        if tx.gas_limit is not None:
            fields["gas"] = tx.gas_limit
        else:
            estimate_params = {
                "from": tx.from_address,
                "value": hex(tx.wei_value),
                "data": "0x" + tx.data.hex(),
            }
            if tx.to_address:
                estimate_params["to"] = tx.to_address
            fields["gas"] = int(
                await self._rpc_call(tx.chain_id, "eth_estimateGas", [estimate_params]), 16
            )
        return fields

    async def _sign_transaction(self, tx: TransactionDescriptor) -> bytes:
        private_key = self._key_for(tx.from_address)
        fields = await self._build_transaction_fields(tx)
        signed = Account.sign_transaction(fields, private_key)
        return bytes(signed.raw_transaction)

    async def sign_ethereum_transaction(self, tx: TransactionDescriptor) -> RelayResponse:
        method = "signEthereumTransaction"
        try:
            raw = await self._sign_transaction(tx)
            return RelayResponse.ok(method, "0x" + raw.hex())
        except Exception as e:
            logger.error(f"Local transaction signing failed: {e}")
            return RelayResponse.error(method, str(e))

    async def submit_ethereum_transaction(
        self, signed_transaction: bytes, chain_id: int
    ) -> RelayResponse:
        method = "submitEthereumTransaction"
        try:
            tx_hash = await self._rpc_call(
                chain_id, "eth_sendRawTransaction", ["0x" + signed_transaction.hex()]
            )
            logger.info(f"Broadcast transaction {tx_hash} on chain {chain_id}")
            return RelayResponse.ok(method, tx_hash)
        except Exception as e:
            logger.error(f"Broadcast failed on chain {chain_id}: {e}")
            return RelayResponse.error(method, str(e))

    async def sign_and_submit_ethereum_transaction(
        self, tx: TransactionDescriptor
    ) -> RelayResponse:
        method = "signAndSubmitEthereumTransaction"
        try:
            raw = await self._sign_transaction(tx)
        except Exception as e:
            logger.error(f"Local transaction signing failed: {e}")
            return RelayResponse.error(method, str(e))
        submitted = await self.submit_ethereum_transaction(raw, tx.chain_id)
        submitted.method = method
        return submitted

    async def add_ethereum_chain(
        self,
        chain_id: str,
        rpc_urls: list[str],
        icon_urls: list[str],
        block_explorer_urls: list[str],
        chain_name: str,
        native_currency: dict,
    ) -> RelayResponse:
        method = "addEthereumChain"
        if not self.auto_approve_chains or not rpc_urls:
            return RelayResponse.ok(method, {"isApproved": False, "rpcUrl": ""})
        self.known_chains[int(chain_id)] = rpc_urls[0]
        logger.info(f"Local relay added chain {chain_id} ({chain_name})")
        return RelayResponse.ok(method, {"isApproved": True, "rpcUrl": rpc_urls[0]})

    async def switch_ethereum_chain(
        self, chain_id: str, address: Optional[str] = None
    ) -> RelayResponse:
        method = "switchEthereumChain"
        rpc_url = self.known_chains.get(int(chain_id))
        if not rpc_url:
            return RelayResponse.error(
                method, "Unrecognized chain ID.", RpcErrorCode.UNSUPPORTED_CHAIN
            )
        return RelayResponse.ok(method, {"isApproved": True, "rpcUrl": rpc_url})

    async def watch_asset(
        self,
        asset_type: str,
        address: str,
        symbol: Optional[str] = None,
        decimals: Optional[int] = None,
        image: Optional[str] = None,
        chain_id: Optional[str] = None,
    ) -> RelayResponse:
        self.watched_assets.append({
            "type": asset_type,
            "address": address,
            "symbol": symbol,
            "decimals": decimals,
            "image": image,
            "chainId": chain_id,
        })
        return RelayResponse.ok("watchAsset", True)

    async def make_ethereum_jsonrpc_request(self, request: dict, json_rpc_url: str) -> dict:
        if not json_rpc_url:
            raise ValueError("No JSON-RPC URL provided")
        data = await self._post(json_rpc_url, request)
        if not data:
            raise EthereumRpcError(RpcErrorCode.PARSE)
        if data.get("error"):
            error = data["error"]
            raise EthereumRpcError(
                error.get("code", RpcErrorCode.INTERNAL), error.get("message"), error.get("data")
            )
        return data
