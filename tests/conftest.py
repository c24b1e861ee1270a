"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock, Mock

import pytest

# Keep developer environment out of the tests
for _name in list(os.environ):
    if _name.startswith("WALLETLINK_"):
        del os.environ[_name]

from walletlink.adapter import RelayAdapter
from walletlink.config import Settings
from walletlink.relay.base import RelayResponse, RelayTransport, RelayType
from walletlink.session.state import SessionListener
from walletlink.storage.memory import MemoryStorage

ADDRESS = "0x" + "ab" * 20
OTHER_ADDRESS = "0x" + "cd" * 20
RPC_URL = "https://rpc.test"


class RecordingListener(SessionListener):
    """Collects every session notification."""

    def __init__(self):
        self.accounts: list[list[str]] = []
        self.chains: list = []

    def on_accounts_changed(self, addresses):
        self.accounts.append(addresses)

    def on_chain_changed(self, chain):
        self.chains.append(chain)


class FakeRelay(RelayTransport):
    """Relay double whose operations are mocks with cooperative defaults."""

    def __init__(self, accounts=None):
        super().__init__(RelayType.DRY_RUN)
        accounts = accounts if accounts is not None else [ADDRESS]
        self.get_qr_code_url = Mock(return_value="https://bridge.test/#/link?v=1")
        self.reset_and_reload = Mock()
        self.request_ethereum_accounts = AsyncMock(
            return_value=RelayResponse.ok("requestEthereumAccounts", accounts)
        )
        self.sign_ethereum_message = AsyncMock(
            return_value=RelayResponse.ok("signEthereumMessage", "0xsignature")
        )
        self.ethereum_address_from_signed_message = AsyncMock(
            return_value=RelayResponse.ok("ethereumAddressFromSignedMessage", ADDRESS)
        )
        self.sign_ethereum_transaction = AsyncMock(
            return_value=RelayResponse.ok("signEthereumTransaction", "0xsignedtx")
        )
        self.submit_ethereum_transaction = AsyncMock(
            return_value=RelayResponse.ok("submitEthereumTransaction", "0xtxhash")
        )
        self.sign_and_submit_ethereum_transaction = AsyncMock(
            return_value=RelayResponse.ok("signAndSubmitEthereumTransaction", "0xtxhash")
        )
        self.add_ethereum_chain = AsyncMock(
            return_value=RelayResponse.ok(
                "addEthereumChain", {"isApproved": True, "rpcUrl": "https://polygon.test"}
            )
        )
        self.switch_ethereum_chain = AsyncMock(
            return_value=RelayResponse.ok(
                "switchEthereumChain", {"isApproved": True, "rpcUrl": "https://polygon.test"}
            )
        )
        self.watch_asset = AsyncMock(return_value=RelayResponse.ok("watchAsset", True))
        self.make_ethereum_jsonrpc_request = AsyncMock(
            return_value={"jsonrpc": "2.0", "id": 99, "result": "0x10"}
        )

    def get_qr_code_url(self):
        raise NotImplementedError

    def reset_and_reload(self):
        raise NotImplementedError

    async def request_ethereum_accounts(self):
        raise NotImplementedError

    async def sign_ethereum_message(self, message, address, add_prefix, typed_data_json=None):
        raise NotImplementedError

    async def ethereum_address_from_signed_message(self, message, signature, add_prefix):
        raise NotImplementedError

    async def sign_ethereum_transaction(self, tx):
        raise NotImplementedError

    async def submit_ethereum_transaction(self, signed_transaction, chain_id):
        raise NotImplementedError

    async def sign_and_submit_ethereum_transaction(self, tx):
        raise NotImplementedError

    async def add_ethereum_chain(
        self, chain_id, rpc_urls, icon_urls, block_explorer_urls, chain_name, native_currency
    ):
        raise NotImplementedError

    async def switch_ethereum_chain(self, chain_id, address=None):
        raise NotImplementedError

    async def watch_asset(
        self, asset_type, address, symbol=None, decimals=None, image=None, chain_id=None
    ):
        raise NotImplementedError

    async def make_ethereum_jsonrpc_request(self, request, json_rpc_url):
        raise NotImplementedError


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from .env files."""
    return Settings(_env_file=None)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def relay_factory(relay) -> Mock:
    return Mock(return_value=relay)


@pytest.fixture
def adapter(storage, listener, relay_factory, settings) -> RelayAdapter:
    """Adapter with no authorized accounts."""
    return RelayAdapter(
        app_name="Test DApp",
        storage=storage,
        listener=listener,
        json_rpc_url=RPC_URL,
        relay_factory=relay_factory,
        settings=settings,
    )


@pytest.fixture
def connected_adapter(adapter) -> RelayAdapter:
    """Adapter with ADDRESS authorized."""
    adapter.session.set_addresses([ADDRESS])
    return adapter
