"""Tests for session state and the authorization guard."""

import pytest

from conftest import ADDRESS, OTHER_ADDRESS, RecordingListener
from walletlink.errors import UnauthorizedError, UnknownAddressError
from walletlink.session import AuthorizationGuard, Chain, SessionState
from walletlink.session.state import (
    ADDRESSES_KEY,
    DEFAULT_CHAIN_ID_KEY,
    DEFAULT_JSON_RPC_URL_KEY,
)
from walletlink.storage import MemoryStorage


class TestSessionState:
    """Tests for SessionState."""

    def test_fresh_session_defaults(self, storage, listener):
        session = SessionState(storage, listener, "https://default.test")

        assert session.addresses == ()
        assert session.selected_address is None
        assert session.chain_id == 1
        assert session.rpc_url == "https://default.test"
        assert listener.accounts == []

    def test_set_addresses_notifies_and_persists(self, storage, listener):
        session = SessionState(storage, listener)
        session.set_addresses([ADDRESS.upper().replace("0X", "0x"), OTHER_ADDRESS])

        assert session.addresses == (ADDRESS, OTHER_ADDRESS)
        assert session.selected_address == ADDRESS
        assert listener.accounts == [[ADDRESS, OTHER_ADDRESS]]
        assert storage.get_item(ADDRESSES_KEY) == f"{ADDRESS} {OTHER_ADDRESS}"

    def test_identical_update_is_silent(self, storage, listener):
        session = SessionState(storage, listener)
        session.set_addresses([ADDRESS])
        storage.remove_item(ADDRESSES_KEY)

        session.set_addresses([ADDRESS])

        assert len(listener.accounts) == 1
        assert storage.get_item(ADDRESSES_KEY) is None

    def test_set_addresses_requires_sequence(self, storage):
        session = SessionState(storage)
        with pytest.raises(ValueError, match="addresses is not an array"):
            session.set_addresses(ADDRESS)

    def test_disconnect_clears_accounts(self, storage, listener):
        session = SessionState(storage, listener)
        session.set_addresses([ADDRESS])
        session.set_addresses([], is_disconnect=True)

        assert session.is_connected is False
        assert listener.accounts[-1] == []
        assert storage.get_item(ADDRESSES_KEY) == ""

    def test_restores_cached_addresses(self, listener):
        storage = MemoryStorage({ADDRESSES_KEY: f"{ADDRESS} {OTHER_ADDRESS}"})

        session = SessionState(storage, listener)

        assert session.addresses == (ADDRESS, OTHER_ADDRESS)
        assert listener.accounts == [[ADDRESS, OTHER_ADDRESS]]

    def test_empty_cache_is_not_announced(self, listener):
        SessionState(MemoryStorage({ADDRESSES_KEY: ""}), listener)
        assert listener.accounts == []

    def test_first_provider_update_always_emits(self, storage, listener):
        session = SessionState(storage, listener)
        session.update_provider_info("https://mainnet.test", 1)

        assert listener.chains == [Chain(id=1, rpc_url="https://mainnet.test")]
        assert session.has_emitted_initial_chain_change is True

    def test_same_chain_does_not_emit_again(self, storage, listener):
        session = SessionState(storage, listener)
        session.update_provider_info("https://a.test", 1)
        session.update_provider_info("https://b.test", 1)

        assert len(listener.chains) == 1
        assert session.rpc_url == "https://b.test"

    def test_chain_change_emits_and_persists(self, storage, listener):
        session = SessionState(storage, listener)
        session.update_provider_info("https://a.test", 1)
        session.update_provider_info("https://polygon.test", 137)

        assert listener.chains[-1] == Chain(id=137, rpc_url="https://polygon.test")
        assert storage.get_item(DEFAULT_CHAIN_ID_KEY) == "137"
        assert storage.get_item(DEFAULT_JSON_RPC_URL_KEY) == "https://polygon.test"

    def test_persisted_chain_survives_new_instance(self, storage):
        SessionState(storage).update_provider_info("https://polygon.test", 137)

        restored = SessionState(storage, RecordingListener())

        assert restored.chain_id == 137
        assert restored.rpc_url == "https://polygon.test"


class TestAuthorizationGuard:
    """Tests for AuthorizationGuard."""

    def test_unauthorized_session(self, storage):
        guard = AuthorizationGuard(SessionState(storage))

        assert guard.is_authorized() is False
        with pytest.raises(UnauthorizedError):
            guard.require_authorization()

    def test_known_address_is_case_insensitive(self, storage):
        session = SessionState(storage)
        session.set_addresses([ADDRESS])
        guard = AuthorizationGuard(session)

        assert guard.is_known_address(ADDRESS.upper().replace("0X", "0x"))
        assert not guard.is_known_address(OTHER_ADDRESS)
        assert not guard.is_known_address("not an address")

    def test_ensure_known_address(self, storage):
        session = SessionState(storage)
        session.set_addresses([ADDRESS])

        with pytest.raises(UnknownAddressError):
            AuthorizationGuard(session).ensure_known_address(OTHER_ADDRESS)
