"""Tests for chain addition, chain switching and asset watching."""

import pytest

from conftest import ADDRESS, RPC_URL
from walletlink.chains.models import ChainApproval
from walletlink.errors import (
    EthereumRpcError,
    InvalidParamsError,
    ProviderError,
    UnsupportedChainError,
)
from walletlink.relay.base import RelayResponse
from walletlink.session.state import Chain

POLYGON = {
    "chainId": "0x89",
    "chainName": "Polygon",
    "rpcUrls": ["https://polygon.test"],
    "nativeCurrency": {"name": "MATIC", "symbol": "MATIC", "decimals": 18},
    "blockExplorerUrls": ["https://polygonscan.com"],
}


class TestChainApproval:
    def test_only_literal_true_approves(self):
        assert ChainApproval.model_validate({"isApproved": True}).approved is True
        assert ChainApproval.model_validate({"isApproved": "true"}).approved is False
        assert ChainApproval.model_validate({"isApproved": 1}).approved is False
        assert ChainApproval().approved is False

    def test_rpc_url_must_be_non_empty_string(self):
        assert ChainApproval.model_validate({"rpcUrl": "https://x"}).has_rpc_url
        assert not ChainApproval.model_validate({"rpcUrl": ""}).has_rpc_url
        assert not ChainApproval.model_validate({"rpcUrl": 5}).has_rpc_url


class TestAddEthereumChain:
    """Tests for wallet_addEthereumChain."""

    @pytest.mark.asyncio
    async def test_approved_chain_becomes_active(self, connected_adapter, relay, listener):
        response = await connected_adapter.chains.add_ethereum_chain([POLYGON])

        assert response.is_error is False
        assert response.result is None
        assert connected_adapter.session.chain_id == 137
        assert connected_adapter.session.rpc_url == "https://polygon.test"
        assert listener.chains == [Chain(id=137, rpc_url="https://polygon.test")]
        chain_id, rpc_urls = relay.add_ethereum_chain.await_args.args[:2]
        assert chain_id == "137"
        assert rpc_urls == ["https://polygon.test"]

    @pytest.mark.asyncio
    async def test_empty_rpc_urls_is_error_envelope(self, connected_adapter, relay):
        response = await connected_adapter.chains.add_ethereum_chain([{**POLYGON, "rpcUrls": []}])

        assert response.error.code == 2
        assert response.error.message == "please pass in at least 1 rpcUrl"
        relay.add_ethereum_chain.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_rpc_urls_checked_before_other_fields(self, connected_adapter, relay):
        response = await connected_adapter.chains.add_ethereum_chain(
            [{"rpcUrls": [], "chainName": "X"}]
        )

        assert response.error.code == 2
        assert response.error.message == "please pass in at least 1 rpcUrl"
        relay.add_ethereum_chain.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_chain_name(self, connected_adapter):
        params = {k: v for k, v in POLYGON.items() if k != "chainName"}
        with pytest.raises(InvalidParamsError, match="chainName is a required field"):
            await connected_adapter.chains.add_ethereum_chain([params])

    @pytest.mark.asyncio
    async def test_blank_chain_name(self, connected_adapter):
        with pytest.raises(InvalidParamsError, match="chainName"):
            await connected_adapter.chains.add_ethereum_chain([{**POLYGON, "chainName": "  "}])

    @pytest.mark.asyncio
    async def test_missing_native_currency(self, connected_adapter):
        params = {k: v for k, v in POLYGON.items() if k != "nativeCurrency"}
        with pytest.raises(InvalidParamsError, match="nativeCurrency is a required field"):
            await connected_adapter.chains.add_ethereum_chain([params])

    @pytest.mark.asyncio
    async def test_refused_chain_is_error_envelope(self, connected_adapter, relay, listener):
        relay.add_ethereum_chain.return_value = RelayResponse.ok(
            "addEthereumChain", {"isApproved": False, "rpcUrl": ""}
        )

        response = await connected_adapter.chains.add_ethereum_chain([POLYGON])

        assert response.error.code == 2
        assert response.error.message == "unable to add ethereum chain"
        assert connected_adapter.session.chain_id == 1
        assert listener.chains == []

    @pytest.mark.asyncio
    async def test_active_chain_is_not_proposed(self, connected_adapter, relay):
        response = await connected_adapter.chains.add_ethereum_chain([{**POLYGON, "chainId": "0x1"}])

        assert response.is_error is True
        relay.add_ethereum_chain.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unauthorized_requests_accounts_first(self, adapter, relay):
        calls = []
        relay.request_ethereum_accounts.side_effect = lambda: calls.append("accounts") or (
            RelayResponse.ok("requestEthereumAccounts", [ADDRESS])
        )
        relay.add_ethereum_chain.side_effect = lambda *args: calls.append("add") or (
            RelayResponse.ok("addEthereumChain", {"isApproved": True, "rpcUrl": ""})
        )

        await adapter.chains.add_ethereum_chain([POLYGON])

        assert calls == ["accounts", "add"]

    @pytest.mark.asyncio
    async def test_invalid_chain_id(self, connected_adapter):
        with pytest.raises(InvalidParamsError):
            await connected_adapter.chains.add_ethereum_chain([{**POLYGON, "chainId": "polygon"}])

    @pytest.mark.asyncio
    async def test_request_returns_null(self, connected_adapter):
        result = await connected_adapter.request({
            "method": "wallet_addEthereumChain",
            "params": [POLYGON],
        })
        assert result is None


class TestSwitchEthereumChain:
    """Tests for wallet_switchEthereumChain."""

    @pytest.mark.asyncio
    async def test_approved_switch(self, connected_adapter, relay, listener):
        response = await connected_adapter.chains.switch_ethereum_chain([{"chainId": "0x89"}])

        assert response.result is None
        assert connected_adapter.session.chain_id == 137
        assert listener.chains[-1] == Chain(id=137, rpc_url="https://polygon.test")
        relay.switch_ethereum_chain.assert_awaited_once_with("137", ADDRESS)

    @pytest.mark.asyncio
    async def test_approval_without_rpc_url_changes_nothing(self, connected_adapter, relay):
        relay.switch_ethereum_chain.return_value = RelayResponse.ok(
            "switchEthereumChain", {"isApproved": True, "rpcUrl": ""}
        )

        await connected_adapter.chains.switch_ethereum_chain([{"chainId": "0x89"}])

        assert connected_adapter.session.chain_id == 1

    @pytest.mark.asyncio
    async def test_error_without_code_is_silent(self, connected_adapter, relay, listener):
        relay.switch_ethereum_chain.return_value = RelayResponse.error(
            "switchEthereumChain", "not supported by this wallet version"
        )

        response = await connected_adapter.chains.switch_ethereum_chain([{"chainId": "0x89"}])

        assert response.is_error is False
        assert connected_adapter.session.chain_id == 1
        assert listener.chains == []

    @pytest.mark.asyncio
    async def test_unrecognized_chain(self, connected_adapter, relay):
        relay.switch_ethereum_chain.return_value = RelayResponse.error(
            "switchEthereumChain", "Unrecognized chain ID.", 4902
        )

        with pytest.raises(UnsupportedChainError) as exc_info:
            await connected_adapter.chains.switch_ethereum_chain([{"chainId": "0x89"}])
        assert exc_info.value.code == 4902

    @pytest.mark.asyncio
    async def test_other_coded_error(self, connected_adapter, relay):
        relay.switch_ethereum_chain.return_value = RelayResponse.error(
            "switchEthereumChain", "User rejected", 4001
        )

        with pytest.raises(ProviderError) as exc_info:
            await connected_adapter.chains.switch_ethereum_chain([{"chainId": "0x89"}])
        assert exc_info.value.code == 4001

    @pytest.mark.asyncio
    async def test_unrecognized_chain_through_request(self, connected_adapter, relay):
        relay.switch_ethereum_chain.return_value = RelayResponse.error(
            "switchEthereumChain", "Unrecognized chain ID.", 4902
        )

        with pytest.raises(EthereumRpcError) as exc_info:
            await connected_adapter.request({
                "method": "wallet_switchEthereumChain",
                "params": [{"chainId": "0x89"}],
            })
        assert exc_info.value.code == 4902
        assert exc_info.value.data == {"method": "wallet_switchEthereumChain"}
        assert connected_adapter.session.rpc_url == RPC_URL


class TestWatchAsset:
    """Tests for wallet_watchAsset."""

    TOKEN = {
        "type": "ERC20",
        "options": {
            "address": "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
            "symbol": "USDC",
            "decimals": 6,
        },
    }

    @pytest.mark.asyncio
    async def test_watch_erc20(self, connected_adapter, relay):
        result = await connected_adapter.request({
            "method": "wallet_watchAsset",
            "params": self.TOKEN,
        })

        assert result is True
        args = relay.watch_asset.await_args.args
        assert args[0] == "ERC20"
        assert args[2] == "USDC"
        assert args[3] == 6
        assert args[5] == "1"

    @pytest.mark.asyncio
    async def test_relay_error_answers_false(self, connected_adapter, relay):
        relay.watch_asset.return_value = RelayResponse.error("watchAsset", "User rejected")

        response = await connected_adapter.chains.watch_asset([self.TOKEN])

        assert response.result is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params,message", [
        ({"options": {"address": "0x1"}}, "Type is required"),
        ({"type": "ERC721", "options": {"address": "0x1"}}, "Asset of type 'ERC721' is not supported"),
        ({"type": "ERC20"}, "Options are required"),
        ({"type": "ERC20", "options": {"symbol": "X"}}, "Address is required"),
    ])
    async def test_validation(self, connected_adapter, params, message):
        with pytest.raises(InvalidParamsError, match=message):
            await connected_adapter.chains.watch_asset([params])
