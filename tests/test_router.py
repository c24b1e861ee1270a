"""Tests for method classification and routing."""

import pytest

from conftest import ADDRESS, RPC_URL
from walletlink.errors import InternalError
from walletlink.rpc import RpcMethod, SYNCHRONOUS_METHODS
from walletlink.rpc.models import JSONRPCRequest
from walletlink.rpc.router import UNHANDLED


class TestRpcMethod:
    def test_lookup(self):
        assert RpcMethod.lookup("eth_chainId") is RpcMethod.ETH_CHAIN_ID
        assert RpcMethod.lookup("eth_getBalance") is None

    def test_synchronous_set(self):
        assert {m.value for m in SYNCHRONOUS_METHODS} == {
            "eth_accounts",
            "eth_coinbase",
            "net_version",
            "eth_chainId",
        }
        assert RpcMethod.ETH_ACCOUNTS.is_synchronous
        assert not RpcMethod.ETH_REQUEST_ACCOUNTS.is_synchronous


class TestSynchronousMethods:
    """Synchronous methods are answered from session state."""

    def test_defaults(self, adapter, relay_factory):
        router = adapter.router

        assert router.handle_synchronous(JSONRPCRequest(method="eth_accounts")) == []
        assert router.handle_synchronous(JSONRPCRequest(method="eth_coinbase")) is None
        assert router.handle_synchronous(JSONRPCRequest(method="net_version")) == "1"
        assert router.handle_synchronous(JSONRPCRequest(method="eth_chainId")) == "0x1"
        relay_factory.assert_not_called()

    def test_reflects_session(self, connected_adapter):
        connected_adapter.session.update_provider_info("https://polygon.test", 137)
        router = connected_adapter.router

        assert router.handle_synchronous(JSONRPCRequest(method="eth_accounts")) == [ADDRESS]
        assert router.handle_synchronous(JSONRPCRequest(method="eth_coinbase")) == ADDRESS
        assert router.handle_synchronous(JSONRPCRequest(method="net_version")) == "137"
        assert router.handle_synchronous(JSONRPCRequest(method="eth_chainId")) == "0x89"

    def test_async_methods_are_unhandled(self, adapter):
        request = JSONRPCRequest(method="eth_requestAccounts")
        assert adapter.router.handle_synchronous(request) is UNHANDLED


class TestDispatch:
    """Tests for MethodRouter.dispatch."""

    @pytest.mark.asyncio
    async def test_synchronous_method_echoes_id(self, adapter):
        response = await adapter.router.dispatch(JSONRPCRequest(id=7, method="eth_chainId"))
        assert response.to_dict() == {"jsonrpc": "2.0", "id": 7, "result": "0x1"}

    @pytest.mark.asyncio
    async def test_local_handler_echoes_id(self, adapter):
        response = await adapter.router.dispatch(
            JSONRPCRequest(id="abc", method="eth_requestAccounts")
        )
        assert response.id == "abc"
        assert response.result == [ADDRESS]

    @pytest.mark.asyncio
    async def test_unknown_method_is_forwarded(self, adapter, relay):
        request = JSONRPCRequest(id=5, method="eth_getBalance", params=[ADDRESS, "latest"])

        response = await adapter.router.dispatch(request)

        relay.make_ethereum_jsonrpc_request.assert_awaited_once_with(
            {
                "jsonrpc": "2.0",
                "id": 5,
                "method": "eth_getBalance",
                "params": [ADDRESS, "latest"],
            },
            RPC_URL,
        )
        assert response.id == 5
        assert response.result == "0x10"

    @pytest.mark.asyncio
    async def test_forwarding_uses_active_chain_url(self, adapter, relay):
        adapter.session.update_provider_info("https://polygon.test", 137)

        await adapter.router.dispatch(JSONRPCRequest(id=1, method="eth_blockNumber"))

        assert relay.make_ethereum_jsonrpc_request.await_args.args[1] == "https://polygon.test"

    @pytest.mark.asyncio
    async def test_malformed_node_response(self, adapter, relay):
        payload = {"jsonrpc": "2.0", "id": 1, "error": {"code": "oops"}}
        relay.make_ethereum_jsonrpc_request.return_value = payload

        with pytest.raises(InternalError) as exc_info:
            await adapter.router.dispatch(JSONRPCRequest(id=1, method="eth_blockNumber"))

        assert exc_info.value.code == -32603
        assert exc_info.value.message == "Malformed JSON-RPC response for eth_blockNumber"
        assert exc_info.value.data == payload
