"""Tests for settings and JSON-RPC envelopes."""

import pytest

from walletlink.config import Settings
from walletlink.errors import InvalidRequestError
from walletlink.rpc.models import JSONRPCRequest, JSONRPCResponse


class TestSettings:
    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("WALLETLINK_APP_NAME", "Env DApp")
        monkeypatch.setenv("WALLETLINK_STORAGE_SCOPE", "custom")

        settings = Settings(_env_file=None)

        assert settings.app_name == "Env DApp"
        assert settings.storage_scope == "custom"

    def test_private_keys_are_redacted(self):
        settings = Settings(_env_file=None, local_private_keys="0x01, 0x02,")

        assert settings.private_keys == ["0x01", "0x02"]
        safe = settings.get_safe_dict()
        assert safe["local_private_keys"] == "(2 configured)"
        assert "0x01" not in str(safe)

    def test_adapter_arguments_win(self, storage):
        from walletlink.adapter import RelayAdapter

        settings = Settings(_env_file=None, app_name="From Settings", storage_scope="s")
        adapter = RelayAdapter(app_name="Explicit", storage=storage, settings=settings)

        assert adapter.app_name == "Explicit"
        assert adapter.storage is storage

    def test_default_storage_is_scoped(self):
        from walletlink.adapter import RelayAdapter

        adapter = RelayAdapter(settings=Settings(_env_file=None, storage_scope="dapp"))
        adapter.session.update_provider_info("https://x.test", 5)

        assert adapter.storage.backend.get_item("-dapp:DefaultChainId") == "5"


class TestJsonRpcModels:
    """Tests for request and response envelopes."""

    def test_parse_defaults(self):
        request = JSONRPCRequest.parse({"method": "eth_chainId", "params": None})
        assert request.params == []
        assert request.jsonrpc == "2.0"

    @pytest.mark.parametrize("payload", [
        "eth_chainId",
        {"method": 5},
        {"method": ""},
        {"method": "eth_call", "params": "0x"},
    ])
    def test_parse_rejects(self, payload):
        with pytest.raises(InvalidRequestError):
            JSONRPCRequest.parse(payload)

    def test_response_shapes(self):
        assert JSONRPCResponse.success("0x1", id=2).to_dict() == {
            "jsonrpc": "2.0", "id": 2, "result": "0x1",
        }
        failure = JSONRPCResponse.failure(2, "unable to add ethereum chain", id=3)
        assert failure.to_dict() == {
            "jsonrpc": "2.0", "id": 3, "error": {"code": 2, "message": "unable to add ethereum chain"},
        }

    def test_from_dict_with_id(self):
        response = JSONRPCResponse.from_dict({"jsonrpc": "2.0", "id": 99, "result": None})
        assert response.with_id(4).id == 4
        assert response.id == 99
