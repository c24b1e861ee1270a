"""EIP-712 typed data signing.

Canonicalizes the payload, hashes it with the variant matching the method
name, and asks the relay to sign the digest. The original document is
passed along pretty-printed so the wallet can show what is being signed.
"""

import json
import logging
from enum import Enum
from typing import Any, Callable, Optional

from walletlink.errors import UnsupportedMethodError
from walletlink.session.guard import AuthorizationGuard
from walletlink.signing.messages import MessageSigner
from walletlink.typed_data.eip712 import (
    hash_for_sign_typed_data_legacy,
    hash_for_sign_typed_data_v3,
    hash_for_sign_typed_data_v4,
)
from walletlink.utils.encoding import ensure_address_string, ensure_parsed_json_object, param_at

logger = logging.getLogger(__name__)

TypedDataHasher = Callable[[Any], bytes]


class TypedDataVersion(str, Enum):
    """Supported typed data hashing procedures."""
    V1 = "v1"   # legacy flat list
    V3 = "v3"
    V4 = "v4"


DEFAULT_HASHERS: dict[TypedDataVersion, TypedDataHasher] = {
    TypedDataVersion.V1: hash_for_sign_typed_data_legacy,
    TypedDataVersion.V3: hash_for_sign_typed_data_v3,
    TypedDataVersion.V4: hash_for_sign_typed_data_v4,
}


class TypedDataSigner:
    """Signs typed data documents for authorized accounts."""

    def __init__(
        self,
        guard: AuthorizationGuard,
        message_signer: MessageSigner,
        hashers: Optional[dict[TypedDataVersion, TypedDataHasher]] = None,
    ):
        self._guard = guard
        self._message_signer = message_signer
        self._hashers = dict(DEFAULT_HASHERS)
        if hashers:
            self._hashers.update(hashers)

    async def sign(self, version: TypedDataVersion, params: Any) -> Any:
        """Sign typed data.

        Args:
            version: Hashing procedure
            params: ``[data, address]`` for v1, ``[address, data]`` for v3/v4

        Returns:
            Signature as returned by the wallet
        """
        self._guard.require_authorization()

        if version == TypedDataVersion.V1:
            typed_data = ensure_parsed_json_object(param_at(params, 0))
            address = ensure_address_string(param_at(params, 1))
        else:
            address = ensure_address_string(param_at(params, 0))
            typed_data = ensure_parsed_json_object(param_at(params, 1))

        self._guard.ensure_known_address(address)

        digest = self._hashers[version](typed_data)
        typed_data_json = json.dumps(typed_data, indent=2, ensure_ascii=False)
        logger.debug(f"Signing typed data {version.value} for {address}")

        return await self._message_signer.sign(digest, address, False, typed_data_json)

    async def sign_v2(self, params: Any) -> Any:
        """eth_signTypedData_v2 is intentionally not supported."""
        raise UnsupportedMethodError()
