"""Message signing through the relay.

Signing flow:
1. Check the signing address is an authorized account
2. Ask the relay to sign (personal prefix optional)
3. Unwrap the relay envelope
4. Remap user denials to UserRejectedRequestError

Shared by eth_sign, personal_sign and the typed-data methods.
"""

import logging
from typing import Any, Callable, Optional

from walletlink.errors import USER_DENIED_MESSAGE_SIGNATURE, remap_rejection
from walletlink.relay.base import RelayTransport
from walletlink.session.guard import AuthorizationGuard

logger = logging.getLogger(__name__)


class MessageSigner:
    """Signs messages and recovers signers via the relay."""

    def __init__(self, guard: AuthorizationGuard, ensure_relay: Callable[[], RelayTransport]):
        self._guard = guard
        self._ensure_relay = ensure_relay

    async def sign(
        self,
        message: bytes,
        address: str,
        add_prefix: bool,
        typed_data_json: Optional[str] = None,
    ) -> Any:
        """Sign a message with an authorized account.

        Args:
            message: Message bytes, or a 32-byte digest for typed data
            address: Canonical signing address
            add_prefix: Apply the personal-message prefix
            typed_data_json: Typed data rendering for the wallet UI

        Returns:
            Signature as returned by the wallet

        Raises:
            UnknownAddressError: Address is not authorized
            UserRejectedRequestError: The user denied the request
        """
        self._guard.ensure_known_address(address)

        with remap_rejection(USER_DENIED_MESSAGE_SIGNATURE):
            relay = self._ensure_relay()
            response = await relay.sign_ethereum_message(
                message, address, add_prefix, typed_data_json
            )
            return response.unwrap()

    async def recover_address(self, message: bytes, signature: bytes, add_prefix: bool) -> Any:
        """Recover the address that produced a signature."""
        relay = self._ensure_relay()
        response = await relay.ethereum_address_from_signed_message(message, signature, add_prefix)
        return response.unwrap()
