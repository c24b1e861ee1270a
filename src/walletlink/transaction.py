"""Transaction parameter normalization.

Turns the loosely typed transaction object of eth_sendTransaction /
eth_signTransaction into a TransactionDescriptor for the relay. NO signing
happens here.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from walletlink.errors import AddressUnavailableError, InvalidParamsError
from walletlink.session.guard import AuthorizationGuard
from walletlink.session.state import SessionState
from walletlink.utils.encoding import (
    ensure_address_string,
    ensure_big_int,
    ensure_bytes,
    ensure_int_number,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionDescriptor:
    """Canonical transaction handed to the relay.

    Optional gas fields stay None when the caller did not set them, so the
    wallet can tell "unspecified" apart from an explicit zero.
    """
    from_address: str
    to_address: Optional[str]
    wei_value: int
    data: bytes
    nonce: Optional[int]
    gas_price_wei: Optional[int]
    max_fee_per_gas: Optional[int]
    max_priority_fee_per_gas: Optional[int]
    gas_limit: Optional[int]
    chain_id: int

    @property
    def is_eip1559(self) -> bool:
        return self.max_fee_per_gas is not None or self.max_priority_fee_per_gas is not None

    def to_dict(self) -> dict:
        """JSON-friendly view with hex quantities."""
        def _hex(value: Optional[int]) -> Optional[str]:
            return hex(value) if value is not None else None

        return {
            "from": self.from_address,
            "to": self.to_address,
            "value": hex(self.wei_value),
            "data": "0x" + self.data.hex(),
            "nonce": self.nonce,
            "gasPrice": _hex(self.gas_price_wei),
            "maxFeePerGas": _hex(self.max_fee_per_gas),
            "maxPriorityFeePerGas": _hex(self.max_priority_fee_per_gas),
            "gas": _hex(self.gas_limit),
            "chainId": self.chain_id,
        }


class TransactionParamsBuilder:
    """Validates raw transaction objects against the current session."""

    def __init__(self, session: SessionState, guard: AuthorizationGuard):
        self._session = session
        self._guard = guard

    def build(self, tx: Any) -> TransactionDescriptor:
        """Build a descriptor from a raw transaction object.

        Args:
            tx: Mapping with from/to/value/data/nonce/gas fields (all optional)

        Returns:
            TransactionDescriptor with defaults from the session

        Raises:
            AddressUnavailableError: No sender given and no account selected
            UnauthorizedError: No account has been authorized
            UnknownAddressError: Sender is not an authorized account
            InvalidParamsError: A field cannot be parsed
        """
        if tx is None:
            tx = {}
        if not isinstance(tx, dict):
            raise InvalidParamsError(f"Transaction must be an object, got {type(tx).__name__}")

        from_address = (
            ensure_address_string(tx["from"]) if tx.get("from") else self._session.selected_address
        )
        if not from_address:
            raise AddressUnavailableError()

        self._guard.require_authorization()
        self._guard.ensure_known_address(from_address)

        descriptor = TransactionDescriptor(
            from_address=from_address,
            to_address=ensure_address_string(tx["to"]) if tx.get("to") else None,
            wei_value=_optional(tx, "value", ensure_big_int, default=0),
            data=ensure_bytes(tx["data"]) if tx.get("data") else b"",
            nonce=_optional(tx, "nonce", ensure_int_number),
            gas_price_wei=_optional(tx, "gasPrice", ensure_big_int),
            max_fee_per_gas=_optional(tx, "maxFeePerGas", ensure_big_int),
            max_priority_fee_per_gas=_optional(tx, "maxPriorityFeePerGas", ensure_big_int),
            gas_limit=_optional(tx, "gas", ensure_big_int),
            chain_id=(
                ensure_int_number(tx["chainId"]) if tx.get("chainId") else self._session.chain_id
            ),
        )
        logger.debug(f"Prepared transaction from {from_address} on chain {descriptor.chain_id}")
        return descriptor


def _optional(tx: dict, key: str, parse, default=None):
    value = tx.get(key)
    return parse(value) if value is not None else default
