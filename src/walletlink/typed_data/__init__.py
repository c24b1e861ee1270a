"""EIP-712 typed data hashing and signing."""

from walletlink.typed_data.eip712 import (
    hash_for_sign_typed_data_legacy,
    hash_for_sign_typed_data_v3,
    hash_for_sign_typed_data_v4,
)
from walletlink.typed_data.signer import TypedDataSigner, TypedDataVersion

__all__ = [
    "TypedDataSigner",
    "TypedDataVersion",
    "hash_for_sign_typed_data_legacy",
    "hash_for_sign_typed_data_v3",
    "hash_for_sign_typed_data_v4",
]
