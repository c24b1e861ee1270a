"""Session state: authorized accounts and the active chain."""

from walletlink.session.guard import AuthorizationGuard
from walletlink.session.state import (
    ADDRESSES_KEY,
    DEFAULT_CHAIN_ID,
    DEFAULT_CHAIN_ID_KEY,
    DEFAULT_JSON_RPC_URL_KEY,
    Chain,
    SessionListener,
    SessionState,
)

__all__ = [
    "ADDRESSES_KEY",
    "DEFAULT_CHAIN_ID",
    "DEFAULT_CHAIN_ID_KEY",
    "DEFAULT_JSON_RPC_URL_KEY",
    "AuthorizationGuard",
    "Chain",
    "SessionListener",
    "SessionState",
]
