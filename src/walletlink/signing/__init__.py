"""Message signing and signer recovery through the relay."""

from walletlink.signing.messages import MessageSigner

__all__ = ["MessageSigner"]
