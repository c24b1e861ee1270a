"""Error taxonomy and translation for the provider boundary.

Two families of failures exist:
- EthereumRpcError and subclasses carry a JSON-RPC / EIP-1193 code and are
  safe to hand to the calling application as ``{code, message, data}``.
- Plain exceptions (validation helpers, relay error envelopes) are internal;
  ``serialize_error`` converts them at every public entry point.
"""

import copy
import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


class RpcErrorCode:
    """Standard JSON-RPC 2.0 and EIP-1193 error codes."""
    PARSE = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL = -32603
    INVALID_INPUT = -32000
    RESOURCE_NOT_FOUND = -32001
    RESOURCE_UNAVAILABLE = -32002
    TRANSACTION_REJECTED = -32003
    METHOD_NOT_SUPPORTED = -32004
    LIMIT_EXCEEDED = -32005

    USER_REJECTED_REQUEST = 4001
    UNAUTHORIZED = 4100
    UNSUPPORTED_METHOD = 4200
    DISCONNECTED = 4900
    CHAIN_DISCONNECTED = 4901
    UNSUPPORTED_CHAIN = 4902


# Code used by the legacy protocol for error envelopes returned (not raised)
# from wallet_addEthereumChain.
ADD_CHAIN_ERROR_CODE = 2

DEFAULT_MESSAGES = {
    RpcErrorCode.PARSE: "Invalid JSON was received by the server.",
    RpcErrorCode.INVALID_REQUEST: "The JSON sent is not a valid Request object.",
    RpcErrorCode.METHOD_NOT_FOUND: "The method does not exist / is not available.",
    RpcErrorCode.INVALID_PARAMS: "Invalid method parameter(s).",
    RpcErrorCode.INTERNAL: "Internal JSON-RPC error.",
    RpcErrorCode.USER_REJECTED_REQUEST: "User rejected the request.",
    RpcErrorCode.UNAUTHORIZED: (
        "The requested account and/or method has not been authorized by the user."
    ),
    RpcErrorCode.UNSUPPORTED_METHOD: (
        "The requested method is not supported by this Ethereum provider."
    ),
    RpcErrorCode.DISCONNECTED: "The provider is disconnected from all chains.",
    RpcErrorCode.CHAIN_DISCONNECTED: "The provider is disconnected from the specified chain.",
    RpcErrorCode.UNSUPPORTED_CHAIN: "Unrecognized chain ID.",
}

USER_DENIED_MESSAGE_SIGNATURE = "User denied message signature"
USER_DENIED_ACCOUNT_AUTHORIZATION = "User denied account authorization"
USER_DENIED_TRANSACTION_SIGNATURE = "User denied transaction signature"

_REJECTION_PATTERN = re.compile(r"(denied|rejected)", re.IGNORECASE)


def message_for_code(code: int) -> str:
    """Get the default message for an error code."""
    return DEFAULT_MESSAGES.get(code, DEFAULT_MESSAGES[RpcErrorCode.INTERNAL])


class EthereumRpcError(Exception):
    """Error with a JSON-RPC code, safe to expose to the caller."""

    def __init__(self, code: int, message: Optional[str] = None, data: Any = None):
        self.code = code
        self.message = message or message_for_code(code)
        self.data = data
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Wire shape ``{code, message, data?}``."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code}, message={self.message!r})"


class InvalidRequestError(EthereumRpcError):
    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(RpcErrorCode.INVALID_REQUEST, message, data)


class InvalidParamsError(EthereumRpcError):
    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(RpcErrorCode.INVALID_PARAMS, message, data)


class InternalError(EthereumRpcError):
    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(RpcErrorCode.INTERNAL, message, data)


class ProviderError(EthereumRpcError):
    """EIP-1193 provider error (codes 1000-4999)."""

    def __init__(self, code: int, message: Optional[str] = None, data: Any = None):
        if not 1000 <= code <= 4999:
            raise ValueError(f"Provider error code must be in 1000-4999, got {code}")
        super().__init__(code, message, data)


class UserRejectedRequestError(ProviderError):
    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(RpcErrorCode.USER_REJECTED_REQUEST, message, data)


class UnauthorizedError(ProviderError):
    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(RpcErrorCode.UNAUTHORIZED, message, data)


class UnsupportedMethodError(ProviderError):
    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(RpcErrorCode.UNSUPPORTED_METHOD, message, data)


class UnsupportedChainError(ProviderError):
    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(RpcErrorCode.UNSUPPORTED_CHAIN, message, data)


class AddressUnavailableError(ValueError):
    """No sender given and no account selected."""

    def __init__(self, message: str = "Ethereum address is unavailable"):
        super().__init__(message)


class UnknownAddressError(ValueError):
    """Address is not among the authorized accounts."""

    def __init__(self, message: str = "Unknown Ethereum address"):
        super().__init__(message)


class RelayError(Exception):
    """The relay answered with an error envelope."""

    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None):
        self.message = message
        self.code = code
        self.method = method
        super().__init__(message)


def is_rejection(error: BaseException) -> bool:
    """Check whether a failure signals a human-denied action."""
    return bool(_REJECTION_PATTERN.search(str(error)))


def translate_relay_failure(error: Exception, rejection_message: str) -> Exception:
    """Remap a relay failure once.

    Returns a UserRejectedRequestError when the failure message matches the
    rejection pattern, otherwise the original error unchanged.
    """
    if is_rejection(error):
        logger.info(f"Relay reported rejection: {error}")
        return UserRejectedRequestError(rejection_message)
    return error


def _method_from(request_or_method: Any) -> Optional[str]:
    if isinstance(request_or_method, str):
        return request_or_method
    if isinstance(request_or_method, dict):
        method = request_or_method.get("method")
        return method if isinstance(method, str) else None
    method = getattr(request_or_method, "method", None)
    return method if isinstance(method, str) else None


def serialize_error(error: BaseException, request_or_method: Any = None) -> EthereumRpcError:
    """Normalize any failure into a structured EthereumRpcError.

    Args:
        error: The escaping exception
        request_or_method: The request, method name or batch being served

    Returns:
        EthereumRpcError carrying ``{code, message, data}``. RPC errors keep
        their class and code; anything else becomes an internal error.
    """
    if isinstance(error, EthereumRpcError):
        serialized = copy.copy(error)
        method = _method_from(request_or_method)
        if method and serialized.data is None:
            serialized.data = {"method": method}
        return serialized

    if isinstance(error, RelayError):
        method = error.method or _method_from(request_or_method)
        code = error.code if isinstance(error.code, int) else RpcErrorCode.INTERNAL
        return EthereumRpcError(code, error.message, {"method": method} if method else None)

    method = _method_from(request_or_method)
    data: dict[str, Any] = {"originalError": error.__class__.__name__}
    if method:
        data["method"] = method
    return InternalError(str(error) or None, data)


@contextmanager
def remap_rejection(rejection_message: str) -> Iterator[None]:
    """Translate relay failures raised inside the block.

    Example:
        with remap_rejection(USER_DENIED_TRANSACTION_SIGNATURE):
            result = (await relay.sign_ethereum_transaction(tx)).unwrap()
    """
    try:
        yield
    except Exception as e:
        translated = translate_relay_failure(e, rejection_message)
        if translated is e:
            raise
        raise translated from e
