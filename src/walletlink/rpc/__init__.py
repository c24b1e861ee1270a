"""JSON-RPC envelopes, method routing and call normalization.

Routing lives in walletlink.rpc.router and call-shape handling in
walletlink.rpc.normalizer; both are imported from their modules.
"""

from walletlink.rpc.methods import SYNCHRONOUS_METHODS, RpcMethod
from walletlink.rpc.models import JSONRPCError, JSONRPCRequest, JSONRPCResponse

__all__ = [
    "JSONRPCError",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "RpcMethod",
    "SYNCHRONOUS_METHODS",
]
