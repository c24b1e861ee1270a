"""Call-shape normalization for the public entry points.

Five legacy call conventions are resolved once into a small union of call
shapes, then served through one path (MethodRouter.dispatch):

- SingleCall: ``send(request)``, synchronous methods only
- BatchCall: ``send([request, ...])``, synchronous, in order, fail-fast
- CallbackCall: ``send(request_or_batch, callback)``, concurrent fan-out
- MethodCall: ``send("method", params)``, awaitable bare result
- ArgumentsCall: ``request({"method": ..., "params": ...})``, awaitable bare result

Callback batches are gathered concurrently. Requests that mutate session
state in the same batch may interleave in any order.
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from walletlink.errors import InvalidRequestError, serialize_error
from walletlink.rpc.models import JSONRPCRequest, JSONRPCResponse
from walletlink.rpc.router import UNHANDLED, MethodRouter

logger = logging.getLogger(__name__)

MISSING: Any = object()

MAX_REQUEST_ID = 0x7FFFFFFF

Callback = Callable[[Optional[Exception], Any], None]


@dataclass
class SingleCall:
    request: JSONRPCRequest


@dataclass
class BatchCall:
    requests: list[JSONRPCRequest]


@dataclass
class CallbackCall:
    payload: Union[JSONRPCRequest, list[JSONRPCRequest]]
    callback: Callback

    @property
    def is_batch(self) -> bool:
        return isinstance(self.payload, list)


@dataclass
class MethodCall:
    request: JSONRPCRequest


@dataclass
class ArgumentsCall:
    request: JSONRPCRequest


SendCall = Union[SingleCall, BatchCall, CallbackCall, MethodCall]


class RequestNormalizer:
    """Resolves call shapes and serves them through the router."""

    def __init__(self, router: MethodRouter):
        self._router = router
        self._next_request_id = 0

    def make_request_id(self) -> int:
        """Next correlation id (1, 2, 3, ... wrapping at 2**31 - 1)."""
        self._next_request_id = (self._next_request_id + 1) % MAX_REQUEST_ID
        return self._next_request_id

    # ------------------------------------------------------------------
    # Shape resolution
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_payload(payload: Any) -> Union[JSONRPCRequest, list[JSONRPCRequest]]:
        if isinstance(payload, (list, tuple)):
            return [JSONRPCRequest.parse(r) for r in payload]
        return JSONRPCRequest.parse(payload)

    def resolve_send(self, request_or_method: Any, callback_or_params: Any = MISSING) -> SendCall:
        """Classify the arguments of a legacy ``send`` call."""
        if isinstance(request_or_method, str):
            if isinstance(callback_or_params, (list, tuple)):
                params = list(callback_or_params)
            elif callback_or_params is MISSING or callback_or_params is None:
                params = []
            else:
                params = [callback_or_params]
            return MethodCall(JSONRPCRequest(id=0, method=request_or_method, params=params))

        if callable(callback_or_params):
            return CallbackCall(self._parse_payload(request_or_method), callback_or_params)

        payload = self._parse_payload(request_or_method)
        if isinstance(payload, list):
            return BatchCall(payload)
        return SingleCall(payload)

    def resolve_arguments(self, args: Any = MISSING) -> ArgumentsCall:
        """Validate ``request()`` arguments and assign a fresh id.

        Raises:
            InvalidRequestError: If args, method or params are malformed
        """
        if not isinstance(args, Mapping):
            raise InvalidRequestError(
                "Expected a single, non-array, object argument.",
                data=None if args is MISSING else args,
            )

        method = args.get("method")
        if not isinstance(method, str) or len(method) == 0:
            raise InvalidRequestError("'args.method' must be a non-empty string.", data=dict(args))

        params = args.get("params", MISSING)
        if params is not MISSING and not isinstance(params, (list, tuple, Mapping)):
            raise InvalidRequestError(
                "'args.params' must be an object or array if provided.", data=dict(args)
            )

        if params is MISSING:
            params = []
        elif isinstance(params, tuple):
            params = list(params)
        elif isinstance(params, Mapping):
            params = dict(params)

        request = JSONRPCRequest(id=self.make_request_id(), method=method, params=params)
        return ArgumentsCall(request)

    # ------------------------------------------------------------------
    # Serving
    # ------------------------------------------------------------------

    def send_single(self, call: SingleCall) -> dict:
        """Serve a synchronous method without suspending.

        Raises:
            RuntimeError: If the method has no synchronous handler
        """
        request = call.request
        result = self._router.handle_synchronous(request)
        if result is UNHANDLED:
            raise RuntimeError(
                f"walletlink does not support calling {request.method} synchronously without "
                f"a callback. Please provide a callback parameter to call {request.method} "
                f"asynchronously."
            )
        return JSONRPCResponse.success(result, id=request.id).to_dict()

    def send_batch(self, call: BatchCall) -> list[dict]:
        """Serve a batch in order; the first failure aborts the rest."""
        return [self.send_single(SingleCall(request)) for request in call.requests]

    async def send_request(self, request: JSONRPCRequest) -> JSONRPCResponse:
        return await self._router.dispatch(request)

    async def send_multiple(self, requests: list[JSONRPCRequest]) -> list[JSONRPCResponse]:
        """Dispatch all requests concurrently, results in input order.

        The first failure fails the whole batch.
        """
        return list(await asyncio.gather(*(self._router.dispatch(r) for r in requests)))

    async def send_with_callback(self, call: CallbackCall) -> None:
        """Serve a request or batch and report through the callback.

        The callback receives ``(None, response)`` or ``(error, None)``;
        errors are already serialized.
        """
        try:
            if call.is_batch:
                responses = await self.send_multiple(call.payload)
                outcome: Any = [r.to_dict() for r in responses]
            else:
                outcome = (await self.send_request(call.payload)).to_dict()
        except Exception as e:
            logger.debug(f"Callback request failed: {e}")
            call.callback(serialize_error(e, call.payload), None)
            return
        call.callback(None, outcome)

    async def send_method_call(self, call: Union[MethodCall, ArgumentsCall]) -> Any:
        """Serve a method or arguments call and return the bare result."""
        response = await self._router.dispatch(call.request)
        return response.result

    async def request(self, args: Any) -> Any:
        return await self.send_method_call(self.resolve_arguments(args))
