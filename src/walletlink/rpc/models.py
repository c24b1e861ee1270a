"""JSON-RPC 2.0 envelopes exchanged with the calling application."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from walletlink.errors import InvalidRequestError


class JSONRPCError(BaseModel):
    """Error member of a response."""

    code: int = Field(..., description="JSON-RPC or EIP-1193 error code")
    message: str = Field(..., description="Human-readable error message")
    data: Any = Field(None, description="Optional extra context")

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class JSONRPCRequest(BaseModel):
    """A single JSON-RPC request."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = Field(default="2.0", description="Protocol version")
    id: Any = Field(default=None, description="Correlation id echoed in the response")
    method: StrictStr = Field(..., min_length=1, description="Method name")
    params: Union[list[Any], dict[str, Any]] = Field(
        default_factory=list, description="Positional or named parameters"
    )

    @field_validator("params", mode="before")
    @classmethod
    def _missing_params(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def parse(cls, payload: Any) -> "JSONRPCRequest":
        """Validate a request object from the caller.

        Raises:
            InvalidRequestError: If the payload is not a valid request
        """
        if isinstance(payload, JSONRPCRequest):
            return payload
        if not isinstance(payload, dict):
            raise InvalidRequestError("Request must be an object", data=payload)
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequestError(
                f"Invalid request: {e.errors()[0]['msg']}", data=payload
            ) from e

    def to_dict(self) -> dict:
        return {"jsonrpc": self.jsonrpc, "id": self.id, "method": self.method, "params": self.params}


class JSONRPCResponse(BaseModel):
    """A JSON-RPC response: exactly one of result and error is meaningful."""

    jsonrpc: str = Field(default="2.0", description="Protocol version")
    id: Any = Field(default=0, description="Echo of the request id")
    result: Any = Field(default=None, description="Method result")
    error: Optional[JSONRPCError] = Field(default=None, description="Protocol-level error")

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, result: Any, id: Any = 0) -> "JSONRPCResponse":
        return cls(id=id, result=result)

    @classmethod
    def failure(cls, code: int, message: str, id: Any = 0, data: Any = None) -> "JSONRPCResponse":
        return cls(id=id, error=JSONRPCError(code=code, message=message, data=data))

    @classmethod
    def from_dict(cls, payload: dict) -> "JSONRPCResponse":
        return cls.model_validate(payload)

    def with_id(self, id: Any) -> "JSONRPCResponse":
        return self.model_copy(update={"id": id})

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"jsonrpc": self.jsonrpc, "id": self.id, "error": self.error.to_dict()}
        return {"jsonrpc": self.jsonrpc, "id": self.id, "result": self.result}
