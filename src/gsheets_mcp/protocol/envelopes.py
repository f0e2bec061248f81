"""JSON-RPC 2.0 envelopes and line codec."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, model_validator

from gsheets_mcp.protocol.errors import ProtocolError, RequestDecodeError

JSONRPC_VERSION = "2.0"


class JSONRPCRequest(BaseModel):
    """Inbound request envelope.

    id is opaque: whatever JSON value the caller sent is echoed back
    unchanged, including its type.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    method: StrictStr
    params: Any = None

    @property
    def is_notification(self) -> bool:
        """True when the caller sent no id member at all."""
        return "id" not in self.model_fields_set


class ErrorObject(BaseModel):
    """Error member of a response envelope."""

    model_config = ConfigDict(frozen=True)

    code: int
    message: str
    data: Any = None

    @classmethod
    def from_exception(cls, exc: ProtocolError) -> "ErrorObject":
        return cls(code=int(exc.code), message=exc.message, data=exc.data)

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class JSONRPCResponse(BaseModel):
    """Outbound response envelope carrying exactly one of result or error."""

    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: ErrorObject | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "JSONRPCResponse":
        if (self.result is None) == (self.error is None):
            raise ValueError("response must carry exactly one of result or error")
        return self

    @classmethod
    def success(cls, request_id: Any, result: Any) -> "JSONRPCResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, error: ErrorObject) -> "JSONRPCResponse":
        return cls(id=request_id, error=error)

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.to_wire()
        else:
            payload["result"] = self.result
        return payload


def decode_request(line: str | bytes) -> JSONRPCRequest:
    """Parse one transport line into a request envelope.

    Raises:
        RequestDecodeError: If the line is not JSON or not a request object.
    """
    try:
        payload = json.loads(line)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RequestDecodeError(f"invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise RequestDecodeError("request must be a JSON object")

    try:
        return JSONRPCRequest.model_validate(payload)
    except ValidationError as e:
        raise RequestDecodeError(f"invalid request envelope: {e}") from e


def encode_response(response: JSONRPCResponse) -> str:
    """Serialize a response envelope to a single line (no trailing newline)."""
    return json.dumps(response.to_wire(), separators=(",", ":"))


def decode_response(line: str | bytes) -> JSONRPCResponse:
    """Parse a response line, enforcing the result/error exclusivity."""
    payload = json.loads(line)
    if not isinstance(payload, dict):
        raise ValueError("response must be a JSON object")
    if "result" in payload and "error" in payload:
        raise ValueError("response must not carry both result and error")
    return JSONRPCResponse.model_validate(payload)
