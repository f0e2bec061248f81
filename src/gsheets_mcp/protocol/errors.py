"""Protocol error taxonomy.

ProtocolError subclasses carry the code and message that end up in the
response error object. RequestDecodeError is a framing failure: the line
could not be turned into a request, so there is no id to answer.
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """JSON-RPC error codes used by this server."""

    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    TOOL_EXECUTION_ERROR = -32000


class RequestDecodeError(Exception):
    """Raised when a transport line is not a valid request envelope."""


class ProtocolError(Exception):
    """Base class for failures reported back to the caller as error objects."""

    code: ErrorCode = ErrorCode.TOOL_EXECUTION_ERROR

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


class MethodNotFoundError(ProtocolError):
    """Unknown JSON-RPC method."""

    code = ErrorCode.METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        super().__init__(f"Method not found: {method}")


class ToolNotFoundError(ProtocolError):
    """tools/call named a tool that is not registered."""

    code = ErrorCode.METHOD_NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")


class InvalidParamsError(ProtocolError):
    """tools/call params are not {name, arguments}."""

    code = ErrorCode.INVALID_PARAMS

    def __init__(self, data: Any = None) -> None:
        super().__init__("Invalid params", data)


class ToolExecutionError(ProtocolError):
    """A tool handler failed, including malformed tool arguments."""

    code = ErrorCode.TOOL_EXECUTION_ERROR
