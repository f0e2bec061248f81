"""Line-oriented JSON-RPC protocol engine for the Sheets MCP server."""

from gsheets_mcp.protocol.dispatcher import PROTOCOL_VERSION, RequestDispatcher
from gsheets_mcp.protocol.envelopes import (
    ErrorObject,
    JSONRPCRequest,
    JSONRPCResponse,
    decode_request,
    decode_response,
    encode_response,
)
from gsheets_mcp.protocol.errors import ErrorCode, ProtocolError, RequestDecodeError
from gsheets_mcp.protocol.executor import ToolExecutor
from gsheets_mcp.protocol.registry import TOOL_NAMES, TOOLS

__all__ = [
    "PROTOCOL_VERSION",
    "TOOLS",
    "TOOL_NAMES",
    "ErrorCode",
    "ErrorObject",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "ProtocolError",
    "RequestDecodeError",
    "RequestDispatcher",
    "ToolExecutor",
    "decode_request",
    "decode_response",
    "encode_response",
]
