"""JSON-RPC request dispatcher.

Routes one decoded request to its handler and always answers with a single
response envelope. Nothing here is mutated after construction, so one
dispatcher can serve any number of concurrent dispatches.
"""

import logging
from collections.abc import Awaitable, Callable
from types import MappingProxyType
from typing import Any

from gsheets_mcp import SERVER_NAME, __version__
from gsheets_mcp.protocol.envelopes import ErrorObject, JSONRPCRequest, JSONRPCResponse
from gsheets_mcp.protocol.errors import MethodNotFoundError, ProtocolError, ToolExecutionError
from gsheets_mcp.protocol.executor import ToolExecutor
from gsheets_mcp.protocol.registry import list_tools

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

MethodHandler = Callable[[Any], Awaitable[Any]]


class RequestDispatcher:
    """Routes requests by method name.

    Methods:
        initialize: server identity and capabilities.
        tools/list: the tool registry, in order.
        tools/call: delegated to the ToolExecutor.
        ping: empty result.
    """

    def __init__(self, executor: ToolExecutor) -> None:
        self.executor = executor
        self._routes: MappingProxyType[str, MethodHandler] = MappingProxyType(
            {
                "initialize": self._initialize,
                "tools/list": self._tools_list,
                "tools/call": self._tools_call,
                "ping": self._ping,
            }
        )

    async def dispatch(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """Handle one request.

        Args:
            request: Decoded request envelope.

        Returns:
            Response echoing request.id with either a result or an error.
        """
        try:
            handler = self._routes.get(request.method)
            if handler is None:
                raise MethodNotFoundError(request.method)
            result = await handler(request.params)
        except ProtocolError as e:
            return JSONRPCResponse.failure(request.id, ErrorObject.from_exception(e))
        except Exception as e:
            logger.exception(f"Unexpected error handling {request.method}")
            error = ErrorObject.from_exception(ToolExecutionError(str(e) or type(e).__name__))
            return JSONRPCResponse.failure(request.id, error)

        return JSONRPCResponse.success(request.id, result)

    async def _initialize(self, params: Any) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
            "capabilities": {"tools": {}},
        }

    async def _tools_list(self, params: Any) -> dict[str, Any]:
        return {"tools": list_tools()}

    async def _tools_call(self, params: Any) -> dict[str, Any]:
        return await self.executor.call(params)

    async def _ping(self, params: Any) -> dict[str, Any]:
        return {}
