"""tools/call execution."""

import json
import logging
from collections.abc import Awaitable, Callable
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from mcp.types import TextContent
from pydantic import ValidationError

from gsheets_mcp.protocol.arguments import (
    AddSheetArgs,
    AppendSheetArgs,
    BatchUpdateArgs,
    ClearSheetArgs,
    CreateSpreadsheetArgs,
    GetSpreadsheetInfoArgs,
    ReadSheetArgs,
    ToolCallParams,
    WriteSheetArgs,
)
from gsheets_mcp.protocol.errors import InvalidParamsError, ToolExecutionError, ToolNotFoundError

if TYPE_CHECKING:
    from gsheets_mcp.sheets.client import SheetsClient

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Awaitable[Any]]


class ToolExecutor:
    """Decodes tools/call params and runs the matching backend operation.

    Attributes:
        backend: Sheets client exposing one coroutine per tool.
    """

    def __init__(self, backend: "SheetsClient") -> None:
        self.backend = backend
        self._handlers: MappingProxyType[str, ToolHandler] = MappingProxyType(
            {
                "read_sheet": self._read_sheet,
                "write_sheet": self._write_sheet,
                "append_sheet": self._append_sheet,
                "create_spreadsheet": self._create_spreadsheet,
                "get_spreadsheet_info": self._get_spreadsheet_info,
                "add_sheet": self._add_sheet,
                "clear_sheet": self._clear_sheet,
                "batch_update": self._batch_update,
            }
        )

    @property
    def tool_names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    async def call(self, params: Any) -> dict[str, Any]:
        """Execute a tools/call request.

        Args:
            params: Raw params block of the request.

        Returns:
            Result with a single text content item holding the tool output as JSON.

        Raises:
            InvalidParamsError: If params is not {name, arguments}.
            ToolNotFoundError: If the tool is not registered.
            ToolExecutionError: If argument decoding or the backend call fails.
        """
        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError as e:
            raise InvalidParamsError(data=str(e)) from e

        handler = self._handlers.get(call.name)
        if handler is None:
            raise ToolNotFoundError(call.name)

        try:
            result = await handler(call.arguments if call.arguments is not None else {})
        except Exception as e:
            logger.warning(f"Tool {call.name} failed: {e}")
            raise ToolExecutionError(str(e)) from e

        content = TextContent(type="text", text=json.dumps(result, indent=2, default=str))
        return {"content": [content.model_dump(exclude_none=True, by_alias=True)]}

    async def _read_sheet(self, arguments: Any) -> Any:
        args = ReadSheetArgs.model_validate(arguments)
        return await self.backend.read_sheet(args.spreadsheet_id, args.range)

    async def _write_sheet(self, arguments: Any) -> Any:
        args = WriteSheetArgs.model_validate(arguments)
        return await self.backend.write_sheet(args.spreadsheet_id, args.range, args.values)

    async def _append_sheet(self, arguments: Any) -> Any:
        args = AppendSheetArgs.model_validate(arguments)
        return await self.backend.append_sheet(args.spreadsheet_id, args.range, args.values)

    async def _create_spreadsheet(self, arguments: Any) -> Any:
        args = CreateSpreadsheetArgs.model_validate(arguments)
        return await self.backend.create_spreadsheet(args.title, args.sheets)

    async def _get_spreadsheet_info(self, arguments: Any) -> Any:
        args = GetSpreadsheetInfoArgs.model_validate(arguments)
        return await self.backend.get_spreadsheet_info(args.spreadsheet_id)

    async def _add_sheet(self, arguments: Any) -> Any:
        args = AddSheetArgs.model_validate(arguments)
        return await self.backend.add_sheet(args.spreadsheet_id, args.sheet_name)

    async def _clear_sheet(self, arguments: Any) -> Any:
        args = ClearSheetArgs.model_validate(arguments)
        return await self.backend.clear_sheet(args.spreadsheet_id, args.range)

    async def _batch_update(self, arguments: Any) -> Any:
        args = BatchUpdateArgs.model_validate(arguments)
        return await self.backend.batch_update(args.spreadsheet_id, args.requests)
