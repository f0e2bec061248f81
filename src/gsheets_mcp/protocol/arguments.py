"""Argument decoders for tools/call.

One model per tool, mirroring the input schemas in the registry. Unknown
keys are ignored; cell values must be strings.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr


class _ToolArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ToolCallParams(BaseModel):
    """The params block of a tools/call request."""

    model_config = ConfigDict(extra="ignore")

    name: StrictStr = ""
    arguments: Any = None


class ReadSheetArgs(_ToolArguments):
    spreadsheet_id: str
    range: str = ""


class WriteSheetArgs(_ToolArguments):
    spreadsheet_id: str
    range: str
    values: list[list[str]]


class AppendSheetArgs(_ToolArguments):
    spreadsheet_id: str
    range: str
    values: list[list[str]]


class CreateSpreadsheetArgs(_ToolArguments):
    title: str
    sheets: list[str] = []


class GetSpreadsheetInfoArgs(_ToolArguments):
    spreadsheet_id: str


class AddSheetArgs(_ToolArguments):
    spreadsheet_id: str
    sheet_name: str


class ClearSheetArgs(_ToolArguments):
    spreadsheet_id: str
    range: str


class BatchUpdateArgs(_ToolArguments):
    spreadsheet_id: str
    requests: list[dict[str, Any]]
