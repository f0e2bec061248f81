"""Tool registry.

The catalog is fixed at import time and listed in this order by tools/list.
"""

import copy

from mcp.types import Tool

_SPREADSHEET_ID = {
    "type": "string",
    "description": "The ID of the Google Spreadsheet (from the URL)",
}

_ROWS = {
    "type": "array",
    "items": {"type": "string"},
}

TOOLS: tuple[Tool, ...] = (
    Tool(
        name="read_sheet",
        description=(
            "Read data from a Google Sheet. Specify the spreadsheet ID and optional range "
            "(e.g., 'Sheet1!A1:D10'). If no range is provided, reads the entire first sheet."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "spreadsheet_id": _SPREADSHEET_ID,
                "range": {
                    "type": "string",
                    "description": (
                        "The A1 notation range to read (e.g., 'Sheet1!A1:D10'). "
                        "Optional - defaults to entire first sheet."
                    ),
                },
            },
            "required": ["spreadsheet_id"],
        },
    ),
    Tool(
        name="write_sheet",
        description=(
            "Write data to a Google Sheet. Specify the spreadsheet ID, range, and data as a "
            "2D array. Data overwrites existing content in the range."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "spreadsheet_id": _SPREADSHEET_ID,
                "range": {
                    "type": "string",
                    "description": "The A1 notation range to write to (e.g., 'Sheet1!A1:D10')",
                },
                "values": {
                    "type": "array",
                    "description": (
                        "2D array of values to write (array of rows, each row is an array "
                        "of cell values)"
                    ),
                    "items": _ROWS,
                },
            },
            "required": ["spreadsheet_id", "range", "values"],
        },
    ),
    Tool(
        name="append_sheet",
        description=(
            "Append data to a Google Sheet. Adds new rows after the last row with data in "
            "the specified range."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "spreadsheet_id": _SPREADSHEET_ID,
                "range": {
                    "type": "string",
                    "description": "The A1 notation range (e.g., 'Sheet1!A:D' or 'Sheet1')",
                },
                "values": {
                    "type": "array",
                    "description": "2D array of values to append (array of rows)",
                    "items": _ROWS,
                },
            },
            "required": ["spreadsheet_id", "range", "values"],
        },
    ),
    Tool(
        name="create_spreadsheet",
        description=(
            "Create a new Google Spreadsheet with the specified title and optional sheet names."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "The title of the new spreadsheet",
                },
                "sheets": {
                    "type": "array",
                    "description": (
                        "Optional array of sheet names to create. If not provided, creates "
                        "one default sheet."
                    ),
                    "items": {"type": "string"},
                },
            },
            "required": ["title"],
        },
    ),
    Tool(
        name="get_spreadsheet_info",
        description=(
            "Get metadata about a spreadsheet including title, sheets, and properties."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "spreadsheet_id": _SPREADSHEET_ID,
            },
            "required": ["spreadsheet_id"],
        },
    ),
    Tool(
        name="add_sheet",
        description="Add a new sheet (tab) to an existing spreadsheet.",
        inputSchema={
            "type": "object",
            "properties": {
                "spreadsheet_id": _SPREADSHEET_ID,
                "sheet_name": {
                    "type": "string",
                    "description": "The name for the new sheet",
                },
            },
            "required": ["spreadsheet_id", "sheet_name"],
        },
    ),
    Tool(
        name="clear_sheet",
        description="Clear all data in a specified range of a Google Sheet.",
        inputSchema={
            "type": "object",
            "properties": {
                "spreadsheet_id": _SPREADSHEET_ID,
                "range": {
                    "type": "string",
                    "description": (
                        "The A1 notation range to clear (e.g., 'Sheet1!A1:D10' or 'Sheet1')"
                    ),
                },
            },
            "required": ["spreadsheet_id", "range"],
        },
    ),
    Tool(
        name="batch_update",
        description=(
            "Perform multiple update operations on a spreadsheet in a single request. "
            "Supports formatting, adding sheets, and more complex operations."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "spreadsheet_id": _SPREADSHEET_ID,
                "requests": {
                    "type": "array",
                    "description": (
                        "Array of update request objects (see Google Sheets API "
                        "documentation for request format)"
                    ),
                    "items": {"type": "object"},
                },
            },
            "required": ["spreadsheet_id", "requests"],
        },
    ),
)

TOOL_NAMES: tuple[str, ...] = tuple(tool.name for tool in TOOLS)

_PRIMITIVE_TYPES = {"string", "integer", "number", "boolean", "array", "object"}


class RegistryError(Exception):
    """Raised when a tool descriptor breaks the registry invariants."""


def validate_registry(tools: tuple[Tool, ...] = TOOLS) -> None:
    """Check every descriptor against the registry invariants.

    Raises:
        RegistryError: On the first malformed descriptor.
    """
    seen: set[str] = set()
    for tool in tools:
        if tool.name in seen:
            raise RegistryError(f"duplicate tool name: {tool.name}")
        seen.add(tool.name)

        if not tool.description:
            raise RegistryError(f"{tool.name}: description must not be empty")

        schema = tool.inputSchema
        if schema.get("type") != "object":
            raise RegistryError(f"{tool.name}: input schema type must be 'object'")

        properties = schema.get("properties") or {}
        if not properties:
            raise RegistryError(f"{tool.name}: input schema must declare properties")

        for prop_name, prop in properties.items():
            prop_type = prop.get("type")
            if prop_type not in _PRIMITIVE_TYPES:
                raise RegistryError(f"{tool.name}.{prop_name}: unsupported type {prop_type!r}")

        missing = [field for field in schema.get("required", []) if field not in properties]
        if missing:
            raise RegistryError(f"{tool.name}: required fields not in properties: {missing}")


def list_tools() -> list[dict]:
    """Render the registry for a tools/list result."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": copy.deepcopy(tool.inputSchema),
        }
        for tool in TOOLS
    ]


validate_registry()
