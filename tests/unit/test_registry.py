"""Unit tests for the tool registry."""

import pytest
from mcp.types import Tool

from gsheets_mcp.protocol.executor import ToolExecutor
from gsheets_mcp.protocol.registry import (
    TOOL_NAMES,
    TOOLS,
    RegistryError,
    list_tools,
    validate_registry,
)

EXPECTED_TOOLS = [
    "read_sheet",
    "write_sheet",
    "append_sheet",
    "create_spreadsheet",
    "get_spreadsheet_info",
    "add_sheet",
    "clear_sheet",
    "batch_update",
]


def _tool(name: str = "t", description: str = "does things", schema: dict | None = None) -> Tool:
    return Tool(
        name=name,
        description=description,
        inputSchema=schema
        or {"type": "object", "properties": {"x": {"type": "string"}}, "required": ["x"]},
    )


@pytest.mark.unit
class TestToolCatalog:
    """Tests for the fixed tool catalog."""

    def test_should_list_tools_in_order(self) -> None:
        assert list(TOOL_NAMES) == EXPECTED_TOOLS
        assert [tool["name"] for tool in list_tools()] == EXPECTED_TOOLS

    def test_should_pass_validation(self) -> None:
        validate_registry()

    @pytest.mark.parametrize(
        ("name", "required"),
        [
            ("read_sheet", ["spreadsheet_id"]),
            ("write_sheet", ["spreadsheet_id", "range", "values"]),
            ("append_sheet", ["spreadsheet_id", "range", "values"]),
            ("create_spreadsheet", ["title"]),
            ("get_spreadsheet_info", ["spreadsheet_id"]),
            ("add_sheet", ["spreadsheet_id", "sheet_name"]),
            ("clear_sheet", ["spreadsheet_id", "range"]),
            ("batch_update", ["spreadsheet_id", "requests"]),
        ],
    )
    def test_should_declare_required_fields(self, name: str, required: list[str]) -> None:
        schema = next(tool for tool in list_tools() if tool["name"] == name)["inputSchema"]

        assert schema["required"] == required
        assert set(required) <= set(schema["properties"])

    def test_should_describe_values_as_rows_of_strings(self) -> None:
        schema = next(t for t in list_tools() if t["name"] == "write_sheet")["inputSchema"]

        values = schema["properties"]["values"]
        assert values["type"] == "array"
        assert values["items"] == {"type": "array", "items": {"type": "string"}}

    def test_should_return_independent_copies(self) -> None:
        """Verify callers cannot mutate the registry through tools/list output."""
        listed = list_tools()
        listed[0]["inputSchema"]["properties"].clear()

        assert list_tools()[0]["inputSchema"]["properties"]

    def test_should_match_executor_handlers(self, executor: ToolExecutor) -> None:
        """Verify every listed tool is executable and vice versa."""
        assert executor.tool_names == TOOL_NAMES

    def test_should_be_immutable_sequence(self) -> None:
        assert isinstance(TOOLS, tuple)


@pytest.mark.unit
class TestValidateRegistry:
    """Tests for validate_registry()."""

    def test_should_reject_duplicate_names(self) -> None:
        with pytest.raises(RegistryError, match="duplicate tool name"):
            validate_registry((_tool("a"), _tool("a")))

    def test_should_reject_empty_description(self) -> None:
        with pytest.raises(RegistryError, match="description"):
            validate_registry((_tool(description=""),))

    def test_should_reject_non_object_schema(self) -> None:
        with pytest.raises(RegistryError, match="type must be 'object'"):
            validate_registry((_tool(schema={"type": "array", "properties": {"x": {}}}),))

    def test_should_reject_empty_properties(self) -> None:
        with pytest.raises(RegistryError, match="must declare properties"):
            validate_registry((_tool(schema={"type": "object", "properties": {}}),))

    def test_should_reject_unknown_property_type(self) -> None:
        schema = {"type": "object", "properties": {"x": {"type": "date"}}}

        with pytest.raises(RegistryError, match="unsupported type"):
            validate_registry((_tool(schema=schema),))

    def test_should_reject_required_field_without_property(self) -> None:
        schema = {
            "type": "object",
            "properties": {"x": {"type": "string"}},
            "required": ["x", "y"],
        }

        with pytest.raises(RegistryError, match="required fields not in properties"):
            validate_registry((_tool(schema=schema),))
