"""MCP server exposing Google Sheets over a line-delimited JSON-RPC protocol."""

from gsheets_mcp.__version__ import __version__

SERVER_NAME = "mcp-google-sheets"

__all__ = ["SERVER_NAME", "__version__"]
