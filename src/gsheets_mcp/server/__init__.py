"""MCP server implementation for Google Sheets.

Provides 8 tools:
- read_sheet, write_sheet, append_sheet, clear_sheet
- create_spreadsheet, get_spreadsheet_info, add_sheet
- batch_update

Transport: line-delimited JSON-RPC over stdio
Authentication: OAuth 2.0 with automatic token refresh
"""

from gsheets_mcp.server.sheets_server import GoogleSheetsServer, create_server, main

__all__ = ["create_server", "GoogleSheetsServer", "main"]
