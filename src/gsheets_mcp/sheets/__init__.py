"""Google Sheets API backend."""

from gsheets_mcp.sheets.client import SheetsAPIError, SheetsClient

__all__ = ["SheetsAPIError", "SheetsClient"]
