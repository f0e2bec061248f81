"""Google Sheets REST client.

Thin async wrapper over the Sheets v4 API: one coroutine per MCP tool,
each returning a plain dict that is reported back to the caller as JSON.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4"

DEFAULT_READ_RANGE = "Sheet1"


class SheetsAPIError(Exception):
    """Raised when a Sheets API call fails."""


class SheetsClient:
    """Async client for the Google Sheets API.

    Attributes:
        token_provider: Coroutine function returning a valid access token.

    Example:
        ```python
        client = SheetsClient(manager.get_access_token)
        data = await client.read_sheet("1AbC...", "Sheet1!A1:D10")
        await client.close()
        ```
    """

    def __init__(
        self,
        token_provider: Callable[[], Awaitable[str]],
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.token_provider = token_provider
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create shared HTTP client with connection pooling."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _make_request(
        self,
        method: str,
        url: str,
        action: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request to the Sheets API.

        Args:
            method: HTTP method.
            url: Full URL to request.
            action: Failure prefix, e.g. "unable to clear sheet".
            params: Optional query parameters.
            json_data: Optional JSON body.

        Returns:
            JSON response as a dictionary.

        Raises:
            SheetsAPIError: If the request fails.
        """
        access_token = await self.token_provider()
        client = await self._get_http_client()

        try:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SheetsAPIError(f"{action}: {_describe_error(e.response)}") from e
        except httpx.HTTPError as e:
            raise SheetsAPIError(f"{action}: {e}") from e

        result: dict[str, Any] = response.json() if response.content else {}
        return result

    def _values_url(self, spreadsheet_id: str, a1_range: str, suffix: str = "") -> str:
        return (
            f"{SHEETS_API_BASE}/spreadsheets/{quote(spreadsheet_id, safe='')}"
            f"/values/{quote(a1_range, safe='')}{suffix}"
        )

    def _spreadsheet_url(self, spreadsheet_id: str, suffix: str = "") -> str:
        return f"{SHEETS_API_BASE}/spreadsheets/{quote(spreadsheet_id, safe='')}{suffix}"

    async def read_sheet(self, spreadsheet_id: str, read_range: str = "") -> dict[str, Any]:
        """Read values from a range, defaulting to the whole of Sheet1."""
        read_range = read_range or DEFAULT_READ_RANGE

        response = await self._make_request(
            "GET",
            self._values_url(spreadsheet_id, read_range),
            "unable to retrieve data from sheet",
        )

        values = response.get("values", [])
        if not values:
            return {
                "range": response.get("range", read_range),
                "values": [],
                "message": "No data found",
            }

        string_values = [["" if cell is None else str(cell) for cell in row] for row in values]
        return {
            "range": response.get("range", read_range),
            "values": string_values,
            "row_count": len(string_values),
            "col_count": len(string_values[0]),
        }

    async def write_sheet(
        self, spreadsheet_id: str, write_range: str, values: list[list[str]]
    ) -> dict[str, Any]:
        """Overwrite a range with the given rows."""
        response = await self._make_request(
            "PUT",
            self._values_url(spreadsheet_id, write_range),
            "unable to write data to sheet",
            params={"valueInputOption": "USER_ENTERED"},
            json_data={"range": write_range, "values": values},
        )

        return {
            "updated_range": response.get("updatedRange", ""),
            "updated_rows": response.get("updatedRows", 0),
            "updated_columns": response.get("updatedColumns", 0),
            "updated_cells": response.get("updatedCells", 0),
            "message": "Data written successfully",
        }

    async def append_sheet(
        self, spreadsheet_id: str, append_range: str, values: list[list[str]]
    ) -> dict[str, Any]:
        """Append rows after the last row with data in the range."""
        response = await self._make_request(
            "POST",
            self._values_url(spreadsheet_id, append_range, ":append"),
            "unable to append data to sheet",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json_data={"values": values},
        )

        updates = response.get("updates", {})
        return {
            "updated_range": updates.get("updatedRange", ""),
            "updated_rows": updates.get("updatedRows", 0),
            "updated_columns": updates.get("updatedColumns", 0),
            "updated_cells": updates.get("updatedCells", 0),
            "message": "Data appended successfully",
        }

    async def create_spreadsheet(
        self, title: str, sheet_names: list[str] | None = None
    ) -> dict[str, Any]:
        """Create a spreadsheet, optionally with named sheets."""
        body: dict[str, Any] = {"properties": {"title": title}}
        if sheet_names:
            body["sheets"] = [{"properties": {"title": name}} for name in sheet_names]

        response = await self._make_request(
            "POST",
            f"{SHEETS_API_BASE}/spreadsheets",
            "unable to create spreadsheet",
            json_data=body,
        )

        return {
            "spreadsheet_id": response.get("spreadsheetId", ""),
            "spreadsheet_url": response.get("spreadsheetUrl", ""),
            "title": response.get("properties", {}).get("title", title),
            "sheets": [
                s.get("properties", {}).get("title", "") for s in response.get("sheets", [])
            ],
            "message": "Spreadsheet created successfully",
        }

    async def get_spreadsheet_info(self, spreadsheet_id: str) -> dict[str, Any]:
        """Get spreadsheet metadata and per-sheet grid properties."""
        response = await self._make_request(
            "GET",
            self._spreadsheet_url(spreadsheet_id),
            "unable to retrieve spreadsheet info",
        )

        sheets = []
        for sheet in response.get("sheets", []):
            props = sheet.get("properties", {})
            grid = props.get("gridProperties", {})
            sheets.append(
                {
                    "sheet_id": props.get("sheetId", 0),
                    "title": props.get("title", ""),
                    "index": props.get("index", 0),
                    "sheet_type": props.get("sheetType", ""),
                    "row_count": grid.get("rowCount", 0),
                    "col_count": grid.get("columnCount", 0),
                    "frozen_rows": grid.get("frozenRowCount", 0),
                    "frozen_cols": grid.get("frozenColumnCount", 0),
                }
            )

        properties = response.get("properties", {})
        return {
            "spreadsheet_id": response.get("spreadsheetId", spreadsheet_id),
            "title": properties.get("title", ""),
            "locale": properties.get("locale", ""),
            "time_zone": properties.get("timeZone", ""),
            "spreadsheet_url": response.get("spreadsheetUrl", ""),
            "sheets": sheets,
        }

    async def add_sheet(self, spreadsheet_id: str, sheet_name: str) -> dict[str, Any]:
        """Add a new sheet (tab) to a spreadsheet."""
        response = await self._make_request(
            "POST",
            self._spreadsheet_url(spreadsheet_id, ":batchUpdate"),
            "unable to add sheet",
            json_data={"requests": [{"addSheet": {"properties": {"title": sheet_name}}}]},
        )

        replies = response.get("replies", [])
        if replies and replies[0].get("addSheet"):
            props = replies[0]["addSheet"].get("properties", {})
            return {
                "sheet_id": props.get("sheetId", 0),
                "title": props.get("title", sheet_name),
                "index": props.get("index", 0),
                "message": "Sheet added successfully",
            }

        return {"message": "Sheet added successfully"}

    async def clear_sheet(self, spreadsheet_id: str, clear_range: str) -> dict[str, Any]:
        """Clear values (not formatting) in a range."""
        response = await self._make_request(
            "POST",
            self._values_url(spreadsheet_id, clear_range, ":clear"),
            "unable to clear sheet",
            json_data={},
        )

        return {
            "cleared_range": response.get("clearedRange", clear_range),
            "message": "Range cleared successfully",
        }

    async def batch_update(
        self, spreadsheet_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Send raw batchUpdate requests."""
        response = await self._make_request(
            "POST",
            self._spreadsheet_url(spreadsheet_id, ":batchUpdate"),
            "unable to batch update",
            json_data={"requests": requests},
        )

        return {
            "spreadsheet_id": response.get("spreadsheetId", spreadsheet_id),
            "replies_count": len(response.get("replies", [])),
            "message": "Batch update completed successfully",
        }


def _describe_error(response: httpx.Response) -> str:
    """Pull the Google API error message out of a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"HTTP {response.status_code}: {error['message']}"
    return f"HTTP {response.status_code}"
