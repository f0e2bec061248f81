"""Google Sheets MCP server.

Wires the credential provider, the Sheets client and the protocol engine
together and serves them over stdio. Credentials are acquired once at
startup; the browser authorization flow runs here if no token is stored.
"""

import asyncio
import logging
import sys
from typing import TextIO

from gsheets_mcp.auth import OAuthManager
from gsheets_mcp.config import OAuthClientConfig, load_config
from gsheets_mcp.protocol.dispatcher import RequestDispatcher
from gsheets_mcp.protocol.executor import ToolExecutor
from gsheets_mcp.server.stdio import serve_lines
from gsheets_mcp.sheets.client import SheetsClient

# Configure logging (stderr; stdout carries the protocol)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s:%(lineno)d %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


class GoogleSheetsServer:
    """MCP server for the Google Sheets API.

    Attributes:
        manager: Credential provider.
        client: Sheets API client.
        dispatcher: JSON-RPC request dispatcher.
    """

    def __init__(
        self,
        manager: OAuthManager,
        client: SheetsClient | None = None,
    ) -> None:
        self.manager = manager
        self.client = client or SheetsClient(manager.get_access_token)
        self.dispatcher = RequestDispatcher(ToolExecutor(self.client))

    async def run(self, reader: TextIO | None = None, writer: TextIO | None = None) -> None:
        """Acquire credentials, then serve stdio until EOF."""
        await self.manager.obtain()
        logger.info(f"Credentials loaded from {self.manager.token_path}")

        try:
            await serve_lines(self.dispatcher, reader or sys.stdin, writer or sys.stdout)
        finally:
            await self.client.close()


def create_server(config: OAuthClientConfig | None = None) -> GoogleSheetsServer:
    """Create a server from explicit or environment configuration.

    Raises:
        ConfigError: If no OAuth client configuration can be found.
    """
    return GoogleSheetsServer(OAuthManager(config or load_config()))


def main() -> None:
    """Entry point for the Google Sheets MCP server."""
    server = create_server()
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
